from __future__ import annotations

from pathlib import Path

import typer

from vizlab.charts.registry import CHART_TYPES
from vizlab.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from vizlab.errors import LoadError
from vizlab.logging import configure_logging
from vizlab.pipeline.run_all import run_all
from vizlab.pipeline.run_chart import export_chart, play_chart, run_chart

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _parse_overrides(values: list[str] | None) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--set")
        overrides[key.strip()] = value
    return overrides


def _require_chart(name: str) -> str:
    if name not in CHART_TYPES:
        raise typer.BadParameter(
            f"Unknown chart {name!r}. Expected one of: {', '.join(CHART_TYPES)}",
            param_hint="--chart",
        )
    return name


def _fail_load(exc: LoadError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command()
def charts(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """List the charts the config enables."""
    cfg = _load_app_config(config)
    for name in cfg.charts:
        typer.echo(name)


@app.command()
def view(
    chart: str = typer.Option(..., help="Chart to render."),
    set_: list[str] | None = typer.Option(
        None, "--set", help="State field override as key=value; repeatable."
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Render one chart for the given state."""
    configure_logging()
    cfg = _load_app_config(config)
    name = _require_chart(chart)
    overrides = _parse_overrides(set_)
    try:
        run = run_chart(name, out, cfg, overrides)
    except LoadError as exc:
        raise _fail_load(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"View written to: {run.view_path}")
    if run.figure_path is not None:
        typer.echo(f"Figure written to: {run.figure_path}")


@app.command()
def play(
    chart: str = typer.Option(..., help="Chart with a play control."),
    set_: list[str] | None = typer.Option(
        None, "--set", help="State field override as key=value; repeatable."
    ),
    ticks: int | None = typer.Option(None, min=1, help="Stop after this many ticks."),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Run the play timer for a chart, writing every frame."""
    configure_logging()
    cfg = _load_app_config(config)
    name = _require_chart(chart)
    overrides = _parse_overrides(set_)
    try:
        frames = play_chart(name, out, cfg, overrides, max_ticks=ticks)
    except LoadError as exc:
        raise _fail_load(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Play complete. Frames: {len(frames)}")


@app.command()
def export(
    chart: str = typer.Option("stacked_bar", help="Chart whose current view is exported."),
    set_: list[str] | None = typer.Option(
        None, "--set", help="State field override as key=value; repeatable."
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Write the displayed rows of a chart as CSV."""
    configure_logging()
    cfg = _load_app_config(config)
    name = _require_chart(chart)
    overrides = _parse_overrides(set_)
    try:
        path = export_chart(name, out, cfg, overrides)
    except LoadError as exc:
        raise _fail_load(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Export written to: {path}")


@app.command("run-all")
def run_all_command(
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """Render every configured chart with its default state."""
    configure_logging()
    cfg = _load_app_config(config)
    result = run_all(out, cfg)
    for name, message in sorted(result.failed.items()):
        typer.echo(f"Error: {name}: {message}", err=True)
    typer.echo(f"Run complete. Charts rendered: {len(result.rendered)}")
    if result.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
