from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from vizlab.charts.base import Chart, ViewModel
from vizlab.charts.registry import get_chart
from vizlab.config import AppConfig
from vizlab.controller import ChartController
from vizlab.io.write import write_summary, write_table
from vizlab.paths import OutputPaths, build_output_paths
from vizlab.pipeline.build import build_records
from vizlab.viz.render import render_figure

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartRun:
    chart: str
    view_path: Path
    figure_path: Path | None
    coercion_report_path: Path


def _initial_state(
    chart: Chart, overrides: dict[str, str] | None
) -> tuple[Any, Any, pd.DataFrame]:
    records, report = build_records(chart)
    default_state = chart.initial_state(records)
    state = chart.apply_overrides(default_state, overrides or {}, records)
    if chart.dataset_key(state) != chart.dataset_key(default_state):
        records, report = build_records(chart, state)
    return records, state, report


def open_chart(
    name: str,
    config: AppConfig,
    overrides: dict[str, str] | None = None,
    renderer: Callable[[ViewModel], Any] | None = None,
) -> tuple[ChartController, pd.DataFrame]:
    """Load a chart's data and wrap it in a controller with the requested state."""
    chart = get_chart(name, config)
    records, state, report = _initial_state(chart, overrides)
    controller = ChartController(
        chart,
        records,
        state,
        loader=lambda new_state: build_records(chart, new_state)[0],
        renderer=renderer,
    )
    return controller, report


def render_view(
    view_model: ViewModel,
    paths: OutputPaths,
    config: AppConfig,
    *,
    stem: str | None = None,
    with_figure: bool = True,
) -> tuple[Path, Path | None]:
    stem = stem or view_model.chart
    view_path = write_summary(view_model.to_dict(), paths.views / f"{stem}.json")
    figure_path = None
    if with_figure and config.outputs.render_figures:
        try:
            figure_path = render_figure(
                view_model,
                paths.figures / f"{stem}.{config.outputs.figures_format}",
                dpi=config.outputs.figure_dpi,
            )
        except Exception:  # pragma: no cover
            LOGGER.exception("Failed rendering figure for %s", view_model.chart)
    return view_path, figure_path


def _write_coercion_report(
    name: str, report: pd.DataFrame, paths: OutputPaths, config: AppConfig
) -> Path:
    suffix = config.outputs.tables_format
    return write_table(
        report,
        paths.tables / f"{name}__coercion_gaps.{suffix}",
        fmt=suffix,
    )


def run_chart(
    name: str,
    out_dir: Path,
    config: AppConfig,
    overrides: dict[str, str] | None = None,
) -> ChartRun:
    paths = build_output_paths(out_dir)
    controller, report = open_chart(name, config, overrides)
    view_path, figure_path = render_view(controller.view(), paths, config)
    report_path = _write_coercion_report(name, report, paths, config)
    LOGGER.info("Rendered %s to %s", name, view_path)
    return ChartRun(
        chart=name,
        view_path=view_path,
        figure_path=figure_path,
        coercion_report_path=report_path,
    )


def play_chart(
    name: str,
    out_dir: Path,
    config: AppConfig,
    overrides: dict[str, str] | None = None,
    *,
    max_ticks: int | None = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> list[Path]:
    """Run the play loop, writing one view JSON per rendered frame."""
    paths = build_output_paths(out_dir)
    frames_dir = paths.views / name
    frames_dir.mkdir(parents=True, exist_ok=True)
    frames: list[Path] = []

    def write_frame(view_model: ViewModel) -> None:
        path = frames_dir / f"frame_{len(frames):04d}.json"
        frames.append(write_summary(view_model.to_dict(), path))

    controller, _ = open_chart(name, config, overrides, renderer=write_frame)
    controller.render()
    ticks = controller.play(max_ticks=max_ticks, sleep=sleep)
    LOGGER.info("Played %s for %d ticks (%d frames)", name, ticks, len(frames))
    return frames


def export_chart(
    name: str,
    out_dir: Path,
    config: AppConfig,
    overrides: dict[str, str] | None = None,
) -> Path:
    """Write the rows currently on screen as CSV."""
    paths = build_output_paths(out_dir)
    controller, _ = open_chart(name, config, overrides)
    frame = controller.chart.export(controller.records, controller.state)
    return write_table(frame, paths.exports / f"{name}.csv", fmt="csv")
