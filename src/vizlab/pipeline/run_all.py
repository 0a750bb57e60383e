from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from vizlab.config import AppConfig
from vizlab.errors import LoadError
from vizlab.io.write import write_summary
from vizlab.paths import build_output_paths
from vizlab.pipeline.run_chart import ChartRun, run_chart

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunAllResult:
    rendered: dict[str, ChartRun] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)


def run_all(out_dir: Path, config: AppConfig) -> RunAllResult:
    """Render every configured chart with its default state.

    A chart whose data cannot be loaded stays unrendered; the others still run.
    """
    paths = build_output_paths(out_dir)
    result = RunAllResult()
    for name in config.charts:
        try:
            result.rendered[name] = run_chart(name, out_dir, config)
        except LoadError as exc:
            result.failed[name] = str(exc)
    write_summary(
        {
            "rendered": {
                name: {
                    "view": str(run.view_path),
                    "figure": str(run.figure_path) if run.figure_path else None,
                }
                for name, run in result.rendered.items()
            },
            "failed": result.failed,
        },
        paths.views / "index.json",
    )
    if result.failed:
        LOGGER.warning("Charts left unrendered: %s", ", ".join(sorted(result.failed)))
    return result
