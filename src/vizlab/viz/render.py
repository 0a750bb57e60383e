from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import matplotlib.pyplot as plt

from vizlab.charts.base import ViewModel
from vizlab.viz.areas import plot_horizon, plot_stacked_areas, plot_theme_river
from vizlab.viz.bars import plot_bar_race_frame, plot_stacked_bars
from vizlab.viz.heatmaps import plot_correlation_matrices
from vizlab.viz.points import plot_parallel_coordinates, plot_scatter, plot_scatter_matrix

Plotter = Callable[[dict[str, Any], Path], "Path | None"]

# Choropleth maps and Sankey layouts need a projection or a node layout; they
# are written as view JSON only.
FIGURE_PLOTTERS: dict[str, Plotter] = {
    "bar_race": plot_bar_race_frame,
    "stacked_area": plot_stacked_areas,
    "scatter": plot_scatter,
    "parallel": plot_parallel_coordinates,
    "correlation": plot_correlation_matrices,
    "splom": plot_scatter_matrix,
    "stacked_bar": plot_stacked_bars,
    "theme_river": plot_theme_river,
    "horizon": plot_horizon,
}


def render_figure(view_model: ViewModel, output_path: Path, dpi: int = 100) -> Path | None:
    plotter = FIGURE_PLOTTERS.get(view_model.chart)
    if plotter is None:
        return None
    with plt.rc_context({"figure.dpi": dpi}):
        return plotter(view_model.to_dict(), output_path)
