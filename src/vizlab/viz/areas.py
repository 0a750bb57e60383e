from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from vizlab.viz.common import save_figure


def _as_array(values: list[float | None]) -> np.ndarray:
    return np.array([np.nan if value is None else value for value in values], dtype=float)


def plot_stacked_areas(view: dict[str, Any], output_path: Path) -> Path | None:
    years = view["data"]["years"]
    layers = view["data"]["layers"]
    if not years or not layers:
        return None

    fig, ax = plt.subplots(figsize=(12, 5))
    for layer in layers:
        ax.fill_between(
            years,
            _as_array(layer["lower"]),
            _as_array(layer["upper"]),
            color=layer["color"],
            label=layer["key"],
            linewidth=0,
        )
    ax.set_xlim(*view["domains"]["x"])
    ax.set_ylim(*view["domains"]["y"])
    ax.set_title(view["data"]["label"])
    ax.set_xlabel("Year")
    ax.set_ylabel("Annual CO2 emissions")
    ax.legend(loc="upper left", fontsize=8)
    return save_figure(output_path)


def plot_theme_river(view: dict[str, Any], output_path: Path) -> Path | None:
    dates = pd.to_datetime(pd.Series(view["data"]["dates"]))
    layers = view["data"]["layers"]
    if dates.empty or not layers:
        return None

    fig, ax = plt.subplots(figsize=(12, 5))
    for layer in layers:
        ax.fill_between(
            dates,
            _as_array(layer["lower"]),
            _as_array(layer["upper"]),
            color=layer["color"],
            label=layer["label"],
            alpha=0.8,
            linewidth=0,
        )
    ax.set_ylim(*view["domains"]["y"])
    ax.set_title("Property Sales Themeriver")
    ax.set_xlabel("Year")
    ax.set_ylabel("Median Price ($)")
    ax.legend(loc="upper left", fontsize=8)
    return save_figure(output_path)


def plot_horizon(view: dict[str, Any], output_path: Path) -> Path | None:
    stations = view["data"]["stations"]
    if not stations:
        return None
    bands = int(view["data"]["bands"])
    colors = view["domains"]["color"]
    band_size = view["domains"]["y"][1] / bands

    fig, axes = plt.subplots(
        len(stations), 1, figsize=(12, max(2, 0.4 * len(stations))), sharex=True, squeeze=False
    )
    for ax, station in zip(axes[:, 0], stations):
        points = station["points"]
        dates = pd.to_datetime(pd.Series([point["date"] for point in points]))
        values = _as_array([point["value"] for point in points])
        # Each band shows the slice of the value above its floor, folded down onto the baseline.
        for band in range(bands):
            folded = np.clip(values - band * band_size, 0, band_size)
            ax.fill_between(dates, 0, folded, color=colors[band], linewidth=0)
        ax.set_ylim(0, band_size)
        ax.set_yticks([])
        ax.set_ylabel(str(station["station"]), rotation=0, ha="right", va="center", fontsize=7)
    axes[0, 0].set_title(view["data"]["legend_label"])
    return save_figure(output_path)
