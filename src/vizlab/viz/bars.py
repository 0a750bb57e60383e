from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt

from vizlab.viz.common import save_figure


def plot_bar_race_frame(view: dict[str, Any], output_path: Path) -> Path | None:
    data = view["data"]
    values = data["values"]
    if not values:
        return None
    countries = [item["country"] for item in values][::-1]
    amounts = [item["value"] for item in values][::-1]
    colors = [item["color"] for item in values][::-1]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.barh(countries, amounts, color=colors)
    x_max = view["domains"]["x"][1]
    if x_max:
        ax.set_xlim(0, x_max * 1.05)
    ax.set_title(data.get("title") or "")
    ax.text(
        0.98,
        0.05,
        str(data["year"]),
        transform=ax.transAxes,
        ha="right",
        fontsize=28,
        alpha=0.4,
    )
    return save_figure(output_path)


def plot_stacked_bars(view: dict[str, Any], output_path: Path) -> Path | None:
    bars = view["data"]["bars"]
    if not bars:
        return None
    names = [bar["name"] for bar in bars][::-1]

    fig, ax = plt.subplots(figsize=(10, max(3, 0.3 * len(bars))))
    drawn: set[str] = set()
    for position, bar in enumerate(reversed(bars)):
        for segment in bar["segments"]:
            label = segment["label"] if segment["key"] not in drawn else None
            drawn.add(segment["key"])
            ax.barh(
                position,
                (segment["upper"] or 0.0) - (segment["lower"] or 0.0),
                left=segment["lower"] or 0.0,
                color=segment["color"],
                label=label,
            )
    ax.set_yticks(range(len(names)))
    ax.set_yticklabels(names, fontsize=7)
    ax.set_xlim(*view["domains"]["x"])
    ax.set_xlabel("Score")
    ax.set_title("University scores by category")
    if drawn:
        ax.legend(loc="lower right", fontsize=7)
    return save_figure(output_path)
