from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt

from vizlab.viz.common import save_figure


def plot_scatter(view: dict[str, Any], output_path: Path) -> Path | None:
    points = view["data"]["points"]
    if not points:
        return None
    state = view["state"]
    plt.figure(figsize=(7, 6))
    plt.scatter(
        [point["x"] for point in points],
        [point["y"] for point in points],
        c=[point["color"] for point in points],
        s=18,
    )
    plt.title("Iris Scatter Plot")
    plt.xlabel(state["x_attr"])
    plt.ylabel(state["y_attr"])
    return save_figure(output_path)


def plot_parallel_coordinates(view: dict[str, Any], output_path: Path) -> Path | None:
    lines = view["data"]["lines"]
    if not lines:
        return None
    positions = view["domains"]["x"]

    fig, ax = plt.subplots(figsize=(10, 5))
    for line in lines:
        ax.plot(
            [point[0] for point in line["points"]],
            [point[1] for point in line["points"]],
            color=line["color"],
            alpha=0.4,
            linewidth=1,
        )
    for dimension, position in positions.items():
        ax.axvline(position, color="black", linewidth=0.8)
        ax.text(position, 0, dimension, ha="center", va="bottom", fontsize=8)
    ax.invert_yaxis()
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_title("Iris Parallel Coordinates")
    return save_figure(output_path)


def plot_scatter_matrix(view: dict[str, Any], output_path: Path) -> Path | None:
    points = view["data"]["points"]
    attributes = list(view["domains"]["attributes"])
    if not points or not attributes:
        return None
    size = len(attributes)

    fig, axes = plt.subplots(size, size, figsize=(2.5 * size, 2.5 * size), squeeze=False)
    for cell in view["data"]["cells"]:
        ax = axes[cell["j"], cell["i"]]
        if cell["i"] == cell["j"]:
            for bin_ in view["data"]["histograms"][cell["x"]]:
                for segment in bin_["segments"]:
                    ax.bar(
                        bin_["x0"],
                        segment["upper"] - segment["lower"],
                        width=bin_["x1"] - bin_["x0"],
                        bottom=segment["lower"],
                        color=segment["color"],
                        align="edge",
                        edgecolor="white",
                        linewidth=0.3,
                    )
        else:
            ax.scatter(
                [point["values"][cell["x"]] for point in points],
                [point["values"][cell["y"]] for point in points],
                c=["#cccccc" if point["hidden"] else point["color"] for point in points],
                s=4,
            )
        ax.set_xticks([])
        ax.set_yticks([])
        if cell["j"] == size - 1:
            ax.set_xlabel(cell["x"], fontsize=8)
        if cell["i"] == 0:
            ax.set_ylabel(cell["y"], fontsize=8)
    return save_figure(output_path)
