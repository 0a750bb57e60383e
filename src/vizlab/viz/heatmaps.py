from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import LinearSegmentedColormap

from vizlab.viz.common import save_figure


def plot_correlation_matrices(view: dict[str, Any], output_path: Path) -> Path | None:
    matrices = view["data"]["matrices"]
    attributes = view["domains"]["attributes"]
    if not matrices or not attributes:
        return None
    domain = view["domains"]["color_domain"]
    colormap = LinearSegmentedColormap.from_list(
        "correlation",
        list(zip(domain, view["domains"]["color_range"])),
    )

    fig, axes = plt.subplots(1, len(matrices), figsize=(6 * len(matrices), 5.5), squeeze=False)
    for ax, matrix in zip(axes[0], matrices):
        values = np.array(matrix["matrix"], dtype=float)
        image = ax.imshow(values, cmap=colormap, vmin=domain[0], vmax=domain[-1])
        for row in range(len(attributes)):
            for col in range(len(attributes)):
                ax.text(col, row, f"{values[row, col]:.2f}", ha="center", va="center", fontsize=6)
        ax.set_xticks(range(len(attributes)))
        ax.set_xticklabels(attributes, rotation=90, fontsize=7)
        ax.set_yticks(range(len(attributes)))
        ax.set_yticklabels(attributes, fontsize=7)
        ax.set_title(f"{matrix['title']} (n={matrix['n_records']})")
    fig.colorbar(image, ax=axes[0, -1], fraction=0.046)
    return save_figure(output_path)
