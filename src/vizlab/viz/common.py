from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt


def save_figure(path: Path) -> Path:
    """Write the current figure at its own dpi and release it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    figure = plt.gcf()
    figure.tight_layout()
    figure.savefig(path, dpi="figure")
    plt.close(figure)
    return path
