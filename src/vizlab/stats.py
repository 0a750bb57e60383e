from __future__ import annotations

import math
from bisect import bisect_left
from typing import Sequence

import numpy as np
import pandas as pd


def pearson(x: Sequence[float] | np.ndarray, y: Sequence[float] | np.ndarray) -> float:
    """Pearson correlation from running sums; 0.0 when either series has no spread."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.shape != ys.shape:
        raise ValueError("correlation inputs must have the same length")
    n = float(xs.size)
    if n == 0:
        return 0.0
    sum_x = xs.sum()
    sum_y = ys.sum()
    numerator = (n * (xs * ys).sum()) - (sum_x * sum_y)
    spread = ((n * (xs * xs).sum()) - sum_x * sum_x) * ((n * (ys * ys).sum()) - sum_y * sum_y)
    if not math.isfinite(spread) or spread <= 0.0:
        return 0.0
    return float(np.clip(numerator / math.sqrt(spread), -1.0, 1.0))


def correlation_matrix(frame: pd.DataFrame, columns: Sequence[str]) -> list[list[float]]:
    arrays = {column: frame[column].to_numpy(dtype=float) for column in columns}
    return [[pearson(arrays[row], arrays[col]) for col in columns] for row in columns]


def nearest_index(positions: Sequence, target) -> int | None:
    """Index of the position closest to ``target`` in a sorted sequence.

    Ties between the left and right neighbour resolve to the left one.
    """
    n = len(positions)
    if n == 0:
        return None
    index = bisect_left(positions, target, 1)
    if index >= n:
        return n - 1
    left = positions[index - 1]
    right = positions[index]
    return index if (target - left) > (right - target) else index - 1
