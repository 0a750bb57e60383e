from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

import numpy as np
import pandas as pd

StackOffset = Literal["none", "wiggle"]


@dataclass(frozen=True)
class StackedLayers:
    keys: tuple[str, ...]
    lower: np.ndarray
    upper: np.ndarray

    def values(self) -> np.ndarray:
        return self.upper - self.lower

    def totals(self) -> np.ndarray:
        return self.values().sum(axis=0)

    def domain(self) -> tuple[float, float]:
        if self.lower.size == 0:
            return 0.0, 0.0
        return float(self.lower.min()), float(self.upper.max())

    def layer(self, key: str) -> tuple[np.ndarray, np.ndarray]:
        index = self.keys.index(key)
        return self.lower[index], self.upper[index]


def _wiggle_baseline(values: np.ndarray) -> np.ndarray:
    """Streamgraph baseline that minimises the weighted slope of every layer."""
    n_points = values.shape[1]
    baseline = np.zeros(n_points, dtype=float)
    if values.shape[0] == 0 or n_points < 2:
        return baseline
    current = values[:, 1:]
    deltas = current - values[:, :-1]
    below = np.cumsum(deltas, axis=0) - deltas
    weighted = ((deltas / 2.0) + below) * current
    totals = current.sum(axis=0)
    numerators = weighted.sum(axis=0)
    steps = np.divide(numerators, totals, out=np.zeros_like(numerators), where=totals != 0)
    baseline[1:] = -np.cumsum(steps)
    return baseline


def stack_values(
    values: np.ndarray,
    keys: Sequence[str],
    offset: StackOffset = "none",
) -> StackedLayers:
    """Stack a (layers x points) matrix; missing values count as zero."""
    matrix = np.nan_to_num(np.asarray(values, dtype=float), nan=0.0)
    if matrix.ndim != 2 or matrix.shape[0] != len(keys):
        raise ValueError("values must be a 2-d array with one row per key")
    baseline = _wiggle_baseline(matrix) if offset == "wiggle" else np.zeros(matrix.shape[1])
    upper = baseline + np.cumsum(matrix, axis=0)
    lower = upper - matrix
    return StackedLayers(keys=tuple(keys), lower=lower, upper=upper)


def stack_frame(
    frame: pd.DataFrame,
    keys: Sequence[str],
    offset: StackOffset = "none",
) -> StackedLayers:
    """Stack the given columns of a frame in key order, one point per row."""
    missing = [key for key in keys if key not in frame.columns]
    if missing:
        raise ValueError(f"Cannot stack missing columns: {', '.join(missing)}")
    if not keys:
        empty = np.zeros((0, len(frame)), dtype=float)
        return StackedLayers(keys=(), lower=empty, upper=empty)
    matrix = frame[list(keys)].apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float).T
    return stack_values(matrix, keys, offset=offset)
