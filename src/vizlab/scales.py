from __future__ import annotations

import math
from bisect import bisect_right
from typing import Sequence

import numpy as np
import pandas as pd

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def extent(values: pd.Series | Sequence[float]) -> tuple[float, float] | None:
    """Return (min, max) ignoring missing values, or None when nothing is left."""
    series = pd.to_numeric(pd.Series(values, dtype="float64"), errors="coerce").dropna()
    if series.empty:
        return None
    return float(series.min()), float(series.max())


def nice_ticks(start: float, stop: float, count: int) -> list[float]:
    """Round tick values spanning [start, stop], about ``count`` of them (1-2-5 steps)."""
    if count <= 0 or not math.isfinite(start) or not math.isfinite(stop):
        return []
    if start == stop:
        return [float(start)]
    reverse = stop < start
    if reverse:
        start, stop = stop, start

    step = (stop - start) / count
    power = math.floor(math.log10(step))
    error = step / (10**power)
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = (10 ** (-power)) / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        ticks = [(i1 + i) / inc for i in range(max(0, i2 - i1 + 1))]
    else:
        inc = (10**power) * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
        ticks = [float((i1 + i) * inc) for i in range(max(0, i2 - i1 + 1))]
    return ticks[::-1] if reverse else ticks


def linear_scale(
    values: np.ndarray | Sequence[float],
    domain: tuple[float, float],
    output_range: tuple[float, float],
) -> np.ndarray:
    """Map values linearly; a degenerate domain maps everything to the range midpoint."""
    values = np.asarray(values, dtype=float)
    d0, d1 = domain
    r0, r1 = output_range
    span = d1 - d0
    if span == 0:
        normalized = np.full(values.shape, 0.5)
    else:
        normalized = (values - d0) / span
    return r0 + normalized * (r1 - r0)


def point_positions(
    labels: Sequence[str],
    output_range: tuple[float, float],
    padding: float = 1.0,
) -> dict[str, float]:
    """Evenly spaced positions for categorical axes, with outer padding in steps."""
    n = len(labels)
    if n == 0:
        return {}
    start, stop = output_range
    step = (stop - start) / max(1.0, n - 1 + padding * 2)
    start += (stop - start - step * (n - 1 + padding * 2)) / 2.0
    return {label: float(start + step * (padding + index)) for index, label in enumerate(labels)}


def threshold_bin(value: float, thresholds: Sequence[float]) -> int:
    return bisect_right(list(thresholds), value)


def assign_bins(
    values: pd.Series,
    domain: tuple[float, float],
    thresholds: Sequence[float],
) -> tuple[pd.Series, list[tuple[float, float]]]:
    """Bin index per value over the domain split at the interior thresholds.

    A value equal to a threshold falls into the bin that starts at it. Values outside
    the domain get no bin.
    """
    x0, x1 = domain
    edges = [float(t) for t in thresholds if x0 < t <= x1]
    bounds = list(zip([x0] + edges, edges + [x1]))
    numeric = pd.to_numeric(values, errors="coerce")
    in_domain = numeric.between(x0, x1)
    positions = np.searchsorted(
        np.asarray(edges, dtype=float),
        numeric.fillna(x0).to_numpy(dtype=float),
        side="right",
    )
    assigned = pd.Series(positions, index=values.index, dtype="float64").where(in_domain)
    return assigned, bounds
