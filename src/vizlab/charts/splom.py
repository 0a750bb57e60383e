from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np
import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Brush, ClearBrush
from vizlab.charts.iris import ATTRIBUTES, SPECIES, check_attributes, iris_field_spec
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.scales import assign_bins, extent, nice_ticks

CLASS_COLORS = dict(zip(SPECIES, ["#FF6B6B", "#FFFF00", "#00FFFF"]))


# (x_attr, y_attr, x0, x1, y0, y1) with the corners in data units.
BrushRegion = tuple[str, str, float, float, float, float]


@dataclass(frozen=True)
class SplomState:
    brush: BrushRegion | None = None


def cross(attributes: list[str]) -> list[dict[str, object]]:
    return [
        {"x": x_attr, "i": i, "y": y_attr, "j": j}
        for i, x_attr in enumerate(attributes)
        for j, y_attr in enumerate(attributes)
    ]


def stacked_histogram(
    records: pd.DataFrame,
    attribute: str,
    domain: tuple[float, float],
    tick_count: int,
) -> list[dict[str, object]]:
    """Histogram over nice thresholds with per-species counts stacked bottom-up."""
    thresholds = nice_ticks(domain[0], domain[1], tick_count)
    assigned, bounds = assign_bins(records[attribute], domain, thresholds)
    bins = []
    for index, (x0, x1) in enumerate(bounds):
        in_bin = records[assigned == index]
        cumulative = 0
        segments = []
        for species in SPECIES:
            count = int((in_bin["class"] == species).sum())
            segments.append(
                {
                    "species": species,
                    "count": count,
                    "lower": cumulative,
                    "upper": cumulative + count,
                    "color": CLASS_COLORS[species],
                }
            )
            cumulative += count
        bins.append({"x0": x0, "x1": x1, "total": int(len(in_bin)), "segments": segments})
    return bins


def brush_mask(records: pd.DataFrame, brush: BrushRegion | None) -> pd.Series | None:
    if brush is None:
        return None
    if len(brush) != 6:
        raise ValueError("brush needs x_attr, y_attr, x0, x1, y0, y1")
    x_attr, y_attr = brush[0], brush[1]
    check_attributes([x_attr, y_attr])
    x0, x1 = sorted(brush[2:4])
    y0, y1 = sorted(brush[4:6])
    return records[x_attr].between(x0, x1) & records[y_attr].between(y0, y1)


def brush_event(value: str | tuple[str, ...]) -> Brush | ClearBrush:
    """Event for a brush given as "x_attr,y_attr,x0,x1,y0,y1"; an empty value clears it."""
    parts = [part.strip() for part in value.split(",")] if isinstance(value, str) else list(value)
    parts = [part for part in parts if part]
    if not parts:
        return ClearBrush()
    if len(parts) != 6:
        raise ValueError("brush needs x_attr, y_attr, x0, x1, y0, y1")
    return Brush(parts[0], parts[1], *(float(part) for part in parts[2:]))


class SplomChart(Chart):
    name = "splom"

    def sources(self, state: SplomState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="iris", location=self.config.datasets.iris)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return iris_field_spec()

    def initial_state(self, records: pd.DataFrame) -> SplomState:
        return SplomState()

    def transform(self, records: pd.DataFrame, state: SplomState) -> ViewModel:
        domains = {attribute: extent(records[attribute]) for attribute in ATTRIBUTES}
        histograms = {}
        for attribute in ATTRIBUTES:
            domain = domains[attribute]
            histograms[attribute] = (
                stacked_histogram(records, attribute, domain, self.config.splom.histogram_ticks)
                if domain is not None
                else []
            )
        hist_max = max(
            (bin_["total"] for bins in histograms.values() for bin_ in bins),
            default=0,
        )

        selected = brush_mask(records, state.brush)
        if selected is None:
            selected_flags = np.zeros(len(records), dtype=bool)
            hidden_flags = np.zeros(len(records), dtype=bool)
        else:
            selected_flags = selected.to_numpy(dtype=bool)
            hidden_flags = ~selected_flags

        points = [
            {
                "index": index,
                "class": row["class"],
                "color": CLASS_COLORS.get(row["class"], "#999999"),
                "values": {attribute: row[attribute] for attribute in ATTRIBUTES},
                "selected": bool(selected_flags[index]),
                "hidden": bool(hidden_flags[index]),
            }
            for index, row in enumerate(records.to_dict("records"))
        ]
        return self.view_model(
            state,
            domains={"attributes": domains, "histogram_count": [0, hist_max], "color": SPECIES},
            data={
                "cells": cross(ATTRIBUTES),
                "histograms": histograms,
                "points": points,
                "n_selected": int(selected_flags.sum()),
            },
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"brush": lambda value, state: brush_event(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {Brush: self._on_brush, ClearBrush: self._on_clear_brush}

    @staticmethod
    def _on_brush(state: SplomState, event: Brush, records: pd.DataFrame) -> SplomState:
        check_attributes([event.x_attr, event.y_attr])
        return replace(
            state,
            brush=(
                event.x_attr,
                event.y_attr,
                float(event.x0),
                float(event.x1),
                float(event.y0),
                float(event.y1),
            ),
        )

    @staticmethod
    def _on_clear_brush(state: SplomState, event: ClearBrush, records: pd.DataFrame) -> SplomState:
        return replace(state, brush=None)
