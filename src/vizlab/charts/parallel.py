from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Reorder
from vizlab.charts.iris import ATTRIBUTES, SPECIES, check_attributes, iris_field_spec
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.scales import extent, linear_scale, point_positions

CLASS_COLORS = dict(zip(SPECIES, ["#1a1aff", "#ff1a1a", "#33cc33"]))
UNKNOWN_COLOR = "#999999"


@dataclass(frozen=True)
class ParallelState:
    dimensions: tuple[str, ...] = tuple(ATTRIBUTES)


class ParallelChart(Chart):
    name = "parallel"

    def sources(self, state: ParallelState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="iris", location=self.config.datasets.iris)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return iris_field_spec()

    def initial_state(self, records: pd.DataFrame) -> ParallelState:
        return ParallelState()

    def transform(self, records: pd.DataFrame, state: ParallelState) -> ViewModel:
        check_attributes(state.dimensions)
        width = self.config.parallel.width
        height = self.config.parallel.height
        positions = point_positions(list(state.dimensions), (0.0, width), padding=1.0)
        extents = {dimension: extent(records[dimension]) for dimension in state.dimensions}

        scaled = {}
        for dimension in state.dimensions:
            domain = extents[dimension] or (0.0, 0.0)
            scaled[dimension] = linear_scale(records[dimension], domain, (height, 0.0))

        lines = []
        for row_index, label in enumerate(records["class"]):
            lines.append(
                {
                    "class": label,
                    "color": CLASS_COLORS.get(label, UNKNOWN_COLOR),
                    "points": [
                        [positions[dimension], scaled[dimension][row_index]]
                        for dimension in state.dimensions
                    ],
                }
            )
        return self.view_model(
            state,
            domains={
                "x": positions,
                "y": extents,
                "color": SPECIES,
            },
            data={"lines": lines},
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"dimensions": lambda value, state: Reorder(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {Reorder: self._on_reorder}

    @staticmethod
    def _on_reorder(state: ParallelState, event: Reorder, records: pd.DataFrame) -> ParallelState:
        if sorted(event.order) != sorted(state.dimensions):
            raise ValueError("Axis order must be a permutation of the current dimensions")
        return replace(state, dimensions=tuple(event.order))
