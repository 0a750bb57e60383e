from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import SetAxes
from vizlab.charts.iris import check_attributes, iris_field_spec
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.scales import extent

CLASS_COLORS = {"Iris-setosa": "blue", "Iris-versicolor": "red"}
FALLBACK_COLOR = "green"


@dataclass(frozen=True)
class ScatterState:
    x_attr: str = "sepal length"
    y_attr: str = "sepal width"


class ScatterChart(Chart):
    name = "scatter"

    def sources(self, state: ScatterState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="iris", location=self.config.datasets.iris)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return iris_field_spec()

    def initial_state(self, records: pd.DataFrame) -> ScatterState:
        return ScatterState()

    def transform(self, records: pd.DataFrame, state: ScatterState) -> ViewModel:
        check_attributes([state.x_attr, state.y_attr])
        points = [
            {
                "x": x,
                "y": y,
                "class": label,
                "color": CLASS_COLORS.get(label, FALLBACK_COLOR),
            }
            for x, y, label in zip(records[state.x_attr], records[state.y_attr], records["class"])
        ]
        return self.view_model(
            state,
            domains={"x": extent(records[state.x_attr]), "y": extent(records[state.y_attr])},
            data={"points": points},
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {
            "x_attr": lambda value, state: SetAxes(value, state.y_attr),
            "y_attr": lambda value, state: SetAxes(state.x_attr, value),
        }

    def reducers(self) -> dict[type, Reducer]:
        return {SetAxes: self._on_set_axes}

    @staticmethod
    def _on_set_axes(state: ScatterState, event: SetAxes, records: pd.DataFrame) -> ScatterState:
        check_attributes([event.x_attr, event.y_attr])
        return replace(state, x_attr=event.x_attr, y_attr=event.y_attr)
