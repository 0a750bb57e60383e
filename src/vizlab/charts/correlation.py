from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import SetAttributes
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.stats import correlation_matrix

ABALONE_COLUMNS = (
    "Sex",
    "Length",
    "Diameter",
    "Height",
    "Whole weight",
    "Shucked weight",
    "Viscera weight",
    "Shell weight",
    "Rings",
)
ATTRIBUTES = list(ABALONE_COLUMNS[1:])
GROUPS = {"M": "Male", "F": "Female", "I": "Infant"}
COLOR_DOMAIN = [0.0, 0.5, 1.0]
COLOR_RANGE = ["#f0f0f0", "#76C7C0", "#1f77b4"]
DIAGONAL_COLOR = "#FFD700"


@dataclass(frozen=True)
class CorrelationState:
    attributes: tuple[str, ...] = tuple(ATTRIBUTES)


class CorrelationChart(Chart):
    name = "correlation"

    def sources(self, state: CorrelationState | None = None) -> list[DatasetSource]:
        return [
            DatasetSource(
                name="abalone",
                location=self.config.datasets.abalone,
                fmt="text",
                columns=ABALONE_COLUMNS,
            )
        ]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        specs = [FieldSpec(source="Sex", kind="category")]
        specs.extend(FieldSpec(source=column, kind="number", policy="drop") for column in ATTRIBUTES)
        return specs

    def initial_state(self, records: pd.DataFrame) -> CorrelationState:
        return CorrelationState()

    def transform(self, records: pd.DataFrame, state: CorrelationState) -> ViewModel:
        attributes = list(state.attributes)
        unknown = [name for name in attributes if name not in ATTRIBUTES]
        if unknown:
            raise ValueError(f"Unknown abalone attributes: {', '.join(unknown)}")

        matrices = []
        for code, title in GROUPS.items():
            group = records[records["Sex"] == code]
            matrix = correlation_matrix(group, attributes)
            cells = [
                {
                    "row": row,
                    "col": col,
                    "value": matrix[row][col],
                    "is_diagonal": row == col,
                }
                for row in range(len(attributes))
                for col in range(len(attributes))
            ]
            matrices.append(
                {
                    "group": code,
                    "title": title,
                    "n_records": int(len(group)),
                    "matrix": matrix,
                    "cells": cells,
                }
            )
        return self.view_model(
            state,
            domains={
                "attributes": attributes,
                "color_domain": COLOR_DOMAIN,
                "color_range": COLOR_RANGE,
                "diagonal_color": DIAGONAL_COLOR,
            },
            data={"matrices": matrices},
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"attributes": lambda value, state: SetAttributes(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {SetAttributes: self._on_set_attributes}

    @staticmethod
    def _on_set_attributes(
        state: CorrelationState, event: SetAttributes, records: pd.DataFrame
    ) -> CorrelationState:
        unknown = [name for name in event.attributes if name not in ATTRIBUTES]
        if unknown or not event.attributes:
            raise ValueError("Attribute selection must be a non-empty subset of abalone attributes")
        return replace(state, attributes=tuple(event.attributes))
