from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Reorder
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.stacking import stack_frame
from vizlab.stats import nearest_index

DEFAULT_ORDER = ("house-3", "house-4", "house-5", "unit-1", "unit-3", "unit-2", "house-2")
# d3 schemeTableau10
TABLEAU_10 = [
    "#4e79a7",
    "#f28e2c",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc949",
    "#af7aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ab",
]
DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class ThemeRiverState:
    order: tuple[str, ...] = ()


def series_key(property_type: str, bedrooms: str) -> str:
    return f"{property_type}-{bedrooms}"


def split_key(key: str) -> tuple[str, str]:
    property_type, _, bedrooms = key.partition("-")
    return property_type, bedrooms


def default_order(keys: list[str]) -> list[str]:
    """Known series in their legend order, then any others in first-seen order."""
    known = [key for key in DEFAULT_ORDER if key in keys]
    return known + [key for key in keys if key not in DEFAULT_ORDER]


def wide_series(records: pd.DataFrame) -> pd.DataFrame:
    """One row per sale date, one column per series; dates a series lacks are zero."""
    frame = records.assign(key=records["type"] + "-" + records["bedrooms"])
    keys = frame["key"].drop_duplicates().tolist()
    first = frame.drop_duplicates(subset=["key", "saledate"], keep="first")
    wide = first.pivot(index="saledate", columns="key", values="MA").sort_index()
    wide = wide.reindex(columns=default_order(keys)).fillna(0.0)
    wide.columns.name = None
    return wide.rename_axis("date").reset_index()


def series_keys(wide: pd.DataFrame) -> list[str]:
    return [column for column in wide.columns if column != "date"]


class ThemeRiverChart(Chart):
    name = "theme_river"

    def sources(self, state: ThemeRiverState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="sales", location=self.config.datasets.house_sales)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return [
            FieldSpec(source="saledate", kind="date", policy="drop", date_format=DATE_FORMAT),
            FieldSpec(source="MA", kind="number", policy="drop"),
            FieldSpec(source="type", kind="category"),
            FieldSpec(source="bedrooms", kind="category"),
        ]

    def prepare(self, inputs: dict[str, Any]) -> pd.DataFrame:
        return wide_series(super().prepare(inputs))

    def initial_state(self, records: pd.DataFrame) -> ThemeRiverState:
        return ThemeRiverState(order=tuple(series_keys(records)))

    def colors(self, records: pd.DataFrame) -> dict[str, str]:
        # Colors follow the initial order so that reordering keeps them.
        return {
            key: TABLEAU_10[index % len(TABLEAU_10)]
            for index, key in enumerate(series_keys(records))
        }

    def transform(self, records: pd.DataFrame, state: ThemeRiverState) -> ViewModel:
        order = list(state.order) or series_keys(records)
        stacked = stack_frame(records, order, offset="wiggle")
        colors = self.colors(records)
        layers = []
        for index, key in enumerate(stacked.keys):
            property_type, bedrooms = split_key(key)
            layers.append(
                {
                    "key": key,
                    "type": property_type,
                    "bedrooms": bedrooms,
                    "label": f"{property_type} ({bedrooms} bed)",
                    "color": colors.get(key, TABLEAU_10[0]),
                    "lower": stacked.lower[index],
                    "upper": stacked.upper[index],
                }
            )
        dates = records["date"].tolist()
        return self.view_model(
            state,
            domains={
                "x": [dates[0], dates[-1]] if dates else [None, None],
                "y": list(stacked.domain()),
                "color": colors,
            },
            data={"dates": dates, "layers": layers, "legend": list(reversed(order))},
        )

    def tooltip(
        self,
        records: pd.DataFrame,
        state: ThemeRiverState,
        key: str,
        when: pd.Timestamp,
    ) -> dict[str, Any] | None:
        """Price of ``key`` at the sale date nearest to ``when``."""
        if key not in records.columns:
            raise ValueError(f"Unknown series: {key}")
        dates = records["date"].tolist()
        index = nearest_index(dates, pd.Timestamp(when))
        if index is None:
            return None
        property_type, bedrooms = split_key(key)
        return {
            "date": dates[index].strftime("%B %Y"),
            "type": property_type,
            "bedrooms": bedrooms,
            "price": int(round(float(records[key].iloc[index]))),
        }

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"order": lambda value, state: Reorder(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {Reorder: self._on_reorder}

    @staticmethod
    def _on_reorder(
        state: ThemeRiverState, event: Reorder, records: pd.DataFrame
    ) -> ThemeRiverState:
        current = list(state.order) or series_keys(records)
        if sorted(event.order) != sorted(current):
            raise ValueError("Series order must contain every series exactly once")
        return replace(state, order=tuple(event.order))
