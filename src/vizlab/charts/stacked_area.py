from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import SetRange, Tick, TogglePlay
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.stacking import stack_frame

SOURCE_COLUMNS = {
    "Coal": "Annual CO₂ emissions from coal",
    "Oil": "Annual CO₂ emissions from oil",
    "Gas": "Annual CO₂ emissions from gas",
    "Cement": "Annual CO₂ emissions from cement",
    "Flaring": "Annual CO₂ emissions from flaring",
    "Other Industry": "Annual CO₂ emissions from other industry",
}
SOURCES = list(SOURCE_COLUMNS)
COLORS = {
    "Coal": "#463F3A",
    "Oil": "#8A817C",
    "Gas": "#BCB8B1",
    "Cement": "#F4F3EE",
    "Flaring": "#E0AFA0",
    "Other Industry": "#BE8A7D",
}


@dataclass(frozen=True)
class StackedAreaState:
    start_year: int = 1750
    end_year: int = 2023
    playing: bool = False


def yearly_totals(records: pd.DataFrame) -> pd.DataFrame:
    """Sum every source per year, ordered by year."""
    valid = records[records["year"] != 0]
    grouped = valid.groupby("year", sort=True)[SOURCES].sum().reset_index()
    grouped["year"] = grouped["year"].astype(int)
    return grouped


def share_of_total(yearly: pd.DataFrame, year: int, source: str) -> float:
    """Percentage of the year's total contributed by ``source``; 0 for an empty year."""
    row = yearly[yearly["year"] == year]
    if row.empty:
        return 0.0
    total = float(row[SOURCES].sum(axis=1).iloc[0])
    if total == 0:
        return 0.0
    return float(row[source].iloc[0]) / total * 100.0


class StackedAreaChart(Chart):
    name = "stacked_area"

    def sources(self, state: StackedAreaState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="emissions", location=self.config.datasets.co2_by_source)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        specs = [FieldSpec(source="Year", kind="number", target="year", policy="drop")]
        specs.extend(
            FieldSpec(source=column, kind="number", target=key, policy="zero")
            for key, column in SOURCE_COLUMNS.items()
        )
        return specs

    def prepare(self, inputs: dict) -> pd.DataFrame:
        return yearly_totals(super().prepare(inputs))

    def initial_state(self, records: pd.DataFrame) -> StackedAreaState:
        cfg = self.config.stacked_area
        return StackedAreaState(start_year=cfg.min_year, end_year=cfg.max_year)

    def transform(self, records: pd.DataFrame, state: StackedAreaState) -> ViewModel:
        window = records[
            (records["year"] >= state.start_year) & (records["year"] <= state.end_year)
        ].reset_index(drop=True)
        stacked = stack_frame(window, SOURCES)
        totals = stacked.totals()
        layers = [
            {
                "key": key,
                "color": COLORS[key],
                "lower": stacked.lower[index],
                "upper": stacked.upper[index],
            }
            for index, key in enumerate(stacked.keys)
        ]
        y_max = stacked.domain()[1] if len(window) else 0.0
        return self.view_model(
            state,
            domains={"x": [state.start_year, state.end_year], "y": [0.0, y_max]},
            data={
                "years": window["year"].tolist(),
                "totals": totals,
                "layers": layers,
                "label": f"Year range: {state.start_year} - {state.end_year}",
            },
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {
            "start_year": lambda value, state: SetRange(value, state.end_year),
            "end_year": lambda value, state: SetRange(state.start_year, value),
        }

    def reducers(self) -> dict[type, Reducer]:
        return {
            SetRange: self._on_set_range,
            Tick: self._on_tick,
            TogglePlay: self._on_toggle_play,
        }

    def tick_interval(self, state: StackedAreaState) -> float:
        cfg = self.config.stacked_area
        interval_ms = (
            cfg.fast_interval_ms if state.end_year < cfg.fast_until_year else cfg.slow_interval_ms
        )
        return interval_ms / 1000.0

    def _on_set_range(
        self, state: StackedAreaState, event: SetRange, records: pd.DataFrame
    ) -> StackedAreaState:
        cfg = self.config.stacked_area
        start, end = sorted((int(event.start_year), int(event.end_year)))
        return replace(
            state,
            start_year=min(max(start, cfg.min_year), cfg.max_year),
            end_year=min(max(end, cfg.min_year), cfg.max_year),
        )

    def _on_tick(
        self, state: StackedAreaState, event: Tick, records: pd.DataFrame
    ) -> StackedAreaState:
        cfg = self.config.stacked_area
        if state.end_year >= cfg.max_year:
            return replace(state, playing=False)
        step = cfg.fast_step if state.end_year < cfg.fast_until_year else cfg.slow_step
        return replace(state, end_year=min(state.end_year + step, cfg.max_year))

    @staticmethod
    def _on_toggle_play(
        state: StackedAreaState, event: TogglePlay, records: pd.DataFrame
    ) -> StackedAreaState:
        return replace(state, playing=not state.playing)
