from __future__ import annotations

import math
from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Reset, SetView, Tick, TogglePlay
from vizlab.features.ranking import top_n
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec

PALETTE = [
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEEAD",
    "#D4A5A5",
    "#9B59B6",
    "#3498DB",
    "#F1C40F",
    "#2ECC71",
    "#E74C3C",
    "#1ABC9C",
]

VIEW_TYPES = ("total", "per_capita")
TITLES = {
    "total": "CO2 Emissions by Country (Million Tonnes)",
    "per_capita": "Per Capita CO2 Emissions by Country (Tonnes per Person)",
}
NUMBER_FORMATS = {"total": ",.0f", "per_capita": ",.2f"}


def is_year_column(column: object) -> bool:
    text = str(column).strip()
    if not text:
        return False
    try:
        year = float(text)
    except ValueError:
        return False
    return math.isfinite(year)


@dataclass(frozen=True)
class BarRaceState:
    view_type: str = "total"
    year_index: int = 0
    playing: bool = False
    top_n: int = 12


def year_columns(records: pd.DataFrame) -> list[str]:
    return [column for column in records.columns if is_year_column(column)]


def rank_year(records: pd.DataFrame, year: str, n: int) -> pd.DataFrame:
    """Countries with a positive value for ``year``, highest first, first ``n`` kept."""
    frame = pd.DataFrame({"country": records["country"], "value": records[year]})
    frame = frame[frame["value"] > 0]
    ranked = top_n(frame, "value", n)
    ranked.insert(0, "rank", range(1, len(ranked) + 1))
    return ranked


class BarRaceChart(Chart):
    name = "bar_race"

    def sources(self, state: BarRaceState | None = None) -> list[DatasetSource]:
        view_type = state.view_type if state is not None else "total"
        location = (
            self.config.datasets.co2_per_capita
            if view_type == "per_capita"
            else self.config.datasets.co2_total
        )
        return [DatasetSource(name="emissions", location=location)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        specs = [FieldSpec(source="Country", kind="category", target="country")]
        specs.extend(
            FieldSpec(source=column, kind="number", target=str(column).strip(), policy="zero")
            for column in rows.columns
            if is_year_column(column)
        )
        return specs

    def initial_state(self, records: pd.DataFrame) -> BarRaceState:
        return BarRaceState(top_n=self.config.bar_race.top_n)

    def transform(self, records: pd.DataFrame, state: BarRaceState) -> ViewModel:
        years = year_columns(records)
        countries = records["country"].drop_duplicates().tolist()
        colors = {country: PALETTE[index % len(PALETTE)] for index, country in enumerate(countries)}
        if not years:
            return self.view_model(
                state,
                domains={"x": [0.0, 0.0], "y": [], "color": countries},
                data={"year": None, "years": [], "values": [], "progress": 0.0},
            )

        index = min(max(0, state.year_index), len(years) - 1)
        year = years[index]
        ranked = rank_year(records, year, state.top_n)
        values = [
            {
                "rank": int(row.rank),
                "country": row.country,
                "value": float(row.value),
                "color": colors[row.country],
            }
            for row in ranked.itertuples(index=False)
        ]
        max_value = float(ranked["value"].max()) if not ranked.empty else 0.0
        progress = (index / (len(years) - 1)) * 100.0 if len(years) > 1 else 0.0
        return self.view_model(
            state,
            domains={
                "x": [0.0, max_value],
                "y": list(range(state.top_n)),
                "color": countries,
            },
            data={
                "year": year,
                "years": years,
                "values": values,
                "progress": progress,
                "title": TITLES.get(state.view_type, ""),
                "number_format": NUMBER_FORMATS.get(state.view_type, ",.0f"),
            },
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"view_type": lambda value, state: SetView(value)}

    def check_state(self, state: BarRaceState) -> None:
        if state.top_n < 1:
            raise ValueError("top_n must be at least 1")
        if state.year_index < 0:
            raise ValueError("year_index must not be negative")

    def reducers(self) -> dict[type, Reducer]:
        return {
            Tick: self._on_tick,
            TogglePlay: self._on_toggle_play,
            Reset: self._on_reset,
            SetView: self._on_set_view,
        }

    def dataset_key(self, state: BarRaceState) -> str:
        return state.view_type

    def tick_interval(self, state: BarRaceState) -> float:
        return self.config.bar_race.interval_ms / 1000.0

    @staticmethod
    def _on_tick(state: BarRaceState, event: Tick, records: pd.DataFrame) -> BarRaceState:
        n_years = len(year_columns(records))
        if n_years == 0:
            return state
        return replace(state, year_index=(state.year_index + 1) % n_years)

    @staticmethod
    def _on_toggle_play(
        state: BarRaceState, event: TogglePlay, records: pd.DataFrame
    ) -> BarRaceState:
        return replace(state, playing=not state.playing)

    @staticmethod
    def _on_reset(state: BarRaceState, event: Reset, records: pd.DataFrame) -> BarRaceState:
        return replace(state, year_index=0, playing=False)

    @staticmethod
    def _on_set_view(state: BarRaceState, event: SetView, records: pd.DataFrame) -> BarRaceState:
        if event.view_type not in VIEW_TYPES:
            raise ValueError(f"Unknown view type: {event.view_type}")
        return replace(state, view_type=event.view_type, year_index=0, playing=False)
