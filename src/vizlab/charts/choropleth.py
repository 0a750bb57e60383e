from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import SetYear, Tick, TogglePlay
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec, RecordSet
from vizlab.scales import threshold_bin

LOGGER = logging.getLogger(__name__)

# d3 schemeReds[7]
REDS_7 = ["#fee5d9", "#fcbba1", "#fc9272", "#fb6a4a", "#ef3b2c", "#cb181d", "#99000d"]
NO_DATA_COLOR = "#ccc"

# Boundary-file names that differ from the emissions dataset names.
COUNTRY_NAME_ALIASES = {
    "United States of America": "United States",
    "Dem. Rep. Congo": "Democratic Republic of Congo",
    "Dominican Rep.": "Dominican Republic",
    "W. Sahara": "Western Sahara",
    "Czechia": "Czech Republic",
    "Korea": "South Korea",
    "Macedonia": "North Macedonia",
    "Slovak Republic": "Slovakia",
    "Burma": "Myanmar",
    "Congo": "Republic of Congo",
    "Bosnia and Herz.": "Bosnia and Herzegovina",
    "Eq. Guinea": "Equatorial Guinea",
    "S. Sudan": "South Sudan",
    "Central African Rep.": "Central African Republic",
    "eSwatini": "Eswatini",
}


@dataclass(frozen=True)
class ChoroplethState:
    year: int = 1820
    playing: bool = False


@dataclass(frozen=True)
class ChoroplethData:
    values: pd.DataFrame
    feature_names: tuple[str, ...]


def dataset_name(feature_name: str) -> str:
    return COUNTRY_NAME_ALIASES.get(feature_name, feature_name)


def feature_names(topology: Any) -> list[str]:
    """Country names from a TopoJSON topology or a GeoJSON feature collection."""
    if not isinstance(topology, dict):
        raise ValueError("boundary file must contain a JSON object")
    if topology.get("type") == "Topology":
        geometries = topology.get("objects", {}).get("countries", {}).get("geometries", [])
    else:
        geometries = topology.get("features", [])
    names: list[str] = []
    for geometry in geometries:
        name = str((geometry.get("properties") or {}).get("name") or "").strip()
        if name:
            names.append(name)
    return names


def values_for_year(frame: pd.DataFrame, year: int) -> dict[str, float]:
    year_frame = frame[(frame["year"] == year) & frame["co2_per_gdp"].notna()]
    return dict(zip(year_frame["country"], year_frame["co2_per_gdp"].astype(float)))


def value_for(by_country: dict[str, float], feature_name: str) -> float | None:
    mapped = dataset_name(feature_name)
    if mapped in by_country:
        return by_country[mapped]
    return by_country.get(feature_name)


class ChoroplethChart(Chart):
    name = "choropleth"

    def sources(self, state: ChoroplethState | None = None) -> list[DatasetSource]:
        return [
            DatasetSource(name="topology", location=self.config.datasets.world_topology, fmt="json"),
            DatasetSource(name="emissions", location=self.config.datasets.co2_per_gdp),
        ]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return [
            FieldSpec(source="country", kind="category"),
            FieldSpec(source="year", kind="number", policy="drop"),
            FieldSpec(source="co2_per_gdp", kind="number", policy="nan"),
        ]

    def prepare(self, inputs: dict[str, Any]) -> ChoroplethData:
        emissions = inputs["emissions"]
        if not isinstance(emissions, RecordSet):
            raise ValueError("choropleth emissions input must be tabular")
        frame = emissions.records.copy()
        frame["year"] = frame["year"].astype(int)
        return ChoroplethData(values=frame, feature_names=tuple(feature_names(inputs["topology"])))

    def initial_state(self, records: ChoroplethData) -> ChoroplethState:
        return ChoroplethState(year=self.config.choropleth.start_year)

    def transform(self, records: ChoroplethData, state: ChoroplethState) -> ViewModel:
        thresholds = list(self.config.choropleth.thresholds)
        by_country = values_for_year(records.values, state.year)
        max_value = max(by_country.values()) if by_country else None
        LOGGER.debug(
            "Year %s: %d countries with data, max value: %s",
            state.year,
            len(by_country),
            max_value,
        )

        features = []
        for name in records.feature_names:
            value = value_for(by_country, name)
            has_value = value is not None and value != 0
            color_bin = threshold_bin(value, thresholds) if has_value else None
            features.append(
                {
                    "name": name,
                    "display_name": dataset_name(name),
                    "value": value,
                    "bin": color_bin,
                    "color": REDS_7[min(color_bin, len(REDS_7) - 1)]
                    if color_bin is not None
                    else NO_DATA_COLOR,
                }
            )

        legend = [0.0, float(max_value)] if max_value is not None and max_value > 0 else None
        return self.view_model(
            state,
            domains={"color_thresholds": thresholds, "color_range": REDS_7, "legend": legend},
            data={"year": state.year, "n_countries": len(by_country), "features": features},
        )

    def tooltip(self, records: ChoroplethData, state: ChoroplethState, feature_name: str) -> str:
        value = value_for(values_for_year(records.values, state.year), feature_name)
        label = dataset_name(feature_name)
        if value:
            return f"{label}\nCO₂ per GDP: {value:.3f}"
        return f"{label}\nNo data available for this year"

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"year": lambda value, state: SetYear(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {
            SetYear: self._on_set_year,
            Tick: self._on_tick,
            TogglePlay: self._on_toggle_play,
        }

    def tick_interval(self, state: ChoroplethState) -> float:
        return self.config.choropleth.interval_ms / 1000.0

    def _on_set_year(
        self, state: ChoroplethState, event: SetYear, records: ChoroplethData
    ) -> ChoroplethState:
        cfg = self.config.choropleth
        return replace(state, year=min(max(int(event.year), cfg.min_year), cfg.max_year))

    def _on_tick(self, state: ChoroplethState, event: Tick, records: ChoroplethData) -> ChoroplethState:
        cfg = self.config.choropleth
        year = state.year + 1 if state.year < cfg.max_year else cfg.min_year
        return replace(state, year=year)

    @staticmethod
    def _on_toggle_play(
        state: ChoroplethState, event: TogglePlay, records: ChoroplethData
    ) -> ChoroplethState:
        return replace(state, playing=not state.playing)
