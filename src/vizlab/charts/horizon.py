from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

import numpy as np
import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import SetAggregation, SetPollutant, SetYear
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec
from vizlab.stats import nearest_index

LOGGER = logging.getLogger(__name__)

DATE_COLUMN = "Measurement date"
STATION_COLUMN = "Station code"
DATE_FORMAT = "%Y-%m-%d %H:%M"
POLLUTANTS = ["SO2", "NO2", "O3", "CO", "PM10", "PM2.5"]
AGGREGATIONS = ("mean", "median")

# Upper end of the value axis per pollutant.
POLLUTANT_RANGES = {
    "SO2": 0.012,
    "NO2": 0.06,
    "O3": 0.07,
    "CO": 1.5,
    "PM10": 200.0,
    "PM2.5": 80.0,
}
POLLUTANT_UNITS = {
    "SO2": "ppm",
    "NO2": "ppm",
    "O3": "ppm",
    "CO": "ppm",
    "PM10": "μg/m³",
    "PM2.5": "μg/m³",
}
COLOR_SCHEMES = {
    "SO2": ["#fff5f0", "#fdcab5", "#fc8d59", "#b30000"],
    "NO2": ["#f7fbff", "#c8ddf0", "#73b3d8", "#08306b"],
    "O3": ["#f7fcf5", "#c7e9c0", "#74c476", "#006d2c"],
    "CO": ["#fff5eb", "#fdd0a2", "#fdae6b", "#a63603"],
    "PM10": ["#f2f0f7", "#cbc9e2", "#9e9ac8", "#54278f"],
    "PM2.5": ["#ffffff", "#d9d9d9", "#969696", "#252525"],
}


@dataclass(frozen=True)
class HorizonState:
    year: int = 2017
    pollutant: str = "SO2"
    aggregation: str = "mean"


def daily_stats(
    records: pd.DataFrame,
    pollutant: str,
    year: int,
    aggregation: str = "mean",
    hours_per_day: int = 24,
) -> pd.DataFrame:
    """Per station and day: aggregated value, sample count, extremes and completeness.

    Stations keep their first-appearance order; days are sorted within a station.
    """
    if pollutant not in POLLUTANTS:
        raise ValueError(f"Unknown pollutant: {pollutant}")
    if aggregation not in AGGREGATIONS:
        raise ValueError(f"Unknown aggregation: {aggregation}")

    rows = records[records[DATE_COLUMN].dt.year == year]
    rows = rows[rows[pollutant].notna()]
    frame = pd.DataFrame(
        {
            "station": rows[STATION_COLUMN],
            "date": rows[DATE_COLUMN].dt.normalize(),
            "reading": rows[pollutant].astype(float),
        }
    )
    columns = ["station", "date", "value", "count", "max", "min", "completeness"]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    stats = (
        frame.groupby(["station", "date"], sort=False)["reading"]
        .agg(value=aggregation, count="count", max="max", min="min")
        .reset_index()
    )
    stats["count"] = stats["count"].astype(int)
    stats["completeness"] = stats["count"] / hours_per_day * 100.0

    station_order = {station: index for index, station in enumerate(pd.unique(frame["station"]))}
    stats["_order"] = stats["station"].map(station_order)
    stats = stats.sort_values(["_order", "date"], kind="stable").drop(columns="_order")
    return stats[columns].reset_index(drop=True)


def band_index(values: pd.Series | np.ndarray, value_range: float, bands: int) -> np.ndarray:
    """Which of the ``bands`` stacked color bands the top of each value falls into."""
    band_size = value_range / bands
    raw = np.ceil(np.asarray(values, dtype=float) / band_size) - 1
    return np.clip(raw, 0, bands - 1).astype(int)


class HorizonChart(Chart):
    name = "horizon"

    def sources(self, state: HorizonState | None = None) -> list[DatasetSource]:
        return [DatasetSource(name="pollution", location=self.config.datasets.air_pollution)]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        specs = [
            FieldSpec(source=DATE_COLUMN, kind="date", policy="drop", date_format=DATE_FORMAT),
            FieldSpec(source=STATION_COLUMN, kind="category"),
        ]
        specs.extend(FieldSpec(source=pollutant, kind="number", policy="nan") for pollutant in POLLUTANTS)
        return specs

    def initial_state(self, records: pd.DataFrame) -> HorizonState:
        return HorizonState(year=self.config.horizon.years[0])

    def stats(self, records: pd.DataFrame, state: HorizonState) -> pd.DataFrame:
        return daily_stats(
            records,
            state.pollutant,
            state.year,
            state.aggregation,
            self.config.horizon.hours_per_day,
        )

    def transform(self, records: pd.DataFrame, state: HorizonState) -> ViewModel:
        stats = self.stats(records, state)
        bands = self.config.horizon.bands
        value_range = POLLUTANT_RANGES[state.pollutant]
        stats = stats.assign(band=band_index(stats["value"], value_range, bands))
        LOGGER.debug(
            "Horizon %s %s (%s): %d station-days",
            state.pollutant,
            state.year,
            state.aggregation,
            len(stats),
        )

        stations = []
        for station, group in stats.groupby("station", sort=False):
            stations.append(
                {
                    "station": station,
                    "points": group.drop(columns="station").to_dict("records"),
                }
            )
        dates = stats["date"]
        scheme = COLOR_SCHEMES[state.pollutant]
        return self.view_model(
            state,
            domains={
                "x": [dates.min(), dates.max()] if not stats.empty else [None, None],
                "y": [0.0, value_range],
                "color": [scheme[min(index, len(scheme) - 1)] for index in range(bands)],
            },
            data={
                "bands": bands,
                "unit": POLLUTANT_UNITS[state.pollutant],
                "legend_label": f"{state.pollutant} Intensity Levels",
                "stations": stations,
            },
        )

    def tooltip(
        self,
        records: pd.DataFrame,
        state: HorizonState,
        station: str,
        when: pd.Timestamp,
    ) -> dict[str, Any] | None:
        """Daily stats of ``station`` at the day nearest to ``when``."""
        stats = self.stats(records, state)
        rows = stats[stats["station"] == station].reset_index(drop=True)
        index = nearest_index(rows["date"].tolist(), pd.Timestamp(when))
        if index is None:
            return None
        point = rows.iloc[index]
        unit = POLLUTANT_UNITS[state.pollutant]
        return {
            "date": point["date"].strftime("%Y-%m-%d"),
            "value": f"{point['value']:.3f} {unit}",
            "range": f"{point['min']:.3f} - {point['max']:.3f} {unit}",
            "measurements": int(point["count"]),
        }

    def override_events(self) -> dict[str, OverrideEvent]:
        return {
            "year": lambda value, state: SetYear(value),
            "pollutant": lambda value, state: SetPollutant(value),
            "aggregation": lambda value, state: SetAggregation(value),
        }

    def reducers(self) -> dict[type, Reducer]:
        return {
            SetYear: self._on_set_year,
            SetPollutant: self._on_set_pollutant,
            SetAggregation: self._on_set_aggregation,
        }

    def _on_set_year(self, state: HorizonState, event: SetYear, records: pd.DataFrame) -> HorizonState:
        if int(event.year) not in self.config.horizon.years:
            raise ValueError(f"Year must be one of {self.config.horizon.years}")
        return replace(state, year=int(event.year))

    @staticmethod
    def _on_set_pollutant(
        state: HorizonState, event: SetPollutant, records: pd.DataFrame
    ) -> HorizonState:
        if event.pollutant not in POLLUTANTS:
            raise ValueError(f"Unknown pollutant: {event.pollutant}")
        return replace(state, pollutant=event.pollutant)

    @staticmethod
    def _on_set_aggregation(
        state: HorizonState, event: SetAggregation, records: pd.DataFrame
    ) -> HorizonState:
        if event.method not in AGGREGATIONS:
            raise ValueError(f"Unknown aggregation: {event.method}")
        return replace(state, aggregation=event.method)
