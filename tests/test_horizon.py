from __future__ import annotations

import pandas as pd
import pytest

from vizlab.charts.events import SetAggregation, SetPollutant, SetYear
from vizlab.charts.horizon import POLLUTANTS, HorizonChart, HorizonState, band_index, daily_stats
from vizlab.config import AppConfig
from vizlab.preprocess.coerce import coerce


def _row(when: str, station: str, so2: str, pm10: str = "40") -> dict[str, str]:
    row = {"Measurement date": when, "Station code": station}
    row.update({pollutant: "0.01" for pollutant in POLLUTANTS})
    row["SO2"] = so2
    row["PM10"] = pm10
    return row


def _records(chart: HorizonChart) -> pd.DataFrame:
    rows = pd.DataFrame(
        [
            _row("2017-01-02 00:00", "102", "0.004"),
            _row("2017-01-01 00:00", "101", "0.002"),
            _row("2017-01-01 01:00", "101", "0.004"),
            _row("2017-01-01 02:00", "101", "0.009"),
            _row("2017-01-01 03:00", "101", ""),
            _row("2017-01-02 00:00", "101", "0.011", pm10="250"),
            _row("2018-01-01 00:00", "101", "0.5"),
            _row("not a date", "101", "0.5"),
        ],
        dtype=str,
    )
    source = chart.sources()[0]
    return chart.prepare({source.name: coerce(rows, chart.field_spec(source, rows))})


def test_daily_stats_mean_and_completeness() -> None:
    chart = HorizonChart(AppConfig())
    records = _records(chart)

    stats = daily_stats(records, "SO2", 2017)

    assert stats["station"].tolist() == ["102", "101", "101"]
    day_one = stats.iloc[1]
    assert day_one["date"] == pd.Timestamp("2017-01-01")
    assert day_one["value"] == pytest.approx(0.005)
    assert day_one["count"] == 3
    assert day_one["max"] == pytest.approx(0.009)
    assert day_one["min"] == pytest.approx(0.002)
    assert day_one["completeness"] == pytest.approx(12.5)

    medians = daily_stats(records, "SO2", 2017, "median")
    assert medians.iloc[1]["value"] == pytest.approx(0.004)
    assert daily_stats(records, "SO2", 2019).empty
    with pytest.raises(ValueError):
        daily_stats(records, "CO2", 2017)


def test_band_index_folds_into_four_bands() -> None:
    bands = band_index([0.0, 0.002, 0.003, 0.0031, 0.011, 0.5], 0.012, 4)
    assert bands.tolist() == [0, 0, 0, 1, 3, 3]


def test_transform_groups_points_per_station() -> None:
    chart = HorizonChart(AppConfig())
    records = _records(chart)

    view = chart.transform(records, chart.initial_state(records)).to_dict()

    assert [station["station"] for station in view["data"]["stations"]] == ["102", "101"]
    points = view["data"]["stations"][1]["points"]
    assert [point["date"][:10] for point in points] == ["2017-01-01", "2017-01-02"]
    assert [point["band"] for point in points] == [1, 3]
    assert view["domains"]["y"] == [0.0, 0.012]
    assert view["domains"]["color"] == ["#fff5f0", "#fdcab5", "#fc8d59", "#b30000"]
    assert view["data"]["unit"] == "ppm"


def test_tooltip_uses_nearest_day() -> None:
    chart = HorizonChart(AppConfig())
    records = _records(chart)

    tip = chart.tooltip(records, HorizonState(), "101", pd.Timestamp("2017-01-01 20:00"))

    assert tip == {
        "date": "2017-01-02",
        "value": "0.011 ppm",
        "range": "0.011 - 0.011 ppm",
        "measurements": 1,
    }
    assert chart.tooltip(records, HorizonState(), "999", pd.Timestamp("2017-01-01")) is None


def test_selection_events() -> None:
    chart = HorizonChart(AppConfig())
    records = _records(chart)
    state = chart.initial_state(records)

    assert chart.reduce(state, SetYear(2018), records).year == 2018
    assert chart.reduce(state, SetPollutant("PM10"), records).pollutant == "PM10"
    assert chart.reduce(state, SetAggregation("median"), records).aggregation == "median"
    with pytest.raises(ValueError):
        chart.reduce(state, SetYear(2016), records)
    with pytest.raises(ValueError):
        chart.reduce(state, SetPollutant("CO2"), records)
    with pytest.raises(ValueError):
        chart.reduce(state, SetAggregation("mode"), records)
    assert chart.tick_interval(state) is None


def test_selection_overrides_use_the_same_checks() -> None:
    chart = HorizonChart(AppConfig())
    records = _records(chart)
    state = chart.initial_state(records)

    changed = chart.apply_overrides(state, {"pollutant": "PM10", "year": "2018"}, records)
    assert (changed.pollutant, changed.year) == ("PM10", 2018)
    with pytest.raises(ValueError, match="Year must be one of"):
        chart.apply_overrides(state, {"year": "2016"}, records)
    with pytest.raises(ValueError, match="Unknown pollutant"):
        chart.apply_overrides(state, {"pollutant": "CO2"}, records)
    with pytest.raises(ValueError, match="Unknown aggregation"):
        chart.apply_overrides(state, {"aggregation": "mode"}, records)
