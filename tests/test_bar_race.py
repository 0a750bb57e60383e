from __future__ import annotations

import pandas as pd
import pytest

from vizlab.charts.bar_race import BarRaceChart, BarRaceState, is_year_column, rank_year
from vizlab.charts.events import Reset, SetView, Tick, TogglePlay
from vizlab.config import AppConfig
from vizlab.preprocess.coerce import coerce


def _records(chart: BarRaceChart, rows: pd.DataFrame) -> pd.DataFrame:
    source = chart.sources()[0]
    return chart.prepare({source.name: coerce(rows, chart.field_spec(source, rows))})


def _scenario_rows() -> pd.DataFrame:
    return pd.DataFrame(
        {"Country": ["A", "B"], "2000": ["10", "30"], "2001": ["20", "5"]}, dtype=str
    )


def test_top_one_per_year_scenario() -> None:
    chart = BarRaceChart(AppConfig())
    records = _records(chart, _scenario_rows())
    state = BarRaceState(top_n=1)

    first = chart.transform(records, state).to_dict()
    second = chart.transform(records, chart.reduce(state, Tick(), records)).to_dict()

    assert first["data"]["year"] == "2000"
    assert [(v["country"], v["value"]) for v in first["data"]["values"]] == [("B", 30.0)]
    assert second["data"]["year"] == "2001"
    assert [(v["country"], v["value"]) for v in second["data"]["values"]] == [("A", 20.0)]
    assert first["domains"]["x"] == [0.0, 30.0]
    assert second["data"]["progress"] == 100.0


def test_top_twelve_of_twenty_descending() -> None:
    rows = pd.DataFrame(
        {
            "Country": [f"Country {i:02d}" for i in range(20)],
            "1990": [str((i * 7) % 20 + 1) for i in range(20)],
        },
        dtype=str,
    )
    chart = BarRaceChart(AppConfig())
    records = _records(chart, rows)

    view = chart.transform(records, chart.initial_state(records)).to_dict()
    values = [item["value"] for item in view["data"]["values"]]

    assert len(values) == 12
    assert values == sorted(values, reverse=True)
    assert values == [float(v) for v in range(20, 8, -1)]
    assert [item["rank"] for item in view["data"]["values"]] == list(range(1, 13))


def test_missing_and_zero_values_never_rank() -> None:
    rows = pd.DataFrame(
        {"Country": ["A", "", "C", "D"], "2000": ["", "50", "0", "abc"]}, dtype=str
    )
    chart = BarRaceChart(AppConfig())
    records = _records(chart, rows)

    assert records["country"].tolist() == ["A", "C", "D"]
    assert records["2000"].tolist() == [0.0, 0.0, 0.0]
    assert rank_year(records, "2000", 12).empty


def test_ties_keep_input_order() -> None:
    rows = pd.DataFrame({"Country": ["A", "B", "C"], "2000": ["5", "5", "7"]}, dtype=str)
    chart = BarRaceChart(AppConfig())
    records = _records(chart, rows)

    ranked = rank_year(records, "2000", 3)

    assert ranked["country"].tolist() == ["C", "A", "B"]


def test_transform_is_deterministic() -> None:
    chart = BarRaceChart(AppConfig())
    records = _records(chart, _scenario_rows())
    state = chart.initial_state(records)

    assert chart.transform(records, state).to_json() == chart.transform(records, state).to_json()


def test_events_tick_wraps_and_view_switch_resets() -> None:
    chart = BarRaceChart(AppConfig())
    records = _records(chart, _scenario_rows())
    state = chart.initial_state(records)

    state = chart.reduce(state, TogglePlay(), records)
    state = chart.reduce(state, Tick(), records)
    assert state.year_index == 1 and state.playing
    state = chart.reduce(state, Tick(), records)
    assert state.year_index == 0

    state = chart.reduce(chart.reduce(state, Tick(), records), SetView("per_capita"), records)
    assert state == BarRaceState(view_type="per_capita", year_index=0, playing=False, top_n=12)
    assert chart.dataset_key(state) == "per_capita"

    state = chart.reduce(chart.reduce(state, TogglePlay(), records), Reset(), records)
    assert state.year_index == 0 and not state.playing

    with pytest.raises(ValueError, match="Unknown view type"):
        chart.reduce(state, SetView("per_gdp"), records)


def test_per_capita_view_loads_other_dataset() -> None:
    config = AppConfig.model_validate(
        {"datasets": {"co2_total": "total.csv", "co2_per_capita": "per_capita.csv"}}
    )
    chart = BarRaceChart(config)

    assert chart.sources()[0].location == "total.csv"
    assert chart.sources(BarRaceState(view_type="per_capita"))[0].location == "per_capita.csv"
    assert chart.tick_interval(BarRaceState()) == pytest.approx(0.25)


def test_unhandled_event_is_rejected() -> None:
    chart = BarRaceChart(AppConfig())
    records = _records(chart, _scenario_rows())
    with pytest.raises(ValueError, match="does not handle"):
        chart.reduce(chart.initial_state(records), object(), records)


def test_state_overrides_are_validated() -> None:
    chart = BarRaceChart(AppConfig())
    state = BarRaceState()

    assert chart.apply_overrides(state, {"view_type": "per_capita", "year_index": "3"}) == BarRaceState(
        view_type="per_capita", year_index=3
    )
    with pytest.raises(ValueError, match="Unknown view type"):
        chart.apply_overrides(state, {"view_type": "foo"})
    with pytest.raises(ValueError, match="top_n"):
        chart.apply_overrides(state, {"top_n": "0"})
    with pytest.raises(ValueError, match="year_index"):
        chart.apply_overrides(state, {"year_index": "-1"})


def test_year_columns_must_be_finite_numbers() -> None:
    assert is_year_column("2000")
    assert is_year_column(" 1990 ")
    for name in ("NaN", "nan", "inf", "-Infinity", "Country", ""):
        assert not is_year_column(name)
