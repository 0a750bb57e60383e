from __future__ import annotations

import pandas as pd
import pytest

from vizlab.charts.events import SetRange, Tick, TogglePlay
from vizlab.charts.stacked_area import (
    SOURCE_COLUMNS,
    SOURCES,
    StackedAreaChart,
    StackedAreaState,
    share_of_total,
)
from vizlab.config import AppConfig
from vizlab.preprocess.coerce import coerce


def _records(chart: StackedAreaChart) -> pd.DataFrame:
    data = {"Entity": ["World", "World", "World", "Asia", "World"]}
    data["Year"] = ["1751", "1750", "1752", "1750", "abc"]
    for index, column in enumerate(SOURCE_COLUMNS.values()):
        data[column] = [str(index + 1), str(index), "", "1", "100"]
    rows = pd.DataFrame(data, dtype=str)
    source = chart.sources()[0]
    return chart.prepare({source.name: coerce(rows, chart.field_spec(source, rows))})


def test_yearly_totals_sum_sources_per_year() -> None:
    chart = StackedAreaChart(AppConfig())
    records = _records(chart)

    assert records["year"].tolist() == [1750, 1751, 1752]
    # 1750 combines two rows: value index plus one from the second entity.
    assert records["Coal"].tolist() == [1.0, 1.0, 0.0]
    assert records["Oil"].tolist() == [2.0, 2.0, 0.0]


def test_transform_stacks_sources_within_range() -> None:
    chart = StackedAreaChart(AppConfig())
    records = _records(chart)

    view = chart.transform(records, StackedAreaState(start_year=1750, end_year=1751)).to_dict()
    layers = view["data"]["layers"]

    assert [layer["key"] for layer in layers] == SOURCES
    assert view["data"]["years"] == [1750, 1751]
    assert layers[0]["lower"] == [0.0, 0.0]
    for lower_layer, upper_layer in zip(layers, layers[1:]):
        assert upper_layer["lower"] == lower_layer["upper"]
    assert view["data"]["totals"] == [layers[-1]["upper"][0], layers[-1]["upper"][1]]
    assert view["domains"]["y"] == [0.0, max(view["data"]["totals"])]
    assert view["data"]["label"] == "Year range: 1750 - 1751"


def test_share_of_total_handles_empty_years() -> None:
    chart = StackedAreaChart(AppConfig())
    records = _records(chart)

    assert share_of_total(records, 1751, "Coal") == pytest.approx(1 / 21 * 100)
    assert share_of_total(records, 1752, "Coal") == 0.0
    assert share_of_total(records, 1999, "Coal") == 0.0


def test_range_and_tick_events() -> None:
    chart = StackedAreaChart(AppConfig())
    records = _records(chart)
    state = chart.initial_state(records)

    assert chart.reduce(state, SetRange(1900, 1800), records) == StackedAreaState(1800, 1900)
    assert chart.reduce(state, SetRange(1000, 3000), records) == StackedAreaState(1750, 2023)

    early = StackedAreaState(start_year=1750, end_year=1800, playing=True)
    assert chart.reduce(early, Tick(), records).end_year == 1805
    assert chart.tick_interval(early) == pytest.approx(0.1)
    late = StackedAreaState(start_year=1750, end_year=1950, playing=True)
    assert chart.reduce(late, Tick(), records).end_year == 1951
    assert chart.tick_interval(late) == pytest.approx(0.3)

    finished = chart.reduce(StackedAreaState(1750, 2023, True), Tick(), records)
    assert finished.end_year == 2023 and finished.playing is False
    assert chart.reduce(state, TogglePlay(), records).playing is True
