from __future__ import annotations

import pandas as pd
import pytest

from vizlab.charts.events import Reorder
from vizlab.charts.theme_river import ThemeRiverChart, default_order, wide_series
from vizlab.config import AppConfig
from vizlab.preprocess.coerce import coerce

SALES = [
    ("30/09/2007", "441854", "house", "2"),
    ("30/09/2007", "421291", "house", "3"),
    ("30/09/2007", "999999", "house", "3"),
    ("31/12/2007", "419230", "house", "3"),
    ("31/12/2007", "548969", "house", "4"),
    ("31/03/2008", "350000", "unit", "1"),
    ("31/03/2008", "", "unit", "2"),
    ("31/03/2008", "600000", "cabin", "9"),
    ("bad date", "100", "house", "3"),
]


def _records(chart: ThemeRiverChart) -> pd.DataFrame:
    rows = pd.DataFrame(SALES, columns=["saledate", "MA", "type", "bedrooms"], dtype=str)
    source = chart.sources()[0]
    return chart.prepare({source.name: coerce(rows, chart.field_spec(source, rows))})


def test_default_order_puts_unknown_keys_last() -> None:
    keys = ["cabin-9", "house-2", "unit-1", "house-3"]
    assert default_order(keys) == ["house-3", "unit-1", "house-2", "cabin-9"]


def test_wide_series_keeps_first_value_and_zero_fills() -> None:
    chart = ThemeRiverChart(AppConfig())
    records = _records(chart)

    assert list(records.columns) == ["date", "house-3", "house-4", "unit-1", "house-2", "cabin-9"]
    assert records["date"].tolist() == list(pd.to_datetime(["2007-09-30", "2007-12-31", "2008-03-31"]))
    assert records["house-3"].tolist() == [421291.0, 419230.0, 0.0]
    assert records["house-4"].tolist() == [0.0, 548969.0, 0.0]


def test_wide_series_from_plain_records() -> None:
    frame = pd.DataFrame(
        {
            "saledate": pd.to_datetime(["2010-01-01", "2010-01-01"]),
            "MA": [1.0, 2.0],
            "type": ["unit", "house"],
            "bedrooms": ["2", "5"],
        }
    )
    wide = wide_series(frame)
    assert list(wide.columns) == ["date", "house-5", "unit-2"]


def test_transform_wiggle_stack_preserves_values() -> None:
    chart = ThemeRiverChart(AppConfig())
    records = _records(chart)

    view = chart.transform(records, chart.initial_state(records)).to_dict()
    layers = view["data"]["layers"]

    assert [layer["key"] for layer in layers] == ["house-3", "house-4", "unit-1", "house-2", "cabin-9"]
    house_3 = layers[0]
    assert house_3["label"] == "house (3 bed)"
    assert [u - l for l, u in zip(house_3["lower"], house_3["upper"])] == pytest.approx(
        [421291.0, 419230.0, 0.0]
    )
    assert house_3["lower"][0] == 0.0
    lowest = min(min(layer["lower"]) for layer in layers)
    highest = max(max(layer["upper"]) for layer in layers)
    assert view["domains"]["y"] == [pytest.approx(lowest), pytest.approx(highest)]
    assert view["data"]["legend"][0] == "cabin-9"


def test_tooltip_picks_nearest_sale_date() -> None:
    chart = ThemeRiverChart(AppConfig())
    records = _records(chart)
    state = chart.initial_state(records)

    tip = chart.tooltip(records, state, "house-4", pd.Timestamp("2008-01-15"))

    assert tip == {"date": "December 2007", "type": "house", "bedrooms": "4", "price": 548969}
    with pytest.raises(ValueError):
        chart.tooltip(records, state, "villa-7", pd.Timestamp("2008-01-15"))


def test_reorder_keeps_colors_and_validates_keys() -> None:
    chart = ThemeRiverChart(AppConfig())
    records = _records(chart)
    state = chart.initial_state(records)
    before = chart.transform(records, state).to_dict()["domains"]["color"]

    order = ("cabin-9", "house-2", "unit-1", "house-4", "house-3")
    reordered = chart.reduce(state, Reorder(order), records)
    view = chart.transform(records, reordered).to_dict()

    assert [layer["key"] for layer in view["data"]["layers"]] == list(order)
    assert view["domains"]["color"] == before
    with pytest.raises(ValueError):
        chart.reduce(state, Reorder(("house-3",)), records)
