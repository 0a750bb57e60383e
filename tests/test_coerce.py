from __future__ import annotations

import logging
import math

import pandas as pd
import pytest

from vizlab.preprocess.coerce import FieldSpec, coerce, parse_date


def _rows(data: dict[str, list[str]]) -> pd.DataFrame:
    return pd.DataFrame(data, dtype=str)


def test_empty_category_rows_are_dropped_before_parsing() -> None:
    rows = _rows(
        {
            "class": ["Iris-setosa", "", "  ", "Iris-virginica"],
            "petal width": ["0.2", "oops", "1.0", "2.1"],
        }
    )

    result = coerce(
        rows,
        [FieldSpec(source="class", kind="category"), FieldSpec(source="petal width", policy="nan")],
    )

    assert result.records["class"].tolist() == ["Iris-setosa", "Iris-virginica"]
    assert result.rows_dropped_category == 2
    assert result.gaps == ()


def test_gap_policies_zero_nan_and_drop(caplog) -> None:
    rows = _rows(
        {
            "Country": ["A", "B", "C"],
            "2000": ["10", "", "x"],
            "ratio": ["0.5", "n/a", "0.7"],
            "MA": ["100", "200", ""],
        }
    )
    spec = [
        FieldSpec(source="Country", kind="category", target="country"),
        FieldSpec(source="2000", policy="zero"),
        FieldSpec(source="ratio", policy="nan"),
        FieldSpec(source="MA", policy="drop"),
    ]

    with caplog.at_level(logging.DEBUG, logger="vizlab.preprocess.coerce"):
        result = coerce(rows, spec)

    assert result.records["country"].tolist() == ["A", "B"]
    assert result.records["2000"].tolist() == [10.0, 0.0]
    assert math.isnan(result.records.loc[1, "ratio"])
    assert result.rows_in == 3
    assert result.rows_dropped_gaps == 1
    assert result.gap_for("2000").n_missing == 2
    assert result.gap_for("ratio").policy == "nan"
    assert result.gap_for("MA").n_missing == 1
    assert result.gap_for("country") is None
    assert "Coercion gap in 2000" in caplog.text


def test_text_fields_take_their_default() -> None:
    rows = _rows({"name": ["X", "Y"], "location": ["", "Japan"]})

    result = coerce(
        rows,
        [
            FieldSpec(source="name", kind="category"),
            FieldSpec(source="location", kind="text", default="Unknown"),
        ],
    )

    assert result.records["location"].tolist() == ["Unknown", "Japan"]


def test_custom_parser_runs_instead_of_kind_parser() -> None:
    rows = _rows({"score": ["1", "2"]})
    spec = FieldSpec(source="score", parser=lambda series: series.astype(float) * 10)

    result = coerce(rows, [spec])

    assert result.records["score"].tolist() == [10.0, 20.0]


def test_missing_columns_raise() -> None:
    with pytest.raises(ValueError, match="Missing required columns: MA"):
        coerce(_rows({"saledate": ["01/01/2010"]}), [FieldSpec(source="MA")])


def test_parse_date_with_explicit_format() -> None:
    parsed = parse_date(pd.Series(["30/09/2007", "bad"]), "%d/%m/%Y")
    assert parsed.iloc[0] == pd.Timestamp("2007-09-30")
    assert pd.isna(parsed.iloc[1])
