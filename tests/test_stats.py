from __future__ import annotations

import pandas as pd
import pytest

from vizlab.features.ranking import stable_sort, top_n
from vizlab.stats import correlation_matrix, nearest_index, pearson


def test_pearson_self_correlation_and_symmetry() -> None:
    x = [0.455, 0.35, 0.53, 0.44, 0.33]
    y = [0.365, 0.265, 0.42, 0.365, 0.255]

    assert pearson(x, x) == pytest.approx(1.0)
    assert pearson(x, y) == pytest.approx(pearson(y, x))
    assert pearson(x, [-value for value in x]) == pytest.approx(-1.0)


def test_pearson_zero_denominator_is_zero() -> None:
    assert pearson([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0
    assert pearson([], []) == 0.0
    with pytest.raises(ValueError):
        pearson([1.0, 2.0], [1.0])


def test_correlation_matrix_is_symmetric_with_unit_diagonal() -> None:
    frame = pd.DataFrame(
        {"Length": [1.0, 2.0, 3.0, 4.0], "Height": [2.0, 1.0, 4.0, 3.0], "Rings": [7, 7, 7, 7]}
    )

    matrix = correlation_matrix(frame, ["Length", "Height", "Rings"])

    assert matrix[0][0] == pytest.approx(1.0)
    assert matrix[1][1] == pytest.approx(1.0)
    assert matrix[0][1] == pytest.approx(matrix[1][0])
    assert matrix[0][1] == pytest.approx(0.6)
    assert matrix[2] == [0.0, 0.0, 0.0]


def test_nearest_index_prefers_left_neighbour_on_ties() -> None:
    positions = [0, 10, 20]

    assert nearest_index(positions, 14) == 1
    assert nearest_index(positions, 16) == 2
    assert nearest_index(positions, 15) == 1
    assert nearest_index(positions, 25) == 2
    assert nearest_index(positions, -5) == 0
    assert nearest_index([], 3) is None


def test_nearest_index_on_timestamps() -> None:
    dates = list(pd.to_datetime(["2017-01-01", "2017-01-02", "2017-01-05"]))
    assert nearest_index(dates, pd.Timestamp("2017-01-04")) == 2


def test_stable_sort_keeps_ties_in_input_order() -> None:
    frame = pd.DataFrame({"name": ["a", "b", "c", "d"], "score": [2.0, 3.0, 2.0, float("nan")]})

    descending = stable_sort(frame, "score", ascending=False)
    ascending = stable_sort(frame, "score", ascending=True)

    assert descending["name"].tolist() == ["b", "a", "c", "d"]
    assert ascending["name"].tolist() == ["a", "c", "b", "d"]


def test_top_n_returns_highest_first() -> None:
    frame = pd.DataFrame({"country": [f"C{i:02d}" for i in range(20)], "value": list(range(20))})

    top = top_n(frame, "value", 12)

    assert len(top) == 12
    assert top["value"].tolist() == list(range(19, 7, -1))
