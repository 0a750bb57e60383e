from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Reset, SetDisplayCount, SetOrder, SetSort, ToggleCategory
from vizlab.features.ranking import stable_sort
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec, parse_number
from vizlab.stacking import stack_frame

SCORE_COLUMNS = {
    "teaching": "scores_teaching",
    "research": "scores_research",
    "citations": "scores_citations",
    "industry": "scores_industry_income",
    "international": "scores_international_outlook",
}
SCORE_KEYS = tuple(SCORE_COLUMNS)
SORT_KEYS = ("overall",) + SCORE_KEYS
COLORS = {
    "teaching": "#FF6B6B",
    "research": "#4ECDC4",
    "citations": "#45B7D1",
    "industry": "#96CEB4",
    "international": "#FFEEAD",
}
FRIENDLY_NAMES = {
    "teaching": "Teaching Score",
    "research": "Research Score",
    "citations": "Citations Score",
    "industry": "Industry Income",
    "international": "International Outlook",
}
EXPORT_COLUMNS = {
    "name": "Name",
    "rank": "Rank",
    "total": "Overall Score",
    "teaching": "Teaching",
    "research": "Research",
    "citations": "Citations",
    "industry": "Industry Income",
    "international": "International Outlook",
    "location": "Location",
}


def parse_overall(series: pd.Series) -> pd.Series:
    """Scores published as a range ("50.1–54.3") keep their lower bound."""
    first = series.fillna("").astype(str).str.split("–").str[0]
    return parse_number(first)


def parse_positive_score(series: pd.Series) -> pd.Series:
    # A zero score is treated as unpublished.
    parsed = parse_number(series)
    return parsed.mask(parsed == 0)


@dataclass(frozen=True)
class StackedBarState:
    sort_key: str = "overall"
    ascending: bool = False
    display_count: int = 0
    active_keys: tuple[str, ...] = SCORE_KEYS


def displayed_rows(records: pd.DataFrame, state: StackedBarState) -> pd.DataFrame:
    column = "total" if state.sort_key == "overall" else state.sort_key
    if column not in records.columns:
        raise ValueError(f"Unknown sort key: {state.sort_key}")
    ordered = stable_sort(records, column, ascending=state.ascending)
    count = state.display_count if state.display_count > 0 else len(ordered)
    return ordered.head(count).reset_index(drop=True)


def export_frame(records: pd.DataFrame, state: StackedBarState) -> pd.DataFrame:
    """The rows currently on screen, with the download's column headers."""
    rows = displayed_rows(records, state)
    return rows[list(EXPORT_COLUMNS)].rename(columns=EXPORT_COLUMNS)


class StackedBarChart(Chart):
    name = "stacked_bar"

    def sources(self, state: StackedBarState | None = None) -> list[DatasetSource]:
        return [
            DatasetSource(name="rankings", location=self.config.datasets.university_rankings)
        ]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        specs = [
            FieldSpec(source="name", kind="category"),
            FieldSpec(source="rank", kind="number", policy="zero"),
            FieldSpec(
                source="scores_overall",
                kind="number",
                target="total",
                policy="zero",
                parser=parse_overall,
            ),
        ]
        specs.extend(
            FieldSpec(
                source=column,
                kind="number",
                target=key,
                policy="drop",
                parser=parse_positive_score,
            )
            for key, column in SCORE_COLUMNS.items()
        )
        specs.append(FieldSpec(source="location", kind="text", default="Unknown"))
        return specs

    def initial_state(self, records: pd.DataFrame) -> StackedBarState:
        return StackedBarState(display_count=int(len(records)))

    def transform(self, records: pd.DataFrame, state: StackedBarState) -> ViewModel:
        unknown = [key for key in state.active_keys if key not in SCORE_KEYS]
        if unknown:
            raise ValueError(f"Unknown score categories: {', '.join(unknown)}")
        rows = displayed_rows(records, state)
        stacked = stack_frame(rows, list(state.active_keys))

        bars = []
        for index, row in enumerate(rows.to_dict("records")):
            segments = [
                {
                    "key": key,
                    "label": FRIENDLY_NAMES[key],
                    "color": COLORS[key],
                    "lower": stacked.lower[layer][index],
                    "upper": stacked.upper[layer][index],
                    "value": stacked.upper[layer][index] - stacked.lower[layer][index],
                }
                for layer, key in enumerate(stacked.keys)
            ]
            bars.append(
                {
                    "name": row["name"],
                    "rank": row["rank"],
                    "total": row["total"],
                    "location": row["location"],
                    "scores": {key: row[key] for key in SCORE_KEYS},
                    "segments": segments,
                }
            )
        return self.view_model(
            state,
            domains={
                "x": [0.0, self.config.stacked_bar.score_max],
                "y": rows["name"].tolist(),
                "color": {key: COLORS[key] for key in state.active_keys},
            },
            data={"bars": bars, "n_total": int(len(records))},
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {
            "sort_key": lambda value, state: SetSort(value),
            "ascending": lambda value, state: SetOrder(value),
            "display_count": lambda value, state: SetDisplayCount(value),
        }

    def check_state(self, state: StackedBarState) -> None:
        unknown = [key for key in state.active_keys if key not in SCORE_KEYS]
        if unknown:
            raise ValueError(f"Unknown score category: {', '.join(unknown)}")
        if len(set(state.active_keys)) != len(state.active_keys):
            raise ValueError("Score categories must not repeat")

    def reducers(self) -> dict[type, Reducer]:
        return {
            SetSort: self._on_set_sort,
            SetOrder: self._on_set_order,
            SetDisplayCount: self._on_set_display_count,
            ToggleCategory: self._on_toggle_category,
            Reset: self._on_reset,
        }

    @staticmethod
    def _on_set_sort(
        state: StackedBarState, event: SetSort, records: pd.DataFrame
    ) -> StackedBarState:
        if event.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {event.sort_key}")
        return replace(state, sort_key=event.sort_key)

    @staticmethod
    def _on_set_order(
        state: StackedBarState, event: SetOrder, records: pd.DataFrame
    ) -> StackedBarState:
        return replace(state, ascending=bool(event.ascending))

    def _on_set_display_count(
        self, state: StackedBarState, event: SetDisplayCount, records: pd.DataFrame | None
    ) -> StackedBarState:
        count = int(event.count)
        if count < self.config.stacked_bar.min_display_count:
            return state
        if records is not None:
            count = min(count, int(len(records)))
        return replace(state, display_count=count)

    @staticmethod
    def _on_toggle_category(
        state: StackedBarState, event: ToggleCategory, records: pd.DataFrame
    ) -> StackedBarState:
        if event.category not in SCORE_KEYS:
            raise ValueError(f"Unknown score category: {event.category}")
        if event.category in state.active_keys:
            keys = tuple(key for key in state.active_keys if key != event.category)
        else:
            keys = state.active_keys + (event.category,)
        return replace(state, active_keys=keys)

    def export(self, records: pd.DataFrame, state: StackedBarState) -> pd.DataFrame:
        return export_frame(records, state)

    def _on_reset(
        self, state: StackedBarState, event: Reset, records: pd.DataFrame
    ) -> StackedBarState:
        return self.initial_state(records)
