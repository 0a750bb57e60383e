from __future__ import annotations

from dataclasses import dataclass, replace

import pandas as pd

from vizlab.charts.base import Chart, OverrideEvent, Reducer, ViewModel
from vizlab.charts.events import Reorder
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec

COLUMNS = ("buying", "maint", "doors", "persons", "lug_boot", "safety", "evaluation")
COLUMN_LABELS = {
    "buying": "Buying Price",
    "maint": "Maintenance",
    "doors": "Doors",
    "persons": "Capacity",
    "lug_boot": "Luggage Boot",
    "safety": "Safety",
    "evaluation": "Evaluation",
}
COLUMN_COLORS = {
    "buying": "#3498db",
    "maint": "#2ecc71",
    "doors": "#9b59b6",
    "persons": "#e74c3c",
    "lug_boot": "#f1c40f",
    "safety": "#1abc9c",
    "evaluation": "#34495e",
}


@dataclass(frozen=True)
class SankeyState:
    columns: tuple[str, ...] = COLUMNS


def build_nodes(records: pd.DataFrame, columns: list[str]) -> list[dict[str, object]]:
    nodes = []
    for col_index, column in enumerate(columns):
        counts = records.groupby(column, sort=False).size()
        for value, count in counts.items():
            nodes.append(
                {
                    "name": value,
                    "full_name": f"{COLUMN_LABELS[column]}: {value}",
                    "column": column,
                    "col_index": col_index,
                    "value": int(count),
                    "color": COLUMN_COLORS[column],
                }
            )
    return nodes


def build_links(
    records: pd.DataFrame,
    columns: list[str],
    nodes: list[dict[str, object]],
) -> list[dict[str, object]]:
    """Row counts for every value pair of adjacent columns, in first-seen order."""
    index = {(node["col_index"], node["name"]): position for position, node in enumerate(nodes)}
    links = []
    for col_index in range(len(columns) - 1):
        source_col = columns[col_index]
        target_col = columns[col_index + 1]
        pairs = records.groupby([source_col, target_col], sort=False).size()
        for (source_value, target_value), count in pairs.items():
            links.append(
                {
                    "source": index[(col_index, source_value)],
                    "target": index[(col_index + 1, target_value)],
                    "value": int(count),
                    "color": COLUMN_COLORS[source_col],
                }
            )
    return links


class SankeyChart(Chart):
    name = "sankey"

    def sources(self, state: SankeyState | None = None) -> list[DatasetSource]:
        return [
            DatasetSource(name="cars", location=self.config.datasets.car, fmt="text", columns=COLUMNS)
        ]

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        return [FieldSpec(source=column, kind="category") for column in COLUMNS]

    def initial_state(self, records: pd.DataFrame) -> SankeyState:
        return SankeyState()

    def transform(self, records: pd.DataFrame, state: SankeyState) -> ViewModel:
        columns = list(state.columns)
        unknown = [column for column in columns if column not in COLUMNS]
        if unknown:
            raise ValueError(f"Unknown car attributes: {', '.join(unknown)}")
        nodes = build_nodes(records, columns)
        links = build_links(records, columns, nodes)
        evaluations = [node["name"] for node in nodes if node["column"] == "evaluation"]
        return self.view_model(
            state,
            domains={
                "columns": columns,
                "color": {column: COLUMN_COLORS[column] for column in columns},
            },
            data={
                "nodes": nodes,
                "links": links,
                "n_records": int(len(records)),
                "evaluation_legend": [str(name).upper() for name in evaluations],
            },
        )

    def override_events(self) -> dict[str, OverrideEvent]:
        return {"columns": lambda value, state: Reorder(value)}

    def reducers(self) -> dict[type, Reducer]:
        return {Reorder: self._on_reorder}

    @staticmethod
    def _on_reorder(state: SankeyState, event: Reorder, records: pd.DataFrame) -> SankeyState:
        if sorted(event.order) != sorted(state.columns):
            raise ValueError("Column order must be a permutation of the current columns")
        return replace(state, columns=tuple(event.order))
