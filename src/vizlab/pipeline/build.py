from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from vizlab.charts.base import Chart
from vizlab.io.read import load
from vizlab.preprocess.coerce import RecordSet, coerce

LOGGER = logging.getLogger(__name__)


def coercion_report(record_sets: dict[str, RecordSet]) -> pd.DataFrame:
    """One row per defaulted field, plus the dropped-row counts of its source."""
    rows = []
    for source_name, record_set in record_sets.items():
        for gap in record_set.gaps:
            rows.append(
                {
                    "source": source_name,
                    "field": gap.field,
                    "n_missing": gap.n_missing,
                    "policy": gap.policy,
                    "rows_in": record_set.rows_in,
                    "rows_dropped_category": record_set.rows_dropped_category,
                    "rows_dropped_gaps": record_set.rows_dropped_gaps,
                }
            )
    columns = [
        "source",
        "field",
        "n_missing",
        "policy",
        "rows_in",
        "rows_dropped_category",
        "rows_dropped_gaps",
    ]
    return pd.DataFrame(rows, columns=columns)


def load_chart_inputs(chart: Chart, state: Any = None) -> dict[str, Any]:
    """Load every source of a chart; tabular sources come back coerced."""
    inputs: dict[str, Any] = {}
    for source in chart.sources(state):
        raw = load(source)
        if isinstance(raw, pd.DataFrame):
            record_set = coerce(raw, chart.field_spec(source, raw))
            if record_set.rows_dropped_category or record_set.rows_dropped_gaps:
                LOGGER.info(
                    "%s/%s: kept %d of %d rows (%d empty category, %d by gap policy)",
                    chart.name,
                    source.name,
                    len(record_set.records),
                    record_set.rows_in,
                    record_set.rows_dropped_category,
                    record_set.rows_dropped_gaps,
                )
            inputs[source.name] = record_set
        else:
            inputs[source.name] = raw
    return inputs


def build_records(chart: Chart, state: Any = None) -> tuple[Any, pd.DataFrame]:
    inputs = load_chart_inputs(chart, state)
    record_sets = {name: value for name, value in inputs.items() if isinstance(value, RecordSet)}
    return chart.prepare(inputs), coercion_report(record_sets)
