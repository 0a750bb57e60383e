from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

import pandas as pd

from vizlab.errors import CoercionGap

LOGGER = logging.getLogger(__name__)

FieldKind = Literal["number", "date", "category", "text"]
GapPolicy = Literal["zero", "nan", "drop"]


@dataclass(frozen=True)
class FieldSpec:
    source: str
    kind: FieldKind = "number"
    target: str | None = None
    policy: GapPolicy = "nan"
    date_format: str | None = None
    default: str = ""
    parser: Callable[[pd.Series], pd.Series] | None = None

    @property
    def name(self) -> str:
        return self.target or self.source


@dataclass(frozen=True)
class RecordSet:
    records: pd.DataFrame
    gaps: tuple[CoercionGap, ...]
    rows_in: int
    rows_dropped_category: int
    rows_dropped_gaps: int

    def gap_for(self, field: str) -> CoercionGap | None:
        for gap in self.gaps:
            if gap.field == field:
                return gap
        return None


def _clean_strings(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.strip()


def parse_number(series: pd.Series) -> pd.Series:
    return pd.to_numeric(_clean_strings(series), errors="coerce").astype(float)


def parse_date(series: pd.Series, date_format: str | None = None) -> pd.Series:
    cleaned = _clean_strings(series)
    if date_format:
        return pd.to_datetime(cleaned, format=date_format, errors="coerce")
    return pd.to_datetime(cleaned, errors="coerce")


def _parse_field(series: pd.Series, spec: FieldSpec) -> pd.Series:
    if spec.parser is not None:
        return spec.parser(series)
    if spec.kind == "number":
        return parse_number(series)
    if spec.kind == "date":
        return parse_date(series, spec.date_format)
    cleaned = _clean_strings(series)
    if spec.kind == "text" and spec.default:
        return cleaned.mask(cleaned == "", spec.default)
    return cleaned


def coerce(rows: pd.DataFrame, field_spec: Sequence[FieldSpec]) -> RecordSet:
    """Project raw string rows onto typed records.

    Rows with an empty category field are removed before any parsing. A value that
    fails numeric or date parsing is a gap: it is counted and then zero-filled,
    left missing or used to drop its row, as the field's policy says.
    """
    missing = [spec.source for spec in field_spec if spec.source not in rows.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")

    rows_in = int(len(rows))
    working = rows
    for spec in field_spec:
        if spec.kind != "category":
            continue
        working = working[_clean_strings(working[spec.source]) != ""]
    rows_dropped_category = rows_in - int(len(working))

    columns: dict[str, pd.Series] = {}
    gaps: list[CoercionGap] = []
    drop_mask = pd.Series(False, index=working.index)
    for spec in field_spec:
        parsed = _parse_field(working[spec.source], spec)
        if spec.kind in ("number", "date"):
            gap_mask = parsed.isna()
            n_missing = int(gap_mask.sum())
            if n_missing:
                gaps.append(CoercionGap(field=spec.name, n_missing=n_missing, policy=spec.policy))
                LOGGER.debug(
                    "Coercion gap in %s: %d values defaulted by policy %s",
                    spec.name,
                    n_missing,
                    spec.policy,
                )
            if spec.policy == "zero" and spec.kind == "number":
                parsed = parsed.fillna(0.0)
            elif spec.policy == "drop":
                drop_mask = drop_mask | gap_mask
        columns[spec.name] = parsed

    records = pd.DataFrame(columns, index=working.index)
    rows_dropped_gaps = int(drop_mask.sum())
    records = records[~drop_mask].reset_index(drop=True)
    return RecordSet(
        records=records,
        gaps=tuple(gaps),
        rows_in=rows_in,
        rows_dropped_category=rows_dropped_category,
        rows_dropped_gaps=rows_dropped_gaps,
    )
