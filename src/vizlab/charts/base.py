from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, Callable

import numpy as np
import pandas as pd

from vizlab.charts.events import Event
from vizlab.config import AppConfig
from vizlab.io.read import DatasetSource
from vizlab.preprocess.coerce import FieldSpec, RecordSet

Reducer = Callable[[Any, Any, Any], Any]
# Builds the event for a state field override from its parsed value and the current state.
OverrideEvent = Callable[[Any, Any], Event]

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def to_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, np.ndarray):
        return [to_jsonable(item) for item in value.tolist()]
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        number = float(value)
        return number if math.isfinite(number) else None
    return value


@dataclass(frozen=True)
class ViewModel:
    chart: str
    state: dict[str, Any]
    domains: dict[str, Any]
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(
            {
                "chart": self.chart,
                "state": self.state,
                "domains": self.domains,
                "data": self.data,
            }
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


def state_dict(state: Any) -> dict[str, Any]:
    return {item.name: getattr(state, item.name) for item in fields(state)}


def _parse_override(raw: str, current: Any) -> Any:
    text = raw.strip()
    if isinstance(current, bool):
        lowered = text.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError(f"Expected a boolean, got {raw!r}")
    if isinstance(current, int):
        return int(text)
    if isinstance(current, float):
        return float(text)
    if isinstance(current, tuple):
        return tuple(part.strip() for part in text.split(",") if part.strip())
    return text


class Chart:
    """One exercise: its sources, coercion rules, transform and event reducers."""

    name: str

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def sources(self, state: Any = None) -> list[DatasetSource]:
        raise NotImplementedError

    def field_spec(self, source: DatasetSource, rows: pd.DataFrame) -> list[FieldSpec]:
        raise NotImplementedError

    def prepare(self, inputs: dict[str, Any]) -> Any:
        record_set = next(iter(inputs.values()))
        if not isinstance(record_set, RecordSet):
            raise ValueError(f"{self.name} expects tabular input")
        return record_set.records

    def initial_state(self, records: Any) -> Any:
        raise NotImplementedError

    def transform(self, records: Any, state: Any) -> ViewModel:
        raise NotImplementedError

    def reducers(self) -> dict[type, Reducer]:
        return {}

    def reduce(self, state: Any, event: Event, records: Any) -> Any:
        handler = self.reducers().get(type(event))
        if handler is None:
            raise ValueError(f"{self.name} does not handle {type(event).__name__} events")
        return handler(state, event, records)

    def dataset_key(self, state: Any) -> str:
        """Identifies the loaded dataset; a change means records must be reloaded."""
        return ""

    def tick_interval(self, state: Any) -> float | None:
        """Seconds between play ticks, or None when the chart has no play control."""
        return None

    def export(self, records: Any, state: Any) -> pd.DataFrame:
        """Rows of the current view as a flat table for download."""
        raise ValueError(f"{self.name} has no export action")

    def override_events(self) -> dict[str, OverrideEvent]:
        """State fields whose overrides go through a reducer instead of a plain replace."""
        return {}

    def check_state(self, state: Any) -> None:
        """Raise ValueError when a state field holds a value no reducer would produce."""

    def apply_overrides(self, state: Any, overrides: dict[str, str], records: Any = None) -> Any:
        known = {item.name for item in fields(state)}
        for key in overrides:
            if key not in known:
                raise ValueError(f"Unknown state field for {self.name}: {key}")

        events = self.override_events()
        updates: dict[str, Any] = {}
        for key, raw in overrides.items():
            value = _parse_override(raw, getattr(state, key))
            if key in events:
                state = self.reduce(state, events[key](value, state), records)
            else:
                updates[key] = value
        state = replace(state, **updates)
        self.check_state(state)
        return state

    def view_model(
        self,
        state: Any,
        domains: dict[str, Any],
        data: dict[str, Any],
    ) -> ViewModel:
        return ViewModel(chart=self.name, state=state_dict(state), domains=domains, data=data)
