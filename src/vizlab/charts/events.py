from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Tick:
    """One step of a running play timer."""


@dataclass(frozen=True)
class TogglePlay:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SetView:
    view_type: str


@dataclass(frozen=True)
class SetYear:
    year: int


@dataclass(frozen=True)
class SetRange:
    start_year: int
    end_year: int


@dataclass(frozen=True)
class SetAxes:
    x_attr: str
    y_attr: str


@dataclass(frozen=True)
class Reorder:
    order: tuple[str, ...]


@dataclass(frozen=True)
class SetAttributes:
    attributes: tuple[str, ...]


@dataclass(frozen=True)
class Brush:
    x_attr: str
    y_attr: str
    x0: float
    x1: float
    y0: float
    y1: float


@dataclass(frozen=True)
class ClearBrush:
    pass


@dataclass(frozen=True)
class SetSort:
    sort_key: str


@dataclass(frozen=True)
class SetOrder:
    ascending: bool


@dataclass(frozen=True)
class SetDisplayCount:
    count: int


@dataclass(frozen=True)
class ToggleCategory:
    category: str


@dataclass(frozen=True)
class SetPollutant:
    pollutant: str


@dataclass(frozen=True)
class SetAggregation:
    method: str


Event = (
    Tick
    | TogglePlay
    | Reset
    | SetView
    | SetYear
    | SetRange
    | SetAxes
    | Reorder
    | SetAttributes
    | Brush
    | ClearBrush
    | SetSort
    | SetOrder
    | SetDisplayCount
    | ToggleCategory
    | SetPollutant
    | SetAggregation
)
