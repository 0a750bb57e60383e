from __future__ import annotations

from dataclasses import dataclass


class LoadError(RuntimeError):
    """A dataset could not be fetched or parsed. Loads are never retried."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"Failed to load {source}: {message}")
        self.source = source


@dataclass(frozen=True)
class CoercionGap:
    """Values of one field that failed to parse and were defaulted by policy."""

    field: str
    n_missing: int
    policy: str
