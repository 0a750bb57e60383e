from __future__ import annotations

import json
import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import pandas as pd

from vizlab.config import is_remote
from vizlab.errors import LoadError

LOGGER = logging.getLogger(__name__)

SourceFormat = Literal["csv", "text", "json"]


@dataclass(frozen=True)
class DatasetSource:
    name: str
    location: str
    fmt: SourceFormat = "csv"
    columns: tuple[str, ...] | None = None


def load_rows(location: str, *, columns: tuple[str, ...] | None = None) -> pd.DataFrame:
    """Read a delimited file into raw rows: every cell is kept as a string.

    With ``columns`` the file is treated as headerless and the names are applied
    in order.
    """
    try:
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        frame = pd.read_csv(
            location,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            header=None if columns else "infer",
            names=list(columns) if columns else None,
            skip_blank_lines=True,
        )
    except (OSError, ValueError) as exc:
        LOGGER.error("Load failed for %s: %s", location, exc)
        raise LoadError(location, str(exc)) from exc
    LOGGER.info("Loaded %d rows from %s", len(frame), location)
    return frame


def load_json(location: str) -> Any:
    try:
        if is_remote(location):
            with urllib.request.urlopen(location, timeout=30) as response:
                payload = response.read().decode("utf-8")
        else:
            payload = Path(location).read_text(encoding="utf-8")
        data = json.loads(payload)
    except (OSError, ValueError) as exc:
        LOGGER.error("Load failed for %s: %s", location, exc)
        raise LoadError(location, str(exc)) from exc
    LOGGER.info("Loaded JSON document from %s", location)
    return data


def load(source: DatasetSource) -> Any:
    if source.fmt == "json":
        return load_json(source.location)
    if source.fmt == "text":
        if not source.columns:
            raise ValueError(f"Headerless source {source.name} needs column names")
        return load_rows(source.location, columns=source.columns)
    return load_rows(source.location)
