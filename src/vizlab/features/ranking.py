from __future__ import annotations

import numpy as np
import pandas as pd


def stable_sort(frame: pd.DataFrame, column: str, ascending: bool = True) -> pd.DataFrame:
    """Sort by one column keeping input order among ties; missing values go last."""
    values = pd.to_numeric(frame[column], errors="coerce").to_numpy(dtype=float)
    keys = values if ascending else -values
    order = np.argsort(keys, kind="stable")
    return frame.iloc[order].reset_index(drop=True)


def top_n(frame: pd.DataFrame, column: str, n: int) -> pd.DataFrame:
    return stable_sort(frame, column, ascending=False).head(max(0, int(n)))
