"""Missing-value handling for station measurements.

Raw files mark absent measurements with a numeric sentinel (``-9999``). Once
normalized to NaN, absent values must not take part in arithmetic unless a
caller opts in with ``skipna=True``; pandas skips NaN by default, so the
helpers here flip that default.
"""

from __future__ import annotations

from typing import Dict, Iterable

import numpy as np
import pandas as pd

from stationclim.config import MISSING_SENTINEL


def normalize_sentinel(
    table: pd.DataFrame,
    cols: Iterable[str],
    sentinel: float = MISSING_SENTINEL,
) -> pd.DataFrame:
    """Replace ``sentinel`` with NaN in ``cols`` and return a new table.

    The affected columns are coerced to float so NaN can be represented.
    """
    cols = list(cols)
    missing = [c for c in cols if c not in table.columns]
    if missing:
        raise KeyError(f"normalize_sentinel: unknown columns {missing}")

    out = table.copy()
    for col in cols:
        values = pd.to_numeric(out[col], errors="coerce").astype(float)
        out[col] = values.mask(values == sentinel, np.nan)
    return out


def count_missing(table: pd.DataFrame, cols: Iterable[str] | None = None) -> Dict[str, int]:
    """Number of absent values per column."""
    cols = list(table.columns) if cols is None else list(cols)
    counts = table[cols].isna().sum()
    return {str(col): int(cnt) for col, cnt in counts.items()}


def rows_with_missing(table: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Rows where any of ``cols`` is absent."""
    cols = list(cols)
    mask = table[cols].isna().any(axis=1)
    return table.loc[mask].reset_index(drop=True)


def safe_sum(values: pd.Series, *, skipna: bool = False) -> float:
    """Sum that returns NaN when any value is absent, unless ``skipna``."""
    return float(pd.Series(values, dtype=float).sum(skipna=skipna, min_count=1))


def safe_mean(values: pd.Series, *, skipna: bool = False) -> float:
    """Mean that returns NaN when any value is absent, unless ``skipna``."""
    s = pd.Series(values, dtype=float)
    if s.empty:
        return float("nan")
    return float(s.mean(skipna=skipna))
