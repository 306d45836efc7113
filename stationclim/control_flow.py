"""Conditionals, vectorized replacement and loops over station tables.

Each helper has a scalar/loop form and, where it makes sense, a vectorized
form; tests check that both agree.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Optional, Tuple

import numpy as np
import pandas as pd

from stationclim.config import WET_MONTH_THRESHOLD_MM


def classify_precipitation(value: Optional[float], threshold: float = WET_MONTH_THRESHOLD_MM) -> str:
    """Classify one monthly precipitation total as ``missing``, ``dry`` or ``wet``."""
    if value is None or pd.isna(value):
        return "missing"
    elif value >= threshold:
        return "wet"
    else:
        return "dry"


def flag_wet_months(
    table: pd.DataFrame,
    col: str = "precip_mm",
    threshold: float = WET_MONTH_THRESHOLD_MM,
    *,
    flag_col: str = "wet_month",
) -> pd.DataFrame:
    """Add a 1.0/0.0 ``flag_col`` via ``numpy.where``; absent inputs stay NaN."""
    out = table.copy()
    values = out[col].astype(float)
    out[flag_col] = np.where(values.isna(), np.nan, np.where(values >= threshold, 1.0, 0.0))
    return out


def replace_where(
    table: pd.DataFrame,
    col: str,
    condition: Callable[[pd.Series], pd.Series],
    value: object,
) -> pd.DataFrame:
    """Return a copy where ``col`` is set to ``value`` on rows matching ``condition``.

    Example: clip implausible negative precipitation to absent::

        replace_where(t, "precip_mm", lambda s: s < 0, np.nan)
    """
    out = table.copy()
    mask = condition(out[col]).fillna(False).astype(bool)
    out.loc[mask, col] = value
    return out


def station_means_loop(table: pd.DataFrame, key: str, target: str) -> Dict[Hashable, float]:
    """Per-station mean of present ``target`` values using an explicit loop.

    Groups with no present values map to NaN. Equivalent to
    ``summarize_by_group(table, key, target, "mean", skipna=True)``.
    """
    means: Dict[Hashable, float] = {}
    for station in table[key].dropna().unique():
        values = table.loc[table[key] == station, target].dropna()
        if len(values) == 0:
            means[station] = float("nan")
            continue
        total = 0.0
        for v in values:
            total += float(v)
        means[station] = total / len(values)
    return means


def first_station_exceeding(
    table: pd.DataFrame,
    key: str,
    target: str,
    limit: float,
) -> Optional[Tuple[Hashable, float]]:
    """Scan rows in order and return ``(key, value)`` of the first value above ``limit``."""
    i = 0
    n = len(table)
    keys = table[key].tolist()
    values = table[target].tolist()
    while i < n:
        v = values[i]
        if not pd.isna(v) and v > limit:
            return keys[i], float(v)
        i += 1
    return None
