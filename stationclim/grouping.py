"""Grouped reductions over a table.

The central question the station data answers is "which stations have at
least one missing precipitation month?". That is a reduction per group:
test each row's value with a predicate and fold the results with logical OR.
:func:`group_reduce` implements the general single-pass form and
:func:`any_missing_by_group` is the OR-of-``isna`` specialisation.

Policies
--------
- Rows whose group key is itself absent are excluded from every group.
- Results are plain dicts ordered by the first appearance of each key in the
  table. Callers that need a stable presentation order should sort.
- Inputs are read-only; nothing here mutates the table.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, TypeVar, Union

import pandas as pd

from stationclim.missing import safe_mean, safe_sum

T = TypeVar("T")
R = TypeVar("R")


def _require_columns(table: pd.DataFrame, cols: Iterable[str], *, context: str) -> None:
    missing = [c for c in cols if c not in table.columns]
    if missing:
        raise KeyError(f"{context}: missing required columns: {missing}")


def _is_absent(value: object) -> bool:
    return value is None or bool(pd.isna(value))


def group_reduce(
    table: pd.DataFrame,
    key: str,
    target: str,
    predicate: Callable[[object], T],
    combine: Callable[[R, T], R],
    initial: R,
) -> Dict[Hashable, R]:
    """Fold ``predicate(value)`` into one accumulator per distinct ``key``.

    For every row (in table order) with a non-absent key ``k`` and target
    value ``v``::

        acc[k] = combine(acc.get(k, initial), predicate(v))

    One pass over the rows, O(n). Keys are discovered from the data, so a key
    that does not occur in ``table`` never appears in the result and an empty
    table yields ``{}``.
    """
    _require_columns(table, [key, target], context="group_reduce")

    result: Dict[Hashable, R] = {}
    for k, value in zip(table[key].tolist(), table[target].tolist()):
        if _is_absent(k):
            continue
        result[k] = combine(result.get(k, initial), predicate(value))
    return result


def any_missing_by_group(table: pd.DataFrame, target: str, key: str) -> Dict[Hashable, bool]:
    """Map each group key to whether any of its ``target`` values is absent.

    A group with every value present maps to ``False``; one absent value is
    enough for ``True``.
    """
    return group_reduce(
        table,
        key,
        target,
        predicate=_is_absent,
        combine=lambda acc, hit: acc or hit,
        initial=False,
    )


def keys_where(result: Dict[Hashable, object], value: object = True) -> List[Hashable]:
    """Keys of ``result`` whose value equals ``value``, in result order."""
    return [k for k, v in result.items() if v == value]


_AGGREGATIONS = {"mean", "sum", "count", "min", "max"}


def summarize_by_group(
    table: pd.DataFrame,
    key: str,
    target: str,
    how: str = "mean",
    *,
    skipna: bool = False,
) -> Dict[Hashable, Union[float, int]]:
    """Per-group summary of ``target`` (mean/sum/count/min/max).

    Absent values propagate (the group result is NaN) unless ``skipna=True``.
    ``count`` always counts present values only and returns ints; the other
    aggregations return floats.
    """
    if how not in _AGGREGATIONS:
        raise ValueError(f"summarize_by_group: unsupported aggregation {how!r}; expected one of {sorted(_AGGREGATIONS)}")
    _require_columns(table, [key, target], context="summarize_by_group")

    grouped = table.groupby(key, sort=False, dropna=True)[target]

    if how == "count":
        return {k: int(v) for k, v in grouped.count().items()}

    if how == "mean":
        series = grouped.apply(lambda s: safe_mean(s, skipna=skipna))
    elif how == "sum":
        series = grouped.apply(lambda s: safe_sum(s, skipna=skipna))
    elif skipna:
        # GroupBy.min/max already skip NaN.
        series = getattr(grouped, how)()
    else:
        series = grouped.apply(
            lambda s: float("nan") if s.isna().any() else float(getattr(s, how)())
        )

    return {k: float(v) for k, v in series.items()}
