"""Table construction, subsetting and type conversion helpers.

These are thin, explicit wrappers over pandas so that scripts and tests share
one code path and one set of error messages. None of them mutate their input;
each returns a new DataFrame.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Union

import pandas as pd

RowSelector = Union[int, slice, Sequence[int], Sequence[bool], pd.Series]


def make_table(columns: Mapping[str, Sequence], *, context: str = "make_table") -> pd.DataFrame:
    """Build a table from a mapping of column name to values.

    All columns must have the same length; pandas would otherwise broadcast
    scalars or raise a less helpful error.
    """
    lengths = {name: len(values) for name, values in columns.items()}
    if len(set(lengths.values())) > 1:
        raise ValueError(f"{context}: columns have unequal lengths: {lengths}")
    return pd.DataFrame({name: list(values) for name, values in columns.items()})


def bind_rows(*tables: pd.DataFrame) -> pd.DataFrame:
    """Stack tables vertically. Every table must have the same set of columns."""
    if not tables:
        return pd.DataFrame()

    expected = list(tables[0].columns)
    for i, t in enumerate(tables[1:], start=1):
        if set(t.columns) != set(expected):
            raise ValueError(
                f"bind_rows: table {i} columns {sorted(t.columns)} do not match {sorted(expected)}"
            )
    # Align column order on the first table.
    return pd.concat([t[expected] for t in tables], ignore_index=True)


def bind_columns(
    table: pd.DataFrame,
    other: pd.DataFrame | None = None,
    **new_columns: Sequence,
) -> pd.DataFrame:
    """Add columns from ``other`` and/or keyword arguments to ``table``.

    Lengths must equal ``len(table)``; values are aligned by position, not by
    index label.
    """
    n = len(table)
    out = table.reset_index(drop=True).copy()

    if other is not None:
        if len(other) != n:
            raise ValueError(f"bind_columns: expected {n} rows, other table has {len(other)}")
        clash = [c for c in other.columns if c in out.columns]
        if clash:
            raise ValueError(f"bind_columns: columns already present: {clash}")
        out = pd.concat([out, other.reset_index(drop=True)], axis=1)

    for name, values in new_columns.items():
        values = list(values)
        if len(values) != n:
            raise ValueError(f"bind_columns: column '{name}' has {len(values)} values, expected {n}")
        out[name] = values

    return out


def select_rows(table: pd.DataFrame, rows: RowSelector) -> pd.DataFrame:
    """Positional row subsetting (``iloc``); boolean masks are accepted too."""
    if isinstance(rows, pd.Series) and rows.dtype == bool:
        return table.loc[rows.values].reset_index(drop=True)
    if pd.api.types.is_integer(rows):
        rows = [int(rows)]
    return table.iloc[rows].reset_index(drop=True)


def select_columns(table: pd.DataFrame, cols: Union[str, Iterable[str]]) -> pd.DataFrame:
    """Select columns by name. A single name still returns a one-column table."""
    if isinstance(cols, str):
        cols = [cols]
    cols = list(cols)
    missing = [c for c in cols if c not in table.columns]
    if missing:
        raise KeyError(f"select_columns: unknown columns {missing}")
    return table[cols].copy()


def filter_rows(
    table: pd.DataFrame,
    condition: Union[pd.Series, Sequence[bool], Callable[[pd.DataFrame], pd.Series]],
) -> pd.DataFrame:
    """Keep rows where ``condition`` is true.

    ``condition`` may be a boolean mask or a callable returning one, e.g.
    ``lambda t: t["precip_mm"] > 10``. Absent comparisons count as false.
    """
    mask = condition(table) if callable(condition) else condition
    mask = pd.Series(mask, index=table.index).fillna(False).astype(bool)
    return table.loc[mask].reset_index(drop=True)


def rename_columns(
    table: pd.DataFrame,
    mapping: Mapping[str, str] | None = None,
    *,
    lowercase: bool = False,
) -> pd.DataFrame:
    """Rename columns via ``mapping`` and optionally lowercase all names."""
    out = table.copy()
    if mapping:
        unknown = [c for c in mapping if c not in out.columns]
        if unknown:
            raise KeyError(f"rename_columns: unknown columns {unknown}")
        out = out.rename(columns=dict(mapping))
    if lowercase:
        out.columns = [str(c).lower() for c in out.columns]
    return out


def to_numeric(table: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Convert columns to floats; values that cannot be parsed become NaN."""
    out = table.copy()
    for col in cols:
        out[col] = pd.to_numeric(out[col], errors="coerce").astype(float)
    return out


def to_text(table: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Convert columns to pandas' nullable string dtype (absent stays absent)."""
    out = table.copy()
    for col in cols:
        out[col] = out[col].astype("string")
    return out


def parse_dates(table: pd.DataFrame, col: str, fmt: str) -> pd.DataFrame:
    """Parse ``col`` with ``fmt``; unparseable entries become ``NaT``."""
    out = table.copy()
    if pd.api.types.is_numeric_dtype(out[col]):
        # A blank cell makes read_csv load 20100101 as 20100101.0; go through
        # nullable ints so each value is rendered without the decimal part.
        num = pd.to_numeric(out[col], errors="coerce")
        num = num.where(num == num.round())
        raw = num.astype("Int64").astype("string")
    else:
        raw = out[col].astype("string")
    out[col] = pd.to_datetime(raw, format=fmt, errors="coerce")
    return out


def describe_table(table: pd.DataFrame) -> Dict[str, object]:
    """Small structural summary: row count, column names and dtypes."""
    columns: List[Dict[str, str]] = [
        {"name": str(name), "dtype": str(dtype)} for name, dtype in table.dtypes.items()
    ]
    return {"n_rows": int(len(table)), "n_cols": int(table.shape[1]), "columns": columns}
