"""Data quality checks and reporting for raw monthly station data.

This module provides small, explicit checks over the raw station CSV used by
the rest of the pipeline, plus helpers to compute a 0–100 quality KPI and
format a human-readable report. Checks that can be traced back to rows carry
a ``stations`` list so the report can say which stations need attention.

All checks are *read-only* and have no side effects.
"""

from __future__ import annotations

from typing import List, Dict

import os

import pandas as pd

from stationclim.config import (
    COLUMN_RENAMES,
    MEASUREMENT_COLUMNS,
    MISSING_SENTINEL,
    RAW_COLUMNS,
    RAW_DATA_CSV,
    STATION_KEY,
    TIDY_COLUMNS,
)
from stationclim.grouping import any_missing_by_group, keys_where
from stationclim.processing import tidy_station_table


CheckResult = Dict[str, object]

# Raw (upper-case) names of the measurement columns, e.g. TPCP for precip_mm.
RAW_MEASUREMENT_COLUMNS = [raw for raw, tidy in COLUMN_RENAMES.items() if tidy in MEASUREMENT_COLUMNS]

# Weight of each check category in the KPI; unknown categories weigh 1.0.
CATEGORY_WEIGHTS = {
    "Structure": 2.0,
    "Missing values": 1.0,
    "Validity": 1.0,
    "Time coverage": 0.5,
}
STATUS_WEIGHTS = {"pass": 1.0, "warn": 0.6, "fail": 0.0}


def _status_from_bool(ok: bool, warn: bool = False) -> str:
    """Map boolean condition to a status string.

    - ok=True  -> "pass"
    - ok=False and warn=True  -> "warn"
    - ok=False and warn=False -> "fail"
    """

    if ok:
        return "pass"
    if warn:
        return "warn"
    return "fail"


def _stations_where(df: pd.DataFrame, mask: pd.Series) -> List[str]:
    """Sorted distinct station keys of the rows selected by ``mask``."""
    keys = df.loc[mask.fillna(False).astype(bool), STATION_KEY].dropna()
    return sorted(str(k) for k in keys.unique())


def analyze_station_data(csv_path: str = RAW_DATA_CSV) -> List[CheckResult]:
    """Run a battery of data-quality checks on the raw station CSV.

    Returns a list of dictionaries; each has at least the keys::

        id, category, description, status, details

    where ``status`` is one of ``{"pass", "warn", "fail"}``.
    """

    results: List[CheckResult] = []

    # ----------------------------------------------------------------------------------
    # File-level & structural checks
    # ----------------------------------------------------------------------------------
    if not os.path.exists(csv_path):
        results.append(
            {
                "id": "file_exists",
                "category": "Structure",
                "description": f"File exists at {csv_path}",
                "status": "fail",
                "details": "File not found.",
            }
        )
        return results

    raw = pd.read_csv(csv_path)
    n_rows, n_cols = raw.shape

    results.append(
        {
            "id": "file_size",
            "category": "Structure",
            "description": "File non-empty",
            "status": _status_from_bool(n_rows > 0),
            "details": f"{n_rows} rows, {n_cols} columns",
        }
    )

    missing = [c for c in RAW_COLUMNS if c not in raw.columns]
    results.append(
        {
            "id": "required_columns",
            "category": "Structure",
            "description": f"Required columns present: {RAW_COLUMNS}",
            "status": "fail" if missing else "pass",
            "details": f"Missing: {missing}" if missing else "All present.",
        }
    )
    if missing or n_rows == 0:
        # Without required columns or rows, later checks are not meaningful.
        return results

    df = tidy_station_table(raw)

    # ----------------------------------------------------------------------------------
    # Dates & coverage
    # ----------------------------------------------------------------------------------
    n_bad_dates = int(df["date"].isna().sum())
    results.append(
        {
            "id": "date_parse",
            "category": "Structure",
            "description": "DATE column parseable as YYYYMMDD",
            "status": _status_from_bool(n_bad_dates == 0, warn=True),
            "details": f"{n_bad_dates} rows with unparseable DATE (dropped by process).",
            "stations": _stations_where(df, df["date"].isna()),
        }
    )

    n_no_key = int(df[STATION_KEY].isna().sum())
    results.append(
        {
            "id": "station_key",
            "category": "Structure",
            "description": f"Every row has a station '{STATION_KEY}'",
            "status": _status_from_bool(n_no_key == 0, warn=True),
            "details": f"{n_no_key} rows without a station key (excluded from grouping).",
        }
    )

    dated = df.dropna(subset=["date"])
    if not dated.empty:
        first_ts = dated["date"].min()
        last_ts = dated["date"].max()
        n_stations = int(df[STATION_KEY].nunique(dropna=True))
        results.append(
            {
                "id": "time_range",
                "category": "Time coverage",
                "description": "First/last month and number of stations",
                "status": "pass",
                "details": f"{first_ts:%Y-%m} -> {last_ts:%Y-%m}; {n_stations} stations",
            }
        )

    dup_count = int(dated.duplicated(subset=[STATION_KEY, "year", "month"]).sum())
    results.append(
        {
            "id": "duplicates",
            "category": "Structure",
            "description": "Duplicate station/month rows",
            "status": _status_from_bool(dup_count == 0, warn=True),
            "details": f"{dup_count} duplicate station/month rows.",
            "stations": _stations_where(dated, dated.duplicated(subset=[STATION_KEY, "year", "month"], keep=False)),
        }
    )

    # ----------------------------------------------------------------------------------
    # Missing values
    # ----------------------------------------------------------------------------------
    is_sentinel = raw[RAW_MEASUREMENT_COLUMNS].apply(pd.to_numeric, errors="coerce").eq(MISSING_SENTINEL)
    sentinel_counts = {col: int(cnt) for col, cnt in is_sentinel.sum().items()}
    n_sentinel = sum(sentinel_counts.values())
    sentinel_details = ", ".join(f"{col}: {cnt}" for col, cnt in sentinel_counts.items())
    results.append(
        {
            "id": "sentinel_values",
            "category": "Missing values",
            "description": f"Sentinel {MISSING_SENTINEL} values in measurement columns",
            "status": _status_from_bool(n_sentinel == 0, warn=True),
            "details": f"Total sentinels: {n_sentinel} ({sentinel_details})",
            "stations": _stations_where(df, is_sentinel.any(axis=1)),
        }
    )

    nan_counts = df[MEASUREMENT_COLUMNS].isna().sum()
    total_nans = int(nan_counts.sum())
    nan_details = ", ".join(f"{col}: {int(cnt)}" for col, cnt in nan_counts.items())
    results.append(
        {
            "id": "nan_values",
            "category": "Missing values",
            "description": "Absent values in measurement columns after normalization",
            "status": _status_from_bool(total_nans == 0, warn=True),
            "details": f"Total absent: {total_nans} ({nan_details})",
            "stations": _stations_where(df, df[MEASUREMENT_COLUMNS].isna().any(axis=1)),
        }
    )

    by_station = any_missing_by_group(df, "precip_mm", STATION_KEY)
    stations_missing = sorted(str(k) for k in keys_where(by_station, True))
    results.append(
        {
            "id": "stations_missing_precip",
            "category": "Missing values",
            "description": "Stations with at least one missing precipitation month",
            "status": _status_from_bool(not stations_missing, warn=True),
            "details": f"{len(stations_missing)} of {len(by_station)} stations; first few: {stations_missing[:5]}",
            "stations": stations_missing,
        }
    )

    # ----------------------------------------------------------------------------------
    # Basic validity
    # ----------------------------------------------------------------------------------
    negatives = int((df["precip_mm"] < 0).sum())
    results.append(
        {
            "id": "precip_sign",
            "category": "Validity",
            "description": "No negative precipitation totals",
            "status": _status_from_bool(negatives == 0, warn=True),
            "details": f"Negative values: {negatives}.",
            "stations": _stations_where(df, df["precip_mm"] < 0),
        }
    )

    temp_bad = int((df["max_temp_c"] < df["min_temp_c"]).sum())
    results.append(
        {
            "id": "temp_consistency",
            "category": "Validity",
            "description": "Mean maximum temperature >= mean minimum temperature",
            "status": _status_from_bool(temp_bad == 0, warn=True),
            "details": f"{temp_bad} rows with max < min.",
            "stations": _stations_where(df, df["max_temp_c"] < df["min_temp_c"]),
        }
    )

    return results


def ensure_station_data_quality(
    *,
    csv_path: str = RAW_DATA_CSV,
    min_score: float = 0.0,
    allow_failures: bool = False,
) -> tuple[list[CheckResult], Dict[str, object]]:
    """Run station checks and optionally enforce a quality threshold.

    Parameters
    ----------
    csv_path:
        Path to the raw station CSV; defaults to :data:`RAW_DATA_CSV`.
    min_score:
        Minimum acceptable ``score_0_100`` from :func:`compute_quality_kpi`.
    allow_failures:
        When ``False`` and either ``kpi['score_0_100'] < min_score`` or any
        check has ``status == 'fail'``, a :class:`ValueError` is raised.
    """

    checks = analyze_station_data(csv_path)
    kpi = compute_quality_kpi(checks)

    score = float(kpi.get("score_0_100", 0.0))
    n_fail = int(kpi.get("n_fail", 0))

    if not allow_failures and (score < float(min_score) or n_fail > 0):
        raise ValueError(
            f"Station data quality below threshold: score={score:.1f}, "
            f"failures={n_fail}, min_score={min_score:.1f}, "
            f"stations flagged={kpi.get('stations_flagged', [])}"
        )

    return checks, kpi


def validate_station_frame(df: pd.DataFrame, *, context: str = "station_frame") -> None:
    """Sanity checks for a tidy station frame.

    Raises ValueError on hard violations (missing columns, empty frame,
    non-datetime ``date``). Absent measurements are allowed; absent dates are
    not.
    """

    missing = [c for c in TIDY_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{context}: missing required columns: {missing}")

    if df.empty:
        raise ValueError(f"{context}: DataFrame is empty.")

    if not pd.api.types.is_datetime64_any_dtype(df["date"]):
        raise ValueError(f"{context}: 'date' column must be datetime-like.")

    if df["date"].isna().any():
        raise ValueError(f"{context}: NaT detected in 'date' column.")


def compute_quality_kpi(checks: List[CheckResult]) -> Dict[str, object]:
    """Score the checks 0–100 and collect the stations they flag.

    Each check contributes ``STATUS_WEIGHTS[status]`` weighted by
    ``CATEGORY_WEIGHTS[category]`` (unknown categories weigh 1.0). The score is
    the weighted mean times 100. ``stations_flagged`` is the sorted union of
    the ``stations`` lists of every check that did not pass.
    """

    counts = {status: 0 for status in STATUS_WEIGHTS}
    weighted = 0.0
    total = 0.0
    flagged: set[str] = set()

    for c in checks:
        status = str(c.get("status"))
        if status in counts:
            counts[status] += 1
        w = CATEGORY_WEIGHTS.get(str(c.get("category", "")), 1.0)
        weighted += w * STATUS_WEIGHTS.get(status, 0.0)
        total += w
        if status != "pass":
            flagged.update(str(s) for s in c.get("stations", None) or [])

    return {
        "score_0_100": 100.0 * weighted / total if total else 0.0,
        "n_total": len(checks),
        "n_pass": counts["pass"],
        "n_warn": counts["warn"],
        "n_fail": counts["fail"],
        "stations_flagged": sorted(flagged),
    }


def format_quality_report(
    checks: List[CheckResult],
    kpi: Dict[str, object] | None = None,
    *,
    dataset_name: str = "Station monthly data",
) -> str:
    """Render a plain-text report: score, checks grouped by category, then
    the stations that appear in any non-passing check."""

    kpi = kpi or compute_quality_kpi(checks)

    title = f"{dataset_name} quality report"
    lines: list[str] = [title, "=" * len(title), ""]
    lines.append(
        f"Score {kpi.get('score_0_100', 0.0):.1f} / 100 over {kpi.get('n_total', 0)} checks "
        f"({kpi.get('n_pass', 0)} passed, {kpi.get('n_warn', 0)} warnings, {kpi.get('n_fail', 0)} failed)"
    )
    if kpi.get("n_fail"):
        lines.append("There are FAILED checks; fix the input file before processing it.")
    lines.append("")

    by_category: Dict[str, List[CheckResult]] = {}
    for c in checks:
        by_category.setdefault(str(c.get("category", "Other")), []).append(c)

    # Heaviest categories first, then alphabetical.
    for category in sorted(by_category, key=lambda cat: (-CATEGORY_WEIGHTS.get(cat, 1.0), cat)):
        lines.append(f"{category}:")
        for c in sorted(by_category[category], key=lambda c: str(c.get("id", ""))):
            lines.append(f"- [{str(c.get('status', '')).upper()}] {c.get('id', '<unknown>')}: {c.get('description', '')}")
            if c.get("details"):
                lines.append(f"    -> {c['details']}")
            if c.get("status") != "pass" and c.get("stations"):
                lines.append(f"    stations: {', '.join(c['stations'])}")
        lines.append("")

    stations = kpi.get("stations_flagged") or []
    if stations:
        lines.append(f"Stations needing attention ({len(stations)}):")
        lines.extend(f"  {s}" for s in stations)
    else:
        lines.append("No station-level issues found.")

    return "\n".join(lines)
