"""Centralized access helpers for the processed station table.

Scripts, the CLI and the API load the tidy CSV through these helpers so that
date parsing and validation happen in one place.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from stationclim.config import PROCESSED_DATA_CSV, STATION_KEY
from stationclim.data_quality import validate_station_frame
from stationclim.grouping import any_missing_by_group, keys_where

__all__ = [
    "load_processed_stations",
    "load_stations_with_missing",
]


def load_processed_stations(csv_path: str | None = None) -> pd.DataFrame:
    """Load the tidy station CSV written by :func:`process_station_csv`.

    ``date`` is parsed as datetime and ``year``/``month`` as nullable ints.
    """

    path = csv_path or PROCESSED_DATA_CSV
    df = pd.read_csv(path, parse_dates=["date"])
    df["year"] = df["year"].astype("Int64")
    df["month"] = df["month"].astype("Int64")
    validate_station_frame(df, context=f"load_processed_stations[{path}]")
    return df


def load_stations_with_missing(
    csv_path: str | None = None,
    target: str = "precip_mm",
    key: str = STATION_KEY,
) -> List[str]:
    """Sorted station keys that have at least one absent ``target`` value."""

    df = load_processed_stations(csv_path)
    result = any_missing_by_group(df, target, key)
    return sorted(str(k) for k in keys_where(result, True))
