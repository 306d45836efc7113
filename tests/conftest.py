"""Pytest configuration to make the project root importable as a package.

This ensures that ``import stationclim`` and ``import api`` work when tests
are run from the repository root or other locations. It also provides a tiny
raw station CSV shared by the pipeline tests.
"""

import os
import sys

import pandas as pd
import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


RAW_ROWS = [
    # STATION, STATION_NAME, ELEVATION, LATITUDE, LONGITUDE, DATE, TPCP, MMXT, MMNT
    ("GHCND:USC00050848", "BOULDER CO US", 1671.5, 39.9919, -105.2667, 20100101, 280, 77, -92),
    ("GHCND:USC00050848", "BOULDER CO US", 1671.5, 39.9919, -105.2667, 20100201, -9999, 61, -85),
    ("GHCND:USC00055878", "NIWOT CO US", 3020.0, 40.0500, -105.5833, 20100101, 520, -40, -141),
    ("GHCND:USC00055878", "NIWOT CO US", 3020.0, 40.0500, -105.5833, 20100201, 610, -31, -130),
    ("GHCND:USC00053629", "GROSS RESERVOIR CO US", 2417.1, 39.9469, -105.3625, 20100101, 150, 50, -100),
    ("GHCND:USC00053629", "GROSS RESERVOIR CO US", 2417.1, 39.9469, -105.3625, 20100201, -9999, 61, -9999),
]

RAW_COLUMN_ORDER = [
    "STATION", "STATION_NAME", "ELEVATION", "LATITUDE", "LONGITUDE",
    "DATE", "TPCP", "MMXT", "MMNT",
]


@pytest.fixture
def raw_station_df() -> pd.DataFrame:
    return pd.DataFrame(RAW_ROWS, columns=RAW_COLUMN_ORDER)


@pytest.fixture
def raw_station_csv(tmp_path, raw_station_df) -> str:
    """Write the sample rows as a raw CSV and return its path."""
    csv_path = tmp_path / "raw" / "station_monthly.csv"
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    raw_station_df.to_csv(csv_path, index=False)
    return str(csv_path)
