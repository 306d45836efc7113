from __future__ import annotations

from unittest.mock import patch

import pandas as pd
import pytest

import stationclim.data as data_mod
from stationclim.processing import process_station_csv


@pytest.fixture
def processed_csv(raw_station_csv, tmp_path):
    out = tmp_path / "processed" / "tidy.csv"
    process_station_csv(raw_station_csv, str(out))
    return str(out)


def test_load_processed_stations_parses_dates(processed_csv):
    df = data_mod.load_processed_stations(processed_csv)

    assert len(df) == 6
    assert pd.api.types.is_datetime64_any_dtype(df["date"])
    assert str(df["month"].dtype) == "Int64"


def test_load_processed_stations_defaults_to_config_path(processed_csv):
    with patch("stationclim.data.PROCESSED_DATA_CSV", processed_csv):
        df = data_mod.load_processed_stations()

    assert len(df) == 6


def test_load_stations_with_missing(processed_csv):
    assert data_mod.load_stations_with_missing(processed_csv) == [
        "BOULDER CO US",
        "GROSS RESERVOIR CO US",
    ]
    assert data_mod.load_stations_with_missing(processed_csv, target="min_temp_c") == [
        "GROSS RESERVOIR CO US",
    ]
    assert data_mod.load_stations_with_missing(processed_csv, target="max_temp_c") == []
