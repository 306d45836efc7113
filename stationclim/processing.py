import os

import pandas as pd

from stationclim.config import (
    COLUMN_RENAMES,
    DATE_FORMAT,
    MEASUREMENT_COLUMNS,
    MISSING_SENTINEL,
    PROCESSED_DATA_CSV,
    RAW_COLUMNS,
    RAW_DATA_CSV,
    TENTHS_SCALE,
)
from stationclim.missing import normalize_sentinel
from stationclim.table import parse_dates, rename_columns, select_columns


def load_station_csv(input_csv_path: str = RAW_DATA_CSV) -> pd.DataFrame:
    """Load a raw monthly station summary CSV.

    Args:
        input_csv_path: Path to the raw CSV. Must contain the upper-case
            GHCN-style columns listed in :data:`stationclim.config.RAW_COLUMNS`.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if required columns are missing.
    """
    if not os.path.exists(input_csv_path):
        raise FileNotFoundError(f"Raw station data not found at {input_csv_path}.")

    df = pd.read_csv(input_csv_path)
    missing = [c for c in RAW_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"load_station_csv: missing required columns: {missing}")
    return df


def tidy_station_table(raw: pd.DataFrame) -> pd.DataFrame:
    """Turn a raw station table into the tidy layout used everywhere else.

    Steps:
        * keep the known columns and rename them to lower-case names
          (``TPCP`` -> ``precip_mm`` and so on);
        * replace the ``-9999`` sentinel with NaN in measurement columns;
        * convert tenths of mm / tenths of a degree to mm / degrees;
        * parse ``date`` (``YYYYMMDD``) and append ``year`` and ``month``.

    The input frame is left untouched.
    """
    df = select_columns(raw, RAW_COLUMNS)
    df = rename_columns(df, COLUMN_RENAMES)

    df = normalize_sentinel(df, MEASUREMENT_COLUMNS, sentinel=MISSING_SENTINEL)
    for col in MEASUREMENT_COLUMNS:
        # Round to one decimal to drop float noise from the 0.1 scale factor.
        df[col] = (df[col] * TENTHS_SCALE).round(1)

    df = parse_dates(df, "date", DATE_FORMAT)
    # Only the year and month of the date are informative.
    df["year"] = df["date"].dt.year.astype("Int64")
    df["month"] = df["date"].dt.month.astype("Int64")

    return df


def process_station_csv(
    input_csv_path: str = RAW_DATA_CSV,
    output_csv_path: str = PROCESSED_DATA_CSV,
) -> pd.DataFrame:
    """Load, tidy and persist the station table. Returns the tidy frame."""
    print(f"[process] Loading raw station data from {input_csv_path}")
    raw = load_station_csv(input_csv_path)
    print(f"[process] Raw shape: {raw.shape}")

    tidy = tidy_station_table(raw)
    n_missing = int(tidy[MEASUREMENT_COLUMNS].isna().sum().sum())
    print(f"[process] Normalized {n_missing} missing measurements across {MEASUREMENT_COLUMNS}")

    # Rows without a usable month cannot be placed in time; the tidy file only
    # carries dated rows so that load_processed_stations accepts it.
    n_bad_dates = int(tidy["date"].isna().sum())
    if n_bad_dates:
        print(f"[process] Dropping {n_bad_dates} rows with unparseable dates")
        tidy = tidy.dropna(subset=["date"]).reset_index(drop=True)
    if tidy.empty:
        raise ValueError(f"process_station_csv: no rows with a parseable date in {input_csv_path}")

    out_dir = os.path.dirname(output_csv_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    tidy.to_csv(output_csv_path, index=False, date_format="%Y-%m-%d")
    print(f"[process] Tidy station data ({len(tidy)} rows) saved to {output_csv_path}")
    return tidy
