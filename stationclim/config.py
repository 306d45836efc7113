# stationclim/config.py

import os
from dataclasses import dataclass, field
from typing import Dict, List

# --- Base paths ---
# Project root can be overridden if needed (e.g. for tests or deployment)
BASE_DIR = os.path.abspath(os.getenv("STATIONCLIM_BASE_DIR", os.path.join(os.path.dirname(__file__), "..")))


# ---------------------------
# Structured configuration
# ---------------------------

@dataclass(frozen=True)
class PathsConfig:
    """Filesystem and path configuration.

    Values can be overridden via environment variables:
    - STATIONCLIM_RAW_DATA_DIR
    - STATIONCLIM_PROCESSED_DATA_DIR
    - STATIONCLIM_RUN_LOG_DIR
    """

    raw_data_dir: str = field(
        default_factory=lambda: os.getenv(
            "STATIONCLIM_RAW_DATA_DIR", os.path.join(BASE_DIR, "data", "raw")
        )
    )
    processed_data_dir: str = field(
        default_factory=lambda: os.getenv(
            "STATIONCLIM_PROCESSED_DATA_DIR", os.path.join(BASE_DIR, "data", "processed")
        )
    )
    run_log_dir: str = field(
        default_factory=lambda: os.getenv(
            "STATIONCLIM_RUN_LOG_DIR", os.path.join(BASE_DIR, "runs")
        )
    )

    def raw_data_csv(self) -> str:
        return os.path.join(self.raw_data_dir, "station_monthly.csv")

    def processed_data_csv(self) -> str:
        return os.path.join(self.processed_data_dir, "station_monthly_tidy.csv")

    def quality_report_txt(self) -> str:
        return os.path.join(self.processed_data_dir, "station_quality_report.txt")

    def precipitation_plot_png(self) -> str:
        return os.path.join(self.processed_data_dir, "monthly_precipitation.png")


@dataclass(frozen=True)
class StationDataConfig:
    """Layout and units of the monthly station summary CSV.

    Measurements are stored as integers in tenths of a unit (tenths of mm for
    precipitation, tenths of degrees C for temperature) with ``-9999`` marking
    a missing measurement. Dates are ``YYYYMMDD`` strings where only the year
    and month are informative.
    """

    missing_sentinel: int = -9999
    date_format: str = "%Y%m%d"
    tenths_scale: float = 0.1
    # Monthly precipitation (mm) at or above which a month counts as "wet".
    wet_month_threshold_mm: float = 50.0

    column_renames: Dict[str, str] = field(
        default_factory=lambda: {
            "STATION": "station",
            "STATION_NAME": "name",
            "ELEVATION": "elevation",
            "LATITUDE": "latitude",
            "LONGITUDE": "longitude",
            "DATE": "date",
            "TPCP": "precip_mm",
            "MMXT": "max_temp_c",
            "MMNT": "min_temp_c",
        }
    )
    measurement_columns: List[str] = field(
        default_factory=lambda: ["precip_mm", "max_temp_c", "min_temp_c"]
    )
    station_key: str = "name"


# Instantiate structured configs
PATHS = PathsConfig()
STATION_DATA = StationDataConfig()


# ---------------------------
# Backwards-compatible aliases
# ---------------------------

RAW_DATA_DIR = PATHS.raw_data_dir
PROCESSED_DATA_DIR = PATHS.processed_data_dir
RUN_LOG_DIR = PATHS.run_log_dir
RAW_DATA_CSV = PATHS.raw_data_csv()
PROCESSED_DATA_CSV = PATHS.processed_data_csv()
QUALITY_REPORT_TXT = PATHS.quality_report_txt()
PRECIPITATION_PLOT_PNG = PATHS.precipitation_plot_png()

MISSING_SENTINEL = STATION_DATA.missing_sentinel
DATE_FORMAT = STATION_DATA.date_format
TENTHS_SCALE = STATION_DATA.tenths_scale
WET_MONTH_THRESHOLD_MM = STATION_DATA.wet_month_threshold_mm
COLUMN_RENAMES = STATION_DATA.column_renames
RAW_COLUMNS = list(COLUMN_RENAMES.keys())
MEASUREMENT_COLUMNS = STATION_DATA.measurement_columns
STATION_KEY = STATION_DATA.station_key
TIDY_COLUMNS = list(COLUMN_RENAMES.values()) + ["year", "month"]
