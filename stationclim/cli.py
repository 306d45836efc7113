"""Command-line entrypoint for the station data pipeline.

Usage (from repo root):

    python -m stationclim.cli process --input data/raw/station_monthly.csv
    python -m stationclim.cli missing --target precip_mm
    python -m stationclim.cli quality --min-score 80
    python -m stationclim.cli plot --station "BOULDER CO US"

Every invocation appends ``run_start``, ``step`` and ``run_end`` events to a JSONL file
under ``RUN_LOG_DIR`` (see :mod:`stationclim.run_log`).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from stationclim.config import (
    PRECIPITATION_PLOT_PNG,
    PROCESSED_DATA_CSV,
    QUALITY_REPORT_TXT,
    RAW_DATA_CSV,
    RUN_LOG_DIR,
    STATION_KEY,
)
from stationclim.data import load_processed_stations, load_stations_with_missing
from stationclim.data_quality import ensure_station_data_quality, format_quality_report
from stationclim.grouping import any_missing_by_group, keys_where
from stationclim.plots import plot_monthly_precipitation
from stationclim.processing import process_station_csv
from stationclim.run_log import RunLog


def _cmd_process(args: argparse.Namespace, log: RunLog) -> dict:
    tidy = process_station_csv(args.input, args.output)
    flags = any_missing_by_group(tidy, "precip_mm", STATION_KEY)
    log.step(
        "process",
        rows=len(tidy),
        stations=len(flags),
        stations_with_missing_precip=len(keys_where(flags)),
    )
    return {"rows": len(tidy), "output": args.output}


def _cmd_missing(args: argparse.Namespace, log: RunLog) -> dict:
    stations = load_stations_with_missing(args.processed, target=args.target, key=args.key)
    log.step("missing", target=args.target, stations_with_missing=len(stations))
    if stations:
        print(f"[cli] Stations with missing '{args.target}' values ({len(stations)}):")
        for name in stations:
            print(f"  {name}")
    else:
        print(f"[cli] No stations with missing '{args.target}' values.")
    return {"target": args.target, "stations": stations}


def _cmd_quality(args: argparse.Namespace, log: RunLog) -> dict:
    checks, kpi = ensure_station_data_quality(
        csv_path=args.input,
        min_score=args.min_score,
        allow_failures=args.allow_failures,
    )
    log.step(
        "quality",
        score=kpi["score_0_100"],
        n_fail=kpi["n_fail"],
        stations_flagged=len(kpi["stations_flagged"]),
    )
    report = format_quality_report(checks, kpi)
    print(report)
    if args.report:
        out = Path(args.report)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(report, encoding="utf-8")
        print(f"[quality] Report written to {out}")
    return {"kpi": kpi}


def _cmd_plot(args: argparse.Namespace, log: RunLog) -> dict:
    df = load_processed_stations(args.processed)
    path = plot_monthly_precipitation(df, args.output, stations=args.station or None)
    plotted = len(args.station) if args.station else int(df[STATION_KEY].nunique())
    log.step("plot", rows=len(df), stations=plotted)
    return {"output": path}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tidy monthly station climate data and report missing values."
    )
    parser.add_argument(
        "--log-dir",
        default=RUN_LOG_DIR,
        help=f"Directory for JSONL run logs (default: {RUN_LOG_DIR})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("process", help="Raw CSV -> tidy CSV (renamed, normalized, unit-converted).")
    p.add_argument("--input", default=RAW_DATA_CSV, help=f"Raw CSV (default: {RAW_DATA_CSV})")
    p.add_argument("--output", default=PROCESSED_DATA_CSV, help=f"Tidy CSV (default: {PROCESSED_DATA_CSV})")
    p.set_defaults(func=_cmd_process)

    p = sub.add_parser("missing", help="List stations with at least one missing value.")
    p.add_argument("--processed", default=PROCESSED_DATA_CSV, help="Tidy CSV to read.")
    p.add_argument("--target", default="precip_mm", help="Measurement column to scan.")
    p.add_argument("--key", default=STATION_KEY, help="Group key column.")
    p.set_defaults(func=_cmd_missing)

    p = sub.add_parser("quality", help="Run data-quality checks on the raw CSV.")
    p.add_argument("--input", default=RAW_DATA_CSV, help="Raw CSV to check.")
    p.add_argument("--min-score", type=float, default=0.0, help="Minimum acceptable quality score.")
    p.add_argument("--allow-failures", action="store_true", help="Do not exit non-zero on failed checks.")
    p.add_argument("--report", nargs="?", const=QUALITY_REPORT_TXT, default=None,
                   help=f"Also write the report to a file (default path: {QUALITY_REPORT_TXT}).")
    p.set_defaults(func=_cmd_quality)

    p = sub.add_parser("plot", help="Plot monthly precipitation per station.")
    p.add_argument("--processed", default=PROCESSED_DATA_CSV, help="Tidy CSV to read.")
    p.add_argument("--output", default=PRECIPITATION_PLOT_PNG, help="PNG output path.")
    p.add_argument("--station", action="append", help="Station to include (repeatable).")
    p.set_defaults(func=_cmd_plot)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    log = RunLog(args.command, log_dir=Path(args.log_dir))
    log.start()

    try:
        outcome = args.func(args, log)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        print(f"[cli] Error: {exc}", file=sys.stderr)
        log.finish("failed", error=str(exc))
        return 1

    log.finish("ok", result=outcome)
    return 0


if __name__ == "__main__":
    sys.exit(main())
