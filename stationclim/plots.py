"""Monthly precipitation figure per station.

The figure is saved to disk (Agg backend) so that it can be opened later
without blocking the CLI or tests.
"""
from __future__ import annotations

import os
from typing import Iterable

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from stationclim.config import STATION_KEY  # noqa: E402


def plot_monthly_precipitation(
    table: pd.DataFrame,
    output_path: str,
    stations: Iterable[str] | None = None,
    *,
    key: str = STATION_KEY,
    value_col: str = "precip_mm",
) -> str:
    """Plot ``value_col`` over ``date`` with one line per station.

    Missing months show up as breaks in the line. Returns ``output_path``.
    """
    df = table.dropna(subset=["date"])
    if stations is not None:
        wanted = set(stations)
        df = df[df[key].isin(wanted)]
    if df.empty:
        raise ValueError("plot_monthly_precipitation: no rows to plot for the selected stations.")

    fig, ax = plt.subplots(figsize=(10, 5))
    for station, group in df.sort_values("date").groupby(key, sort=True):
        ax.plot(group["date"], group[value_col], marker="o", markersize=3, label=str(station))

    ax.set_title("Total monthly precipitation")
    ax.set_xlabel("Month")
    ax.set_ylabel("Precipitation (mm)")
    ax.legend(fontsize="small")
    fig.tight_layout()

    out_dir = os.path.dirname(output_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    fig.savefig(output_path)
    plt.close(fig)
    print(f"[plot] Saved precipitation figure to {output_path}")
    return output_path
