#!/usr/bin/env python3
"""
Summarize the accumulated Wakapi CSVs over the last N days.

**Purpose**: Quick look at what the daily sync has collected. Reads the three
CSV files written by sync_wakapi_daily_summary.py and prints:
  - Days recorded, total hours and average hours per recorded day
  - The busiest day in the window
  - Top projects and top languages by summed seconds in the window

**Usage**:
    python actions/summarize_daily_totals.py
    python actions/summarize_daily_totals.py --days 30 --out-dir data/wakapi

The window is the last N calendar days ending at the newest date present in
daily-total.csv, not today, so the report is stable between sync runs.

Only the ranked rows of each day are summed for projects/languages, so a
project that never made a day's top N does not count towards the window.
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from wakapi_sync.config.settings import OutputSettings
from wakapi_sync.data.io import read_csv_frame
from wakapi_sync.data.schemas import DAILY_TOP_LANGUAGES, DAILY_TOP_PROJECTS, DAILY_TOTAL


def restrict_to_window(df: pd.DataFrame, days: int, end: pd.Timestamp) -> pd.DataFrame:
    """
    Keep rows whose date falls in the `days` calendar days ending at `end`.

    Args:
        df: Frame with a string "date" column (YYYY-MM-DD).
        days: Window length in days (>= 1).
        end: Last day of the window (inclusive).

    Returns:
        Filtered copy with "date" parsed to datetime64.
    """
    out = df.copy()
    out["date"] = pd.to_datetime(out["date"], format="%Y-%m-%d")
    start = end - pd.Timedelta(days=days - 1)
    return out[(out["date"] >= start) & (out["date"] <= end)]


def summarize_totals(totals: pd.DataFrame, days: int) -> dict:
    """
    Aggregate daily-total.csv rows over the last `days` days.

    Args:
        totals: Frame as returned by read_csv_frame(daily-total.csv).
        days: Window length in days.

    Returns:
        Dict with keys: start, end, days_recorded, total_hours,
        average_hours, busiest_date, busiest_hours. Empty input gives
        days_recorded == 0 and None for the dates.
    """
    if totals.empty:
        return {
            "start": None,
            "end": None,
            "days_recorded": 0,
            "total_hours": 0.0,
            "average_hours": 0.0,
            "busiest_date": None,
            "busiest_hours": 0.0,
        }

    end = pd.to_datetime(totals["date"], format="%Y-%m-%d").max()
    window = restrict_to_window(totals, days, end)
    seconds = pd.to_numeric(window["total_seconds"], errors="coerce").fillna(0.0)
    hours = seconds / 3600.0

    busiest_idx = hours.idxmax()
    return {
        "start": (end - pd.Timedelta(days=days - 1)).strftime("%Y-%m-%d"),
        "end": end.strftime("%Y-%m-%d"),
        "days_recorded": int(len(window)),
        "total_hours": round(float(hours.sum()), 2),
        "average_hours": round(float(hours.mean()), 2),
        "busiest_date": window.loc[busiest_idx, "date"].strftime("%Y-%m-%d"),
        "busiest_hours": round(float(hours.loc[busiest_idx]), 2),
    }


def top_names(ranked: pd.DataFrame, name_column: str, days: int, end: pd.Timestamp, limit: int = 5) -> pd.DataFrame:
    """
    Sum seconds per name over the window and return the biggest.

    Args:
        ranked: Frame from daily-top-projects.csv or daily-top-languages.csv.
        name_column: "project" or "language".
        days: Window length in days.
        end: Last day of the window.
        limit: Number of names to return.

    Returns:
        Frame with columns [name_column, "hours", "days"], sorted by hours
        descending (ties by name).
    """
    if ranked.empty:
        return pd.DataFrame(columns=[name_column, "hours", "days"])

    window = restrict_to_window(ranked, days, end)
    window = window.assign(seconds=pd.to_numeric(window["seconds"], errors="coerce").fillna(0.0))
    grouped = (
        window.groupby(name_column)
        .agg(seconds=("seconds", "sum"), days=("date", "nunique"))
        .reset_index()
    )
    grouped["hours"] = (grouped["seconds"] / 3600.0).round(2)
    grouped = grouped.sort_values(["hours", name_column], ascending=[False, True])
    return grouped[[name_column, "hours", "days"]].head(limit).reset_index(drop=True)


def _print_ranking(title: str, table: pd.DataFrame, name_column: str) -> None:
    print(title)
    print("-" * 60)
    if table.empty:
        print("  (no data)")
    for _, row in table.iterrows():
        print(f"  {row[name_column]:30s} {row['hours']:8.2f}h  ({int(row['days'])} day(s))")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Summarize the Wakapi daily CSVs over the last N days",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--days", type=int, default=7, help="Window length in days (default: 7)")
    parser.add_argument(
        "--out-dir",
        type=str,
        default=None,
        help="Directory holding the CSV files (default: WAKAPI_OUT_DIR or data/wakapi)",
    )
    parser.add_argument("--limit", type=int, default=5, help="Names per ranking (default: 5)")
    args = parser.parse_args(argv)

    if args.days < 1:
        print(f"ERROR: --days must be >= 1, got {args.days}.")
        sys.exit(2)

    out_dir = Path(args.out_dir) if args.out_dir else OutputSettings.from_env().out_dir

    try:
        totals = read_csv_frame(DAILY_TOTAL.path_in(out_dir))
    except FileNotFoundError as e:
        print(f"  ✗ {e}")
        sys.exit(2)

    summary = summarize_totals(totals, args.days)

    print("=" * 60)
    print(f"Wakapi summary: last {args.days} day(s)")
    print("=" * 60)
    if summary["days_recorded"] == 0:
        print("No rows in daily-total.csv yet.")
        print("=" * 60)
        sys.exit(0)

    print(f"Window: {summary['start']} to {summary['end']}")
    print(f"Days recorded: {summary['days_recorded']}")
    print(f"Total hours: {summary['total_hours']:.2f}")
    print(f"Average per recorded day: {summary['average_hours']:.2f}h")
    print(f"Busiest day: {summary['busiest_date']} ({summary['busiest_hours']:.2f}h)")
    print()

    end = pd.Timestamp(summary["end"])
    for schema, name_column, title in (
        (DAILY_TOP_PROJECTS, "project", "Top projects"),
        (DAILY_TOP_LANGUAGES, "language", "Top languages"),
    ):
        path = schema.path_in(out_dir)
        if not path.exists():
            print(f"{title}: {path} not found")
            print()
            continue
        table = top_names(read_csv_frame(path), name_column, args.days, end, args.limit)
        _print_ranking(title, table, name_column)

    print("=" * 60)


if __name__ == "__main__":
    main()
