#!/usr/bin/env python3
"""
Fetch today's Wakapi summary and upsert it into three CSV files.

**Purpose**: Daily cron/CI entry point. It reads the Wakapi connection from
the environment (.env), fetches today's statusbar summary (falling back to
the summaries endpoint when the statusbar has no breakdowns), and writes:

  {out_dir}/daily-total.csv          one row per date
  {out_dir}/daily-top-projects.csv   top-N projects per date, ranked
  {out_dir}/daily-top-languages.csv  top-N languages per date, ranked

Running it several times a day is safe: each run replaces that day's rows.

**Usage**:
    python actions/sync_wakapi_daily_summary.py
    python actions/sync_wakapi_daily_summary.py --out-dir data/wakapi --top-n-projects 5
    python actions/sync_wakapi_daily_summary.py --verbose

**Requirements**:
  - WAKAPI_URL and WAKAPI_API_KEY set in .env or the environment
  - Optional: WAKAPI_OUT_DIR, WAKAPI_TOP_N_PROJECTS, WAKAPI_TOP_N_LANGUAGES
    (command-line options override them)

**Exit codes**:
  - 0: All three files written
  - 1: Partial failure (at least one file failed to write)
  - 2: Configuration error or the Wakapi fetch failed (nothing written)

**Example output**:
    $ python actions/sync_wakapi_daily_summary.py
    ============================================================
    Wakapi Daily Summary
    ============================================================
    Date: 2026-02-14
    Total: 14520s (4.03h)
    Projects: 4  Languages: 5
    ✓ daily-total.csv: 1 row(s)
    ✓ daily-top-projects.csv: 4 row(s)
    ✓ daily-top-languages.csv: 5 row(s)
    ============================================================
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import requests

# Add project root to Python path so we can import wakapi_sync modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wakapi_sync.config.settings import get_settings
from wakapi_sync.data.schemas import ALL_SCHEMAS
from wakapi_sync.orchestration.daily_summary import run_daily_summary
from wakapi_sync.utils.math import format_number, to_hours
from wakapi_sync.venues.wakapi_client import (
    WakapiAuthenticationError,
    WakapiClient,
    WakapiClientError,
)


def parse_args(argv=None):
    """
    Parse command line arguments.

    Options left unset fall back to the environment-based settings.

    Returns:
        Namespace with attributes: out_dir, top_n_projects, top_n_languages, verbose.
    """
    parser = argparse.ArgumentParser(
        description="Fetch today's Wakapi summary and upsert it into CSV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--out-dir",
        type=str,
        default=None,
        help="Output directory for the CSV files (default: WAKAPI_OUT_DIR or data/wakapi)",
    )

    parser.add_argument(
        "--top-n-projects",
        type=int,
        default=None,
        help="Number of ranked project rows per day (default: WAKAPI_TOP_N_PROJECTS or 10)",
    )

    parser.add_argument(
        "--top-n-languages",
        type=int,
        default=None,
        help="Number of ranked language rows per day (default: WAKAPI_TOP_N_LANGUAGES or 10)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def main(argv=None):
    """
    Main entry point for the daily summary sync.

    **Workflow**:
      1. Parse command-line arguments
      2. Load Wakapi and output settings from environment (CLI overrides)
      3. Run the pipeline (fetch → extract → rank → upsert)
      4. Print summary and exit with the matching code
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load settings
    try:
        settings = get_settings(require_wakapi=True)
        overrides = {}
        if args.out_dir is not None:
            overrides["out_dir"] = Path(args.out_dir)
        if args.top_n_projects is not None:
            overrides["top_n_projects"] = args.top_n_projects
        if args.top_n_languages is not None:
            overrides["top_n_languages"] = args.top_n_languages
        output = replace(settings.output, **overrides)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(2)

    # Run pipeline
    try:
        with WakapiClient(settings.wakapi) as client:
            result = run_daily_summary(client, output)
    except WakapiAuthenticationError as e:
        print(f"ERROR: {e}")
        print("Please check WAKAPI_API_KEY in your .env file.")
        sys.exit(2)
    except (WakapiClientError, requests.Timeout) as e:
        print(f"ERROR: Failed to fetch summary from Wakapi: {e}")
        sys.exit(2)

    usage = result.usage

    print("=" * 60)
    print("Wakapi Daily Summary")
    print("=" * 60)
    print(f"Date: {result.date}")
    print(f"Total: {format_number(usage.total_seconds)}s ({format_number(to_hours(usage.total_seconds))}h)")
    print(f"Projects: {len(usage.projects)}  Languages: {len(usage.languages)}")
    for schema in ALL_SCHEMAS:
        if schema.filename in result.errors:
            print(f"✗ {schema.filename}: {result.errors[schema.filename]}")
        else:
            print(f"✓ {schema.filename}: {result.rows_written.get(schema.filename, 0)} row(s)")
    print(f"Output directory: {output.out_dir.absolute()}")
    print("=" * 60)

    # Exit with appropriate code
    if result.ok:
        sys.exit(0)
    sys.exit(1)  # Partial failure


if __name__ == "__main__":
    main()
