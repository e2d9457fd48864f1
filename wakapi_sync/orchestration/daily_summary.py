"""
Daily summary pipeline: Wakapi → three upserted CSV files.

**Workflow** (one sequential pass per run):
  1. Date stamp from the clock's local date.
  2. Fetch statusbar/today and extract it.
  3. If projects or languages came back empty, fetch the summaries for the
     same date and fill the gaps (merge_with_fallback). A failing fallback is
     logged and the statusbar data is used as-is.
  4. Sort projects and languages by descending seconds, keep the top N.
  5. Upsert daily-total.csv (key: date), daily-top-projects.csv and
     daily-top-languages.csv (key: date, rank).

Re-running on the same day replaces that day's rows instead of duplicating
them. A failing upsert does not stop the other two; errors are collected in
DailySummaryResult for the caller to report.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

import requests

from wakapi_sync.config.settings import OutputSettings
from wakapi_sync.data.csv_codec import Row
from wakapi_sync.data.schemas import (
    DAILY_TOP_LANGUAGES,
    DAILY_TOP_PROJECTS,
    DAILY_TOTAL,
    CsvSchema,
)
from wakapi_sync.data.upsert import upsert_csv_by_keys
from wakapi_sync.utils.math import format_number, pick_top, to_hours
from wakapi_sync.utils.time import Clock, RealClock, local_date_stamp
from wakapi_sync.venues.extraction import (
    DailyUsage,
    UsageEntry,
    extract_from_statusbar,
    extract_from_summaries,
    merge_with_fallback,
)
from wakapi_sync.venues.wakapi_client import WakapiClientError

logger = logging.getLogger(__name__)


class SummarySource(Protocol):
    """What the pipeline needs from a client (WakapiClient satisfies this)."""

    def get_statusbar_today(self) -> dict:
        ...

    def get_summaries(self, start_date: str, end_date: str) -> dict:
        ...


@dataclass
class DailySummaryResult:
    """
    Outcome of one pipeline run.

    Attributes:
        date: The YYYY-MM-DD stamp rows were written under.
        usage: Usage after fallback merge and top-N selection.
        rows_written: Rows upserted per file name.
        errors: Error message per file name that failed to upsert.
    """
    date: str
    usage: DailyUsage
    rows_written: Dict[str, int] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def rank_entries(entries: Sequence[UsageEntry], top_n: int) -> List[UsageEntry]:
    """Sort by descending seconds (stable for ties) and keep the first top_n."""
    return pick_top(sorted(entries, key=lambda e: e.seconds, reverse=True), top_n)


def build_total_row(date: str, usage: DailyUsage) -> Row:
    """Row for daily-total.csv; counts are of the already-trimmed lists."""
    return {
        "date": date,
        "total_seconds": format_number(usage.total_seconds),
        "total_hours": format_number(to_hours(usage.total_seconds)),
        "projects_count": str(len(usage.projects)),
        "languages_count": str(len(usage.languages)),
    }


def build_ranked_rows(date: str, entries: Sequence[UsageEntry], name_column: str) -> List[Row]:
    """
    Rows for a top-N file, rank starting at 1.

    Args:
        date: Date stamp for every row.
        entries: Entries already in rank order.
        name_column: "project" or "language".
    """
    return [
        {
            "date": date,
            "rank": str(rank),
            name_column: entry.name,
            "seconds": format_number(entry.seconds),
            "hours": format_number(to_hours(entry.seconds)),
            "percent": format_number(entry.percent),
        }
        for rank, entry in enumerate(entries, start=1)
    ]


def fetch_daily_usage(client: SummarySource, date: str) -> DailyUsage:
    """
    Fetch today's usage, falling back to summaries for empty breakdowns.

    Raises:
        WakapiClientError, requests.Timeout: If the statusbar fetch fails.
    """
    usage = extract_from_statusbar(client.get_statusbar_today())
    if usage.has_breakdowns:
        return usage

    logger.info(
        "Statusbar has %d projects / %d languages; trying summaries for %s",
        len(usage.projects), len(usage.languages), date,
    )
    try:
        fallback = extract_from_summaries(client.get_summaries(date, date))
    except (WakapiClientError, requests.Timeout) as e:
        logger.warning("Summaries fallback failed, keeping statusbar data: %s", e)
        return usage

    return merge_with_fallback(usage, fallback)


def _upsert(result: DailySummaryResult, out_dir: Path, schema: CsvSchema, rows: List[Row]) -> None:
    path = schema.path_in(out_dir)
    try:
        upsert_csv_by_keys(path, schema.header, schema.key_columns, rows)
    except (OSError, ValueError) as e:
        logger.error("Failed to upsert %s: %s", path, e)
        result.errors[schema.filename] = str(e)
        return
    result.rows_written[schema.filename] = len(rows)


def run_daily_summary(
    client: SummarySource,
    output: OutputSettings,
    clock: Optional[Clock] = None,
) -> DailySummaryResult:
    """
    Run the whole pipeline once.

    Args:
        client: Source of statusbar/summaries responses (WakapiClient in production).
        output: Output directory and top-N limits.
        clock: Time source for the date stamp (RealClock if None).

    Returns:
        DailySummaryResult with per-file row counts and errors.

    Raises:
        WakapiClientError, requests.Timeout: If the statusbar fetch fails;
        nothing is written in that case.

    Example:
        >>> with WakapiClient(settings.wakapi) as client:
        ...     result = run_daily_summary(client, settings.output)
        >>> result.rows_written
        {'daily-total.csv': 1, 'daily-top-projects.csv': 4, 'daily-top-languages.csv': 5}
    """
    clock = clock or RealClock()
    date = local_date_stamp(clock.now())

    fetched = fetch_daily_usage(client, date)
    usage = DailyUsage(
        total_seconds=fetched.total_seconds,
        projects=rank_entries(fetched.projects, output.top_n_projects),
        languages=rank_entries(fetched.languages, output.top_n_languages),
    )

    result = DailySummaryResult(date=date, usage=usage)
    _upsert(result, output.out_dir, DAILY_TOTAL, [build_total_row(date, usage)])
    _upsert(result, output.out_dir, DAILY_TOP_PROJECTS,
            build_ranked_rows(date, usage.projects, "project"))
    _upsert(result, output.out_dir, DAILY_TOP_LANGUAGES,
            build_ranked_rows(date, usage.languages, "language"))

    logger.info(
        "%s: %s total seconds, %d projects, %d languages, %d file error(s)",
        date, format_number(usage.total_seconds),
        len(usage.projects), len(usage.languages), len(result.errors),
    )
    return result
