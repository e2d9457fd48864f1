"""
Adapters from Wakapi response shapes to a normalized DailyUsage record.

**Conceptual**: Wakapi answers "how did today go?" in two structurally
different ways:

  statusbar/today  →  {"data": {"grand_total": {...}, "projects": [...], "languages": [...]}}
  summaries        →  {"data": [{"grand_total": {...}, "projects": [...], "languages": [...]}]}

Both carry the same trio (grand total, per-project and per-language
breakdowns). Each shape gets its own named function; both return DailyUsage
so the pipeline never looks at raw JSON.

**Missing data is normal**: a day with no heartbeats has no breakdowns, and
some Wakapi versions omit them from statusbar/today entirely. Absent fields
become 0 seconds or empty lists; nothing here raises on missing keys.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class UsageEntry:
    """
    Time spent on one project or language.

    Attributes:
        name: Project or language name, as reported.
        seconds: Total seconds (the API's total_seconds).
        percent: Share of the day as reported (None if absent).
    """
    name: str
    seconds: float
    percent: Optional[float] = None


@dataclass(frozen=True)
class DailyUsage:
    """
    Normalized daily summary.

    Attributes:
        total_seconds: Grand total for the day (0 if absent).
        projects: Per-project entries, in API order.
        languages: Per-language entries, in API order.
    """
    total_seconds: float = 0
    projects: List[UsageEntry] = field(default_factory=list)
    languages: List[UsageEntry] = field(default_factory=list)

    @property
    def has_breakdowns(self) -> bool:
        """True when both projects and languages are present."""
        return bool(self.projects) and bool(self.languages)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _entries(items: Any) -> List[UsageEntry]:
    if not isinstance(items, list):
        return []
    entries = []
    for item in items:
        item = _as_mapping(item)
        entries.append(
            UsageEntry(
                name=item.get("name") or "",
                seconds=item.get("total_seconds") or 0,
                percent=item.get("percent"),
            )
        )
    return entries


def _from_day(day: Mapping[str, Any]) -> DailyUsage:
    grand_total = _as_mapping(day.get("grand_total"))
    return DailyUsage(
        total_seconds=grand_total.get("total_seconds") or 0,
        projects=_entries(day.get("projects")),
        languages=_entries(day.get("languages")),
    )


def extract_from_statusbar(response: Optional[Dict[str, Any]]) -> DailyUsage:
    """
    Normalize a statusbar/today response.

    Args:
        response: Parsed JSON, {"data": {"grand_total": ..., "projects": ..., "languages": ...}}.

    Returns:
        DailyUsage; missing projects/languages give empty lists, a missing
        grand total gives 0.

    Example:
        >>> usage = extract_from_statusbar({"data": {"grand_total": {"total_seconds": 100}}})
        >>> usage.total_seconds, usage.projects
        (100, [])
    """
    data = _as_mapping(_as_mapping(response).get("data"))
    return _from_day(data)


def extract_from_summaries(response: Optional[Dict[str, Any]]) -> DailyUsage:
    """
    Normalize a summaries response, using its first (only) day.

    Args:
        response: Parsed JSON, {"data": [{"grand_total": ..., ...}]}.

    Returns:
        DailyUsage for data[0]; an empty or missing data array gives an
        empty DailyUsage.
    """
    days = _as_mapping(response).get("data")
    if not isinstance(days, list) or not days:
        return DailyUsage()
    return _from_day(_as_mapping(days[0]))


def merge_with_fallback(primary: DailyUsage, fallback: DailyUsage) -> DailyUsage:
    """
    Fill empty breakdowns of primary from fallback.

    The total always comes from primary (the statusbar). Projects and
    languages come from primary when non-empty, else from fallback.

    Example:
        >>> sb = DailyUsage(total_seconds=3600)
        >>> sm = DailyUsage(7200, [UsageEntry("webapp", 2400, 66.7)], [UsageEntry("Go", 7200, 100)])
        >>> merged = merge_with_fallback(sb, sm)
        >>> merged.total_seconds, len(merged.projects)
        (3600, 1)
    """
    return replace(
        primary,
        projects=list(primary.projects) or list(fallback.projects),
        languages=list(primary.languages) or list(fallback.languages),
    )
