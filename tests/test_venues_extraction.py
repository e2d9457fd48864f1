"""
Tests for the response adapters (wakapi_sync/venues/extraction.py).

Fixtures mirror real Wakapi payloads: statusbar/today returns one object
under "data", summaries returns a list of days under "data".
"""

from wakapi_sync.venues.extraction import (
    DailyUsage,
    UsageEntry,
    extract_from_statusbar,
    extract_from_summaries,
    merge_with_fallback,
)

STATUSBAR = {
    "data": {
        "grand_total": {"total_seconds": 4899},
        "projects": [
            {"name": "mod-pod", "total_seconds": 4899, "percent": 100},
        ],
        "languages": [
            {"name": "Unknown", "total_seconds": 4836, "percent": 98.73},
            {"name": "Markdown", "total_seconds": 62, "percent": 1.27},
        ],
    },
}

SUMMARIES = {
    "data": [{
        "grand_total": {"total_seconds": 7200},
        "projects": [
            {"name": "bus-sim", "total_seconds": 5000, "percent": 69.4},
            {"name": "metro", "total_seconds": 2200, "percent": 30.6},
        ],
        "languages": [
            {"name": "GDScript", "total_seconds": 7200, "percent": 100},
        ],
    }],
}


def test_extract_from_statusbar():
    usage = extract_from_statusbar(STATUSBAR)

    assert usage.total_seconds == 4899
    assert usage.projects == [UsageEntry("mod-pod", 4899, 100)]
    assert [lang.name for lang in usage.languages] == ["Unknown", "Markdown"]
    assert usage.languages[0].seconds == 4836
    assert usage.languages[0].percent == 98.73


def test_extract_from_statusbar_missing_breakdowns():
    usage = extract_from_statusbar({"data": {"grand_total": {"total_seconds": 100}}})

    assert usage.total_seconds == 100
    assert usage.projects == []
    assert usage.languages == []
    assert not usage.has_breakdowns


def test_extract_from_statusbar_missing_grand_total_defaults_to_zero():
    assert extract_from_statusbar({"data": {}}).total_seconds == 0
    assert extract_from_statusbar({}) == DailyUsage()
    assert extract_from_statusbar(None) == DailyUsage()


def test_extract_entry_missing_fields():
    usage = extract_from_statusbar({"data": {"projects": [{"name": "x"}]}})

    assert usage.projects == [UsageEntry(name="x", seconds=0, percent=None)]


def test_extract_from_summaries():
    usage = extract_from_summaries(SUMMARIES)

    assert usage.total_seconds == 7200
    assert len(usage.projects) == 2
    assert usage.projects[0].name == "bus-sim"
    assert usage.projects[0].seconds == 5000
    assert len(usage.languages) == 1


def test_extract_from_summaries_empty_data():
    assert extract_from_summaries({"data": []}) == DailyUsage()
    assert extract_from_summaries({}) == DailyUsage()


def test_merge_with_fallback_fills_empty_breakdowns():
    """Statusbar with only a grand total, summaries with the breakdowns."""
    statusbar = extract_from_statusbar({"data": {"grand_total": {"total_seconds": 3600}}})
    summaries = extract_from_summaries(SUMMARIES)

    merged = merge_with_fallback(statusbar, summaries)

    assert merged.total_seconds == 3600
    assert len(merged.projects) == 2
    assert len(merged.languages) == 1


def test_merge_with_fallback_keeps_non_empty_primary():
    primary = extract_from_statusbar(STATUSBAR)
    merged = merge_with_fallback(primary, extract_from_summaries(SUMMARIES))

    assert merged == primary


def test_merge_with_fallback_fills_only_the_missing_side():
    primary = DailyUsage(100, projects=[UsageEntry("only-project", 100, 100)])
    merged = merge_with_fallback(primary, extract_from_summaries(SUMMARIES))

    assert [p.name for p in merged.projects] == ["only-project"]
    assert [lang.name for lang in merged.languages] == ["GDScript"]
