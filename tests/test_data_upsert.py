"""
Tests for the keyed upsert engine (wakapi_sync/data/upsert.py).

All tests use temporary directories (via tmp_path fixture) so nothing is
written outside the test sandbox.
"""

import pytest

from wakapi_sync.data.csv_codec import MalformedCsvError, parse_csv
from wakapi_sync.data.io import CsvWriteError
from wakapi_sync.data.upsert import (
    KEY_SEPARATOR,
    key_tuple,
    merge_rows,
    normalize_row,
    upsert_csv_by_keys,
)


def read_rows(path):
    return parse_csv(path.read_text(encoding="utf-8")).rows


# ============================================================================
# Pure helpers
# ============================================================================

def test_normalize_row_fills_missing_and_stringifies():
    row = normalize_row({"date": "2026-02-14", "value": 42, "extra": "x"}, ["date", "value", "note"])

    assert row == {"date": "2026-02-14", "value": "42", "note": ""}
    assert list(row) == ["date", "value", "note"]


def test_key_tuple_does_not_collide_on_concatenation():
    """("1", "23") and ("12", "3") must not produce the same key."""
    a = key_tuple({"x": "1", "y": "23"}, ["x", "y"])
    b = key_tuple({"x": "12", "y": "3"}, ["x", "y"])

    assert a != b
    assert a == "1" + KEY_SEPARATOR + "23"


def test_merge_rows_counts_and_does_not_mutate_input():
    existing = [{"date": "A", "value": "1"}]
    merged, replaced, appended = merge_rows(
        existing,
        [{"date": "A", "value": "2"}, {"date": "B", "value": "3"}],
        ["date", "value"],
        ["date"],
    )

    assert merged == [{"date": "A", "value": "2"}, {"date": "B", "value": "3"}]
    assert (replaced, appended) == (1, 1)
    assert existing == [{"date": "A", "value": "1"}]


def test_merge_rows_within_batch_duplicates_last_wins():
    merged, _, _ = merge_rows(
        [],
        [{"date": "A", "value": "1"}, {"date": "A", "value": "2"}],
        ["date", "value"],
        ["date"],
    )

    assert merged == [{"date": "A", "value": "2"}]


# ============================================================================
# upsert_csv_by_keys
# ============================================================================

def test_upsert_creates_new_file(tmp_path):
    path = tmp_path / "test.csv"

    upsert_csv_by_keys(path, ["date", "value"], ["date"], [{"date": "2026-02-14", "value": "42"}])

    assert path.read_text(encoding="utf-8") == "date,value\n2026-02-14,42\n"


def test_upsert_creates_missing_parent_directories(tmp_path):
    path = tmp_path / "nested" / "dir" / "test.csv"

    upsert_csv_by_keys(path, ["date", "value"], ["date"], [{"date": "2026-02-14", "value": "42"}])

    assert path.exists()


def test_upsert_replaces_on_key_match(tmp_path):
    path = tmp_path / "test.csv"
    header = ["date", "value"]

    upsert_csv_by_keys(path, header, ["date"], [{"date": "2026-02-14", "value": "42"}])
    upsert_csv_by_keys(path, header, ["date"], [{"date": "2026-02-14", "value": "99"}])

    rows = read_rows(path)
    assert rows == [{"date": "2026-02-14", "value": "99"}]


def test_upsert_preserves_untouched_rows_and_appends(tmp_path):
    path = tmp_path / "test.csv"
    header = ["date", "value"]
    path.write_text("date,value\nA,1\nB,2\n", encoding="utf-8")

    upsert_csv_by_keys(path, header, ["date"], [{"date": "C", "value": "3"}])

    assert path.read_text(encoding="utf-8") == "date,value\nA,1\nB,2\nC,3\n"


def test_upsert_replacement_keeps_position(tmp_path):
    path = tmp_path / "test.csv"
    path.write_text("date,value\nA,1\nB,2\nC,3\n", encoding="utf-8")

    upsert_csv_by_keys(path, ["date", "value"], ["date"], [{"date": "B", "value": "20"}])

    assert [r["date"] for r in read_rows(path)] == ["A", "B", "C"]
    assert read_rows(path)[1]["value"] == "20"


def test_upsert_is_idempotent(tmp_path):
    path = tmp_path / "test.csv"
    header = ["date", "rank", "project"]
    batch = [
        {"date": "2026-02-14", "rank": "1", "project": "bus-sim, v2"},
        {"date": "2026-02-14", "rank": "2", "project": 'say "hi"'},
    ]
    path.write_text("date,rank,project\n2026-02-13,1,old\n", encoding="utf-8")

    upsert_csv_by_keys(path, header, ["date", "rank"], batch)
    first = path.read_bytes()
    upsert_csv_by_keys(path, header, ["date", "rank"], batch)
    second = path.read_bytes()

    assert first == second


def test_upsert_composite_key_does_not_disturb_sibling(tmp_path):
    path = tmp_path / "ranked.csv"
    header = ["date", "rank", "project"]

    upsert_csv_by_keys(path, header, ["date", "rank"], [
        {"date": "2026-02-14", "rank": "1", "project": "bus-sim"},
        {"date": "2026-02-14", "rank": "2", "project": "metro"},
    ])
    upsert_csv_by_keys(path, header, ["date", "rank"], [
        {"date": "2026-02-14", "rank": "1", "project": "mod-pod"},
    ])

    rows = read_rows(path)
    assert rows == [
        {"date": "2026-02-14", "rank": "1", "project": "mod-pod"},
        {"date": "2026-02-14", "rank": "2", "project": "metro"},
    ]


def test_upsert_full_replacement_blanks_omitted_columns(tmp_path):
    """A new row replaces the old one entirely; it does not merge fields."""
    path = tmp_path / "test.csv"
    path.write_text("date,value,note\nA,1,keep?\n", encoding="utf-8")

    upsert_csv_by_keys(path, ["date", "value", "note"], ["date"], [{"date": "A", "value": "2"}])

    assert read_rows(path) == [{"date": "A", "value": "2", "note": ""}]


def test_upsert_empty_batch_rewrites_existing_rows(tmp_path):
    path = tmp_path / "test.csv"
    path.write_text("date,value\nA,1\n", encoding="utf-8")

    upsert_csv_by_keys(path, ["date", "value"], ["date"], [])

    assert path.read_text(encoding="utf-8") == "date,value\nA,1\n"


def test_upsert_empty_batch_on_missing_file_writes_header(tmp_path):
    path = tmp_path / "test.csv"

    upsert_csv_by_keys(path, ["date", "value"], ["date"], [])

    assert path.read_text(encoding="utf-8") == "date,value\n"


def test_upsert_reprojects_rows_onto_new_header(tmp_path):
    """Existing rows are rewritten with the supplied header (new column → empty)."""
    path = tmp_path / "test.csv"
    path.write_text("date,value\nA,1\n", encoding="utf-8")

    upsert_csv_by_keys(path, ["date", "value", "note"], ["date"], [{"date": "B", "value": "2", "note": "n"}])

    assert path.read_text(encoding="utf-8") == "date,value,note\nA,1,\nB,2,n\n"


def test_upsert_empty_key_columns_rejected_before_io(tmp_path):
    path = tmp_path / "never-created" / "test.csv"

    with pytest.raises(ValueError, match="at least one column"):
        upsert_csv_by_keys(path, ["date", "value"], [], [{"date": "A", "value": "1"}])

    assert not path.parent.exists()


def test_upsert_key_column_not_in_header_rejected(tmp_path):
    path = tmp_path / "test.csv"

    with pytest.raises(ValueError, match="not in the header"):
        upsert_csv_by_keys(path, ["date", "value"], ["rank"], [])

    assert not path.exists()


def test_upsert_malformed_existing_file_raises_and_leaves_file(tmp_path):
    path = tmp_path / "test.csv"
    original = 'date,value\n"A,1\n'
    path.write_text(original, encoding="utf-8")

    with pytest.raises(MalformedCsvError):
        upsert_csv_by_keys(path, ["date", "value"], ["date"], [{"date": "B", "value": "2"}])

    assert path.read_text(encoding="utf-8") == original


def test_upsert_unwritable_parent_raises_csv_write_error(tmp_path):
    """A regular file where the parent directory should be cannot be created."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    path = blocker / "test.csv"

    with pytest.raises(CsvWriteError) as exc_info:
        upsert_csv_by_keys(path, ["date", "value"], ["date"], [{"date": "A", "value": "1"}])

    assert isinstance(exc_info.value, OSError)
