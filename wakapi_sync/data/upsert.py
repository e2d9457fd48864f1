"""
Keyed upsert of rows into a CSV file.

**Conceptual**: upsert_csv_by_keys is a read-modify-write cycle over one file:
  1. Read the existing document (a missing file is an empty document).
  2. Index existing rows by their key-tuple.
  3. Replace rows whose key matches an incoming row; append the rest.
  4. Rewrite the whole file with the supplied header.

**Guarantees**:
  - Idempotent: the same batch applied twice leaves byte-identical output.
  - Untouched rows keep their values and relative order.
  - No two rows share a key-tuple afterwards (within-batch duplicates: the
    last one wins).

**Limitation**: there is no lock. Two processes upserting into the same file
at once can lose one side's rows. The daily cron job runs one process at a
time, so this is accepted.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from wakapi_sync.data.csv_codec import CsvDocument, Row
from wakapi_sync.data.io import read_csv_document, write_csv_document

logger = logging.getLogger(__name__)

# ASCII unit separator; never appears in dates, ranks or names we key on
KEY_SEPARATOR = "\x1f"


def _validate_columns(header: Sequence[str], key_columns: Sequence[str]) -> None:
    if not key_columns:
        raise ValueError("key_columns must contain at least one column")
    if len(set(header)) != len(header):
        raise ValueError(f"header has duplicate column names: {list(header)}")
    missing = [c for c in key_columns if c not in header]
    if missing:
        raise ValueError(
            f"key columns {missing} are not in the header {list(header)}"
        )


def normalize_row(row: Mapping[str, Any], header: Sequence[str]) -> Row:
    """
    Project a row onto header: one string per column, in header order.

    Missing columns and None become "", other values go through str().
    Keys not in the header are dropped.
    """
    normalized: Row = {}
    for col in header:
        value = row.get(col)
        if value is None:
            normalized[col] = ""
        else:
            normalized[col] = value if isinstance(value, str) else str(value)
    return normalized


def key_tuple(row: Mapping[str, str], key_columns: Sequence[str]) -> str:
    """Join a row's key column values into a single lookup string."""
    return KEY_SEPARATOR.join(row.get(col, "") for col in key_columns)


def merge_rows(
    existing: List[Row],
    new_rows: Sequence[Mapping[str, Any]],
    header: Sequence[str],
    key_columns: Sequence[str],
) -> Tuple[List[Row], int, int]:
    """
    Merge new_rows into existing by key, without touching the filesystem.

    Args:
        existing: Current rows, in file order.
        new_rows: Incoming rows; each fully replaces a matching existing row.
        header: Columns every output row carries.
        key_columns: Columns forming the row identity.

    Returns:
        (merged_rows, replaced_count, appended_count). merged_rows is a new
        list; existing is not modified.

    Raises:
        ValueError: If key_columns is empty or not a subset of header.
    """
    _validate_columns(header, key_columns)

    merged = [normalize_row(r, header) for r in existing]
    index: Dict[str, int] = {}
    for i, row in enumerate(merged):
        index[key_tuple(row, key_columns)] = i

    replaced = 0
    appended = 0
    for raw in new_rows:
        row = normalize_row(raw, header)
        key = key_tuple(row, key_columns)
        if key in index:
            merged[index[key]] = row
            replaced += 1
        else:
            index[key] = len(merged)
            merged.append(row)
            appended += 1

    return merged, replaced, appended


def upsert_csv_by_keys(
    path: Path | str,
    header: Sequence[str],
    key_columns: Sequence[str],
    new_rows: Sequence[Mapping[str, Any]],
) -> None:
    """
    Insert or replace rows in a CSV file, keyed by one or more columns.

    Args:
        path: CSV file to update (created, with parents, if missing).
        header: Columns of the file, in on-disk order. Existing rows are
               re-projected onto this header.
        key_columns: Non-empty subset of header identifying a row.
        new_rows: Rows to upsert. Values are stored as strings.

    Raises:
        ValueError: If key_columns is empty or names a column not in header
                   (raised before any file is read or written).
        MalformedCsvError: If the existing file cannot be parsed.
        CsvWriteError: If the file cannot be written.

    Example:
        >>> upsert_csv_by_keys(
        ...     "daily-total.csv",
        ...     ["date", "value"],
        ...     ["date"],
        ...     [{"date": "2026-02-14", "value": "99"}],
        ... )
    """
    _validate_columns(header, key_columns)
    path = Path(path)

    document = read_csv_document(path)
    existing: List[Row] = []
    if document is not None and document.header:
        if list(document.header) != list(header):
            logger.warning(
                "%s: header on disk %s differs from %s; rewriting with the new header",
                path, document.header, list(header),
            )
        existing = document.rows

    merged, replaced, appended = merge_rows(existing, new_rows, header, key_columns)
    write_csv_document(path, CsvDocument(header=list(header), rows=merged))

    logger.info(
        "%s: %d replaced, %d appended, %d rows total",
        path, replaced, appended, len(merged),
    )
