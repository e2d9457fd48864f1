"""
File readers and writers for the daily summary CSVs.

**Conceptual**: This module is the *only* filesystem boundary for CSV data in
the project. The upsert engine, the pipeline and the report actions all read
and write through these functions. This centralization provides:
  - One place that decides encoding (UTF-8) and line endings ("\\n").
  - Missing files treated uniformly as "no document yet".
  - Whole-file writes that never leave a half-written CSV behind.

**Rule**: Never open the CSVs directly in orchestration or action code.
Use read_csv_document / write_csv_document for the string-exact round trip
that upserts need, and read_csv_frame for pandas-based reporting.

**Write strategy**: the new content is written to a temporary file in the
target's directory and then moved over the target with os.replace, which is
atomic on POSIX and Windows when source and destination share a filesystem.
A crash mid-write leaves the previous file intact.
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

import pandas as pd

from wakapi_sync.data.csv_codec import CsvDocument, parse_csv, rows_to_csv

logger = logging.getLogger(__name__)


class CsvWriteError(OSError):
    """
    Raised when a CSV file (or its parent directory) cannot be written.

    Subclasses OSError so callers that already handle filesystem errors keep
    working; the message names the target path.
    """
    pass


def read_csv_document(path: Path | str) -> Optional[CsvDocument]:
    """
    Read and parse a CSV file.

    Args:
        path: File to read.

    Returns:
        The parsed CsvDocument, or None if the file does not exist.

    Raises:
        MalformedCsvError: If the file contents are not valid CSV.
        OSError: If the file exists but cannot be read.

    Example:
        >>> doc = read_csv_document("data/wakapi/daily-total.csv")
        >>> doc.header if doc else None
        ['date', 'total_seconds', 'total_hours', 'projects_count', 'languages_count']
    """
    path = Path(path)
    if not path.exists():
        logger.debug("CSV not found, starting empty: %s", path)
        return None
    return parse_csv(path.read_text(encoding="utf-8"))


def _target_mode(path: Path) -> int:
    """Permission bits the written file should carry."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    # mkstemp creates 0600 files; a new CSV gets what open() would give it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_csv_text(path: Path | str, text: str) -> None:
    """
    Replace the contents of path with text, atomically.

    Creates parent directories as needed. An existing file keeps its
    permission bits; a new one gets 0666 minus the process umask.

    Raises:
        CsvWriteError: If the directory cannot be created or the file cannot
                       be written or moved into place.
    """
    path = Path(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CsvWriteError(
            f"{path}: Failed to create parent directory. Error: {e}"
        ) from e

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        # newline="" keeps "\n" as-is on every platform
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise CsvWriteError(
            f"{path}: Failed to write CSV. Error: {e}"
        ) from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.debug("Wrote %d bytes to %s", len(text), path)


def write_csv_document(path: Path | str, document: CsvDocument) -> None:
    """
    Serialize a CsvDocument and write it to path (see write_csv_text).

    Raises:
        CsvWriteError: If the file cannot be written.
    """
    write_csv_text(path, rows_to_csv(document.header, document.rows))


def read_csv_frame(path: Path | str) -> pd.DataFrame:
    """
    Load a CSV into a DataFrame with every column kept as a string.

    **Conceptual**: Reports over the accumulated CSVs (weekly hours, top
    projects over a window) are easier in pandas. Reading with dtype=str and
    keep_default_na=False mirrors what the codec sees, so "" stays "" and
    "007" stays "007"; callers convert the columns they aggregate.

    Args:
        path: CSV file to load.

    Returns:
        DataFrame with one string column per header column.

    Raises:
        FileNotFoundError: If the file doesn't exist.

    Example:
        >>> df = read_csv_frame("data/wakapi/daily-total.csv")
        >>> df["total_hours"].astype(float).sum()
        42.5
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"CSV not found: {path}. "
            f"Run actions/sync_wakapi_daily_summary.py first."
        )

    return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
