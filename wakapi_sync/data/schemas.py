"""
Canonical layouts of the three daily summary CSVs.

**Conceptual**: This module defines the "data contracts" for the files the
sync writes. Each CsvSchema names the file, its header (column order on disk)
and the key columns that identify a row for upserts:

  | File                    | Key          |
  |-------------------------|--------------|
  | daily-total.csv         | date         |
  | daily-top-projects.csv  | date, rank   |
  | daily-top-languages.csv | date, rank   |

The upsert engine itself does not know about these files; it accepts any
header and key columns. Keeping the layouts here means the pipeline, the
report action and the tests agree on one definition.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class CsvSchema:
    """
    Layout of one CSV file.

    Attributes:
        filename: File name inside the output directory.
        header: Column names, in on-disk order.
        key_columns: Columns whose values identify a row (non-empty subset of header).
    """
    filename: str
    header: Tuple[str, ...]
    key_columns: Tuple[str, ...]

    def __post_init__(self):
        """Validate that the key is a non-empty subset of the header."""
        if not self.key_columns:
            raise ValueError(f"{self.filename}: key_columns must not be empty")
        missing = [c for c in self.key_columns if c not in self.header]
        if missing:
            raise ValueError(
                f"{self.filename}: key columns {missing} are not in the header {list(self.header)}"
            )

    def path_in(self, out_dir: Path | str) -> Path:
        """Full path of this file inside out_dir."""
        return Path(out_dir) / self.filename


DAILY_TOTAL = CsvSchema(
    filename="daily-total.csv",
    header=("date", "total_seconds", "total_hours", "projects_count", "languages_count"),
    key_columns=("date",),
)

DAILY_TOP_PROJECTS = CsvSchema(
    filename="daily-top-projects.csv",
    header=("date", "rank", "project", "seconds", "hours", "percent"),
    key_columns=("date", "rank"),
)

DAILY_TOP_LANGUAGES = CsvSchema(
    filename="daily-top-languages.csv",
    header=("date", "rank", "language", "seconds", "hours", "percent"),
    key_columns=("date", "rank"),
)

ALL_SCHEMAS = (DAILY_TOTAL, DAILY_TOP_PROJECTS, DAILY_TOP_LANGUAGES)
