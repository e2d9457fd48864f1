"""
RFC 4180 CSV codec for the daily summary files.

**Conceptual**: Every CSV this project writes goes through rows_to_csv and
every CSV it reads goes through parse_csv. All values are strings; numeric and
date meaning is the caller's business. The dialect is fixed:
  - Fields separated by commas.
  - Fields containing a comma, double quote, CR or LF are wrapped in double
    quotes, with internal double quotes doubled.
  - Every record (header included) ends with "\\n".

**Why not pandas.read_csv / to_csv here?**
  pandas infers dtypes ("0.50" → 0.5, "007" → 7, "" → NaN), which would
  rewrite untouched rows on every upsert. The upsert engine needs a
  string-in, string-out codec so rows it does not address stay byte-identical.
  pandas is still used for reports over these files (see io.read_csv_frame).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

Row = Dict[str, str]

_NEEDS_QUOTING = (",", '"', "\r", "\n")


class MalformedCsvError(ValueError):
    """
    Raised when CSV text cannot be parsed without guessing.

    Covers unterminated quoted fields, characters between a closing quote and
    the next separator, and records with more fields than the header. The
    message carries the 1-based line number where the offending record starts.
    """
    pass


@dataclass
class CsvDocument:
    """
    Header plus rows, as read from or written to one CSV file.

    Attributes:
        header: Column names in serialization order.
        rows: One dict per record, keyed by header column, values as strings.
    """
    header: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)


def escape_csv_value(value: Any) -> str:
    """
    Render one value as a CSV field.

    Args:
        value: Field value. None renders as "", non-strings go through str().

    Returns:
        The value unchanged when it needs no quoting, otherwise the value in
        double quotes with internal quotes doubled.

    Example:
        >>> escape_csv_value('a,b')
        '"a,b"'
        >>> escape_csv_value('6" pipe')
        '"6"" pipe"'
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    if not any(ch in text for ch in _NEEDS_QUOTING):
        return text
    return '"' + text.replace('"', '""') + '"'


def rows_to_csv(
    header: Sequence[str],
    rows: Sequence[Union[Mapping[str, Any], Sequence[Any]]],
) -> str:
    """
    Serialize a header and rows to CSV text.

    Rows may be mappings (looked up by header column, missing columns render
    as "") or positional sequences (values already in header order).

    Args:
        header: Column names; written as-is on the first line.
        rows: Rows to write, in order.

    Returns:
        The header line followed by one line per row, each ending in "\\n".
        An empty row set yields just the header line.

    Example:
        >>> rows_to_csv(['a', 'b'], [['1', '2'], ['3', '4']])
        'a,b\\n1,2\\n3,4\\n'
    """
    lines = [",".join(header)]
    for row in rows:
        if isinstance(row, Mapping):
            values = [row.get(col) for col in header]
        else:
            values = list(row)
        lines.append(",".join(escape_csv_value(v) for v in values))
    return "\n".join(lines) + "\n"


def _split_records(text: str) -> List[tuple]:
    """
    Split CSV text into records of raw field values.

    Returns a list of (line_number, fields) tuples. Blank lines are dropped.
    Line endings may be "\\n" or "\\r\\n"; inside quotes they are data.
    """
    records = []
    fields: List[str] = []
    buf: List[str] = []
    line = 1
    record_line = 1
    i = 0
    n = len(text)
    # at_field_start: nothing consumed yet for the current field
    at_field_start = True

    def end_record():
        fields.append("".join(buf))
        buf.clear()
        # A lone empty field is a blank line, not a record
        if not (len(fields) == 1 and fields[0] == ""):
            records.append((record_line, list(fields)))
        fields.clear()

    while i < n:
        ch = text[i]

        if at_field_start and ch == '"':
            # Quoted field: read up to the closing quote
            start_line = line
            i += 1
            while True:
                if i >= n:
                    raise MalformedCsvError(
                        f"Unterminated quoted field starting on line {start_line}."
                    )
                ch = text[i]
                if ch == '"':
                    if i + 1 < n and text[i + 1] == '"':
                        buf.append('"')
                        i += 2
                        continue
                    i += 1
                    break
                if ch == "\n":
                    line += 1
                buf.append(ch)
                i += 1
            # After the closing quote only a separator or end of record may follow
            crlf = text.startswith("\r\n", i)
            if i < n and text[i] not in (",", "\n") and not crlf:
                raise MalformedCsvError(
                    f"Unexpected character {text[i]!r} after closing quote on line {line}."
                )
            at_field_start = False
            continue

        if ch == ",":
            fields.append("".join(buf))
            buf.clear()
            at_field_start = True
            i += 1
        elif ch == "\r" and i + 1 < n and text[i + 1] == "\n":
            i += 1  # handled as "\n" on the next pass
        elif ch == "\n":
            end_record()
            line += 1
            record_line = line
            at_field_start = True
            i += 1
        else:
            buf.append(ch)
            at_field_start = False
            i += 1

    # Final record without a trailing newline
    if buf or fields:
        end_record()

    return records


def parse_csv(text: str) -> CsvDocument:
    """
    Parse CSV text into a header and string-valued rows.

    **Functionally**:
      - The first non-blank record is the header.
      - Quoted fields may contain commas, doubled quotes and newlines.
      - A record shorter than the header is padded with "" for the missing
        trailing columns.
      - Blank lines (including the trailing newline) are ignored. A
        one-column file therefore cannot hold a row whose only value is "":
        rows_to_csv writes it as an empty line and parse_csv drops it.

    Args:
        text: Whole file contents.

    Returns:
        CsvDocument. Empty text gives an empty header and no rows.

    Raises:
        MalformedCsvError: On unterminated quotes, stray characters after a
                           closing quote, or a record wider than the header.

    Example:
        >>> doc = parse_csv('name,val\\n"hello, world",42\\n')
        >>> doc.rows[0]['name']
        'hello, world'
    """
    records = _split_records(text)
    if not records:
        return CsvDocument()

    _, header = records[0]
    rows: List[Row] = []
    for line_number, values in records[1:]:
        if len(values) > len(header):
            raise MalformedCsvError(
                f"Line {line_number} has {len(values)} fields but the header "
                f"has {len(header)} columns."
            )
        padded = values + [""] * (len(header) - len(values))
        rows.append(dict(zip(header, padded)))

    return CsvDocument(header=list(header), rows=rows)
