"""CSV implementation of the RowCodec port.

File Format:
    - Comma separated, ``"`` as quote character, minimal quoting
    - ``\\n`` line terminator
    - First row: header (column names)
    - Following rows: data, one field per header column

Fields containing the delimiter, the quote character or a line break
are quoted, and embedded quotes are doubled. This adapter is the only
place where that rule is applied.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

from segment_db.domain.errors import IOFailure, MalformedSegment

CSV_FORMAT: dict[str, object] = {
    "delimiter": ",",
    "quotechar": '"',
    "quoting": csv.QUOTE_MINIMAL,
    "lineterminator": "\n",
}


class CSVRowCodec:
    """Reads and writes segment files as CSV."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read_all(self, path: Path) -> tuple[list[str], list[list[str]]]:
        """Read a whole segment into its header and data rows.

        Blank lines are ignored.

        Raises:
            MalformedSegment: If the file is unreadable, empty, or a row
                has a different number of fields than the header.
        """
        try:
            with open(path, "r", newline="", encoding=self._encoding) as f:
                records = [row for row in csv.reader(f, strict=True, **CSV_FORMAT) if row]
        except csv.Error as e:
            raise MalformedSegment(path, f"invalid CSV: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedSegment(path, f"unreadable: {e}") from e

        if not records:
            raise MalformedSegment(path, "missing header row")

        header, rows = records[0], records[1:]
        for line, row in enumerate(rows, start=2):
            if len(row) != len(header):
                raise MalformedSegment(
                    path,
                    f"row {line} has {len(row)} fields, header has {len(header)}",
                )
        return header, rows

    def write_all(
        self, path: Path, header: Sequence[str], rows: Sequence[Sequence[str]]
    ) -> None:
        """Truncate the file and write the header followed by ``rows``."""
        try:
            with open(path, "w", newline="", encoding=self._encoding) as f:
                writer = csv.writer(f, **CSV_FORMAT)
                writer.writerow(header)
                writer.writerows(rows)
        except OSError as e:
            raise IOFailure(path, str(e)) from e

    def append_row(self, path: Path, row: Sequence[str]) -> None:
        """Append a single row to the end of the file."""
        try:
            with open(path, "a", newline="", encoding=self._encoding) as f:
                csv.writer(f, **CSV_FORMAT).writerow(row)
        except OSError as e:
            raise IOFailure(path, str(e)) from e
