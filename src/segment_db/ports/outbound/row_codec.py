"""Row Codec port for the flat-file row representation.

The codec owns the on-disk encoding of rows: field separation, quoting
and escaping. Nothing else in the engine touches raw segment bytes.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol, Sequence


class RowCodec(Protocol):
    """Protocol for reading and writing segment files."""

    @abstractmethod
    def read_all(self, path: Path) -> tuple[list[str], list[list[str]]]:
        """Read a whole segment.

        Args:
            path: The segment file.

        Returns:
            The header row and the data rows.

        Raises:
            MalformedSegment: If the file is unreadable, has no header,
                or a row's field count differs from the header's.
        """
        ...

    @abstractmethod
    def write_all(
        self, path: Path, header: Sequence[str], rows: Sequence[Sequence[str]]
    ) -> None:
        """Replace the file content with the header followed by ``rows``.

        Raises:
            IOFailure: If the file cannot be written.
        """
        ...

    @abstractmethod
    def append_row(self, path: Path, row: Sequence[str]) -> None:
        """Append one row to an existing segment.

        The segment's header is assumed to be present already.

        Raises:
            IOFailure: If the file cannot be written.
        """
        ...
