"""Segment Store port for a table's set of data files.

The segment store is responsible for:
- Enumerating and ordering a table's segment files
- Finding or creating a segment with room for one more row
- Reading, appending to and rewriting whole segments

It keeps no cursor between calls: every call rescans the table directory,
which keeps it tolerant of segment files added or removed externally.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, Sequence

from segment_db.domain.entities import Table
from segment_db.domain.value_objects import SegmentDescriptor


class SegmentStore(Protocol):
    """Protocol for segment file management."""

    @property
    @abstractmethod
    def segment_row_limit(self) -> int:
        """Maximum number of data rows accepted into one segment at insert time."""
        ...

    @abstractmethod
    def ensure_table(self, table: Table) -> None:
        """Create the table directory, segment 1 and marker files if missing.

        Existing files are left untouched.

        Raises:
            IOFailure: If a directory or file cannot be created.
        """
        ...

    @abstractmethod
    def list_segments(self, table: Table) -> list[SegmentDescriptor]:
        """Return the table's segments ordered by ascending number.

        Entries whose name does not parse as a segment are skipped.
        Numbers are not required to be contiguous.

        Raises:
            IOFailure: If the table directory cannot be listed.
        """
        ...

    @abstractmethod
    def writable_segment(self, table: Table) -> SegmentDescriptor:
        """Return the first segment with fewer than ``segment_row_limit`` rows.

        If no segment qualifies, a new one numbered ``max(existing) + 1``
        (or 1) is created with its header and returned.

        Raises:
            IOFailure: If a new segment cannot be created.
        """
        ...

    @abstractmethod
    def read_rows(self, table: Table, segment: SegmentDescriptor) -> list[list[str]]:
        """Read a segment's data rows, without the header.

        Raises:
            MalformedSegment: If the segment is unreadable or its header
                does not match the table's header.
        """
        ...

    @abstractmethod
    def append_row(
        self, table: Table, segment: SegmentDescriptor, row: Sequence[str]
    ) -> None:
        """Append one stored row (primary key included) to a segment."""
        ...

    @abstractmethod
    def rewrite_segment(
        self,
        table: Table,
        segment: SegmentDescriptor,
        rows: Sequence[Sequence[str]],
    ) -> None:
        """Replace a segment's content with the header followed by ``rows``.

        Not atomic: a failure mid-write can leave a truncated segment.

        Raises:
            IOFailure: If the segment cannot be written.
        """
        ...
