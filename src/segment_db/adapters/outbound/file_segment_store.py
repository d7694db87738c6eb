"""File-based Segment Store implementation.

This adapter implements the SegmentStore protocol on top of a directory
per table holding numbered CSV segment files.

Directory Layout:
    <root>/<table>/1.csv, 2.csv, ...    segments, header row first
    <root>/<table>/<table>_pk_sequence  primary-key counter (optional)
    <root>/<table>/<table>_Lock         lock marker (unused on disk)

Segment Selection:
    Inserts go to the lowest-numbered segment holding fewer than
    ``segment_row_limit`` data rows. When every segment is full a new one
    numbered ``max(existing) + 1`` is created. The directory is rescanned
    on every call, so segments added or removed by hand are picked up and
    files whose names are not ``<n>.csv`` are ignored.

Thread Safety:
    None on its own. Callers serialize access per table (see
    ``Table.locked``).
"""

from __future__ import annotations

from typing import Sequence

from segment_db.adapters.outbound.csv_row_codec import CSVRowCodec
from segment_db.domain.entities import Table
from segment_db.domain.errors import IOFailure, MalformedSegment
from segment_db.domain.value_objects import (
    FIRST_SEGMENT,
    SegmentDescriptor,
    SegmentNumber,
)
from segment_db.infrastructure.logging import get_logger
from segment_db.infrastructure.metrics import MetricsRegistry, get_metrics
from segment_db.ports.outbound.row_codec import RowCodec

logger = get_logger(__name__)


class FileSegmentStore:
    """File-based implementation of the SegmentStore protocol.

    Attributes:
        segment_row_limit: Maximum data rows per segment at insert time.
    """

    def __init__(
        self,
        segment_row_limit: int,
        codec: RowCodec | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the segment store.

        Args:
            segment_row_limit: Maximum number of data rows per segment.
            codec: Row codec used for every file access (default CSV).
            metrics: Metrics registry (default: the global registry).

        Raises:
            ValueError: If segment_row_limit is not positive.
        """
        if segment_row_limit < 1:
            raise ValueError(f"segment_row_limit must be positive, got {segment_row_limit}")
        self._limit = segment_row_limit
        self._codec: RowCodec = codec or CSVRowCodec()
        self._metrics = metrics

    @property
    def segment_row_limit(self) -> int:
        return self._limit

    @property
    def codec(self) -> RowCodec:
        return self._codec

    def _get_metrics(self) -> MetricsRegistry:
        if self._metrics is None:
            self._metrics = get_metrics()
        return self._metrics

    def ensure_table(self, table: Table) -> None:
        """Create the table directory, segment 1 and the lock marker if missing."""
        try:
            table.directory.mkdir(parents=True, exist_ok=True)
            if not table.lock_marker_path.exists():
                table.lock_marker_path.touch()
        except OSError as e:
            raise IOFailure(table.directory, f"cannot initialize table: {e}") from e

        if not self.list_segments(table):
            self._create_segment(table, FIRST_SEGMENT)

    def list_segments(self, table: Table) -> list[SegmentDescriptor]:
        """Enumerate the table's segments in ascending number order."""
        try:
            entries = [entry for entry in table.directory.iterdir() if entry.is_file()]
        except OSError as e:
            raise IOFailure(table.directory, f"cannot list segments: {e}") from e

        segments = []
        for entry in entries:
            segment = SegmentDescriptor.from_path(entry)
            if segment is not None:
                segments.append(segment)
        segments.sort(key=lambda s: (s.number, s.path.name))
        return segments

    def writable_segment(self, table: Table) -> SegmentDescriptor:
        """Find the first segment with room for a row, creating one if needed."""
        segments = self.list_segments(table)
        for segment in segments:
            try:
                count = len(self.read_rows(table, segment))
            except MalformedSegment as e:
                logger.warning(
                    "segment_skipped",
                    table=table.name,
                    segment=segment.number,
                    reason=e.reason,
                )
                self._get_metrics().segments_skipped_total.labels(table=table.name).inc()
                continue
            if count < self._limit:
                return segment

        number = SegmentNumber(segments[-1].number + 1) if segments else FIRST_SEGMENT
        return self._create_segment(table, number)

    def read_rows(self, table: Table, segment: SegmentDescriptor) -> list[list[str]]:
        """Read a segment's data rows after checking its header."""
        header, rows = self._codec.read_all(segment.path)
        expected = table.header
        if header != expected:
            raise MalformedSegment(
                segment.path, f"header {header} does not match expected {expected}"
            )
        return rows

    def append_row(
        self, table: Table, segment: SegmentDescriptor, row: Sequence[str]
    ) -> None:
        """Append one stored row to ``segment``."""
        if len(row) != len(table.header):
            raise ValueError(
                f"row has {len(row)} fields, table {table.name} stores {len(table.header)}"
            )
        self._codec.append_row(segment.path, row)

    def rewrite_segment(
        self,
        table: Table,
        segment: SegmentDescriptor,
        rows: Sequence[Sequence[str]],
    ) -> None:
        """Replace a segment's content with the header and ``rows``."""
        self._codec.write_all(segment.path, table.header, rows)
        self._get_metrics().segments_rewritten_total.labels(table=table.name).inc()

    def _create_segment(self, table: Table, number: SegmentNumber) -> SegmentDescriptor:
        segment = SegmentDescriptor.for_number(table.directory, number)
        self._codec.write_all(segment.path, table.header, [])
        self._get_metrics().segments_created_total.labels(table=table.name).inc()
        logger.info(
            "segment_created",
            table=table.name,
            segment=segment.number,
            path=str(segment.path),
        )
        return segment
