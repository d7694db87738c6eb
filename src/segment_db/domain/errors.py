"""Error taxonomy for the segment store.

Every error raised by the engine derives from SegmentDbError so inbound
adapters can report a failed command and keep accepting new ones.
"""

from __future__ import annotations

from pathlib import Path


class SegmentDbError(Exception):
    """Base class for all engine errors."""


class SchemaViolation(SegmentDbError):
    """A command does not fit the schema."""


class UnknownTable(SchemaViolation):
    """The named table is not declared in the schema."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table {table} does not exist")
        self.table = table


class UnknownColumn(SchemaViolation):
    """The named column does not exist in the table."""

    def __init__(self, column: str, table: str) -> None:
        super().__init__(f"Column {column} does not exist in table {table}")
        self.column = column
        self.table = table


class ArityMismatch(SchemaViolation):
    """The number of values does not match the table's column count."""

    def __init__(self, table: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Wrong number of values for table {table}: expected {expected}, got {actual}"
        )
        self.table = table
        self.expected = expected
        self.actual = actual


class SchemaValidationError(SegmentDbError):
    """The schema description could not be loaded or is invalid."""


class MalformedSegment(SegmentDbError):
    """A segment file is unreadable or its content is corrupt."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Malformed segment {path}: {reason}")
        self.path = path
        self.reason = reason


class PredicateSyntaxError(SegmentDbError):
    """A WHERE expression could not be parsed."""


class IOFailure(SegmentDbError):
    """A filesystem operation failed while creating or writing a file."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"I/O failure on {path}: {reason}")
        self.path = path
        self.reason = reason


class SegmentOperationError(SegmentDbError):
    """A multi-segment operation stopped at a failing segment.

    Segments processed before the failing one keep their changes.
    """

    def __init__(self, table: str, segment: object, cause: Exception) -> None:
        super().__init__(f"Operation on table {table} failed at {segment}: {cause}")
        self.table = table
        self.segment = segment
        self.cause = cause


class QueryCancelled(SegmentDbError):
    """A scan was cancelled between segments."""
