"""Core identifiers and type-safe primitives for the segment store.

These value objects keep segment numbers and primary keys from being
mixed up with the other integers flowing through the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NewType


SegmentNumber = NewType("SegmentNumber", int)
"""Ordinal of a segment file within a table. Segments are numbered from 1."""

PrimaryKey = NewType("PrimaryKey", int)
"""Engine-assigned row identifier. Monotonically increasing, never reused."""

FIRST_SEGMENT = SegmentNumber(1)
SEGMENT_SUFFIX = ".csv"


@dataclass(frozen=True, slots=True)
class SegmentDescriptor:
    """Identifies one physical segment file of a table.

    Attributes:
        path: Location of the segment file
        number: The segment's ordinal, parsed from the file name

    Example:
        >>> seg = SegmentDescriptor.for_number(Path("db/users"), SegmentNumber(2))
        >>> seg.path.name
        '2.csv'
    """

    path: Path
    number: SegmentNumber

    def __post_init__(self) -> None:
        """Validate the segment number."""
        if self.number < 1:
            raise ValueError(f"segment number must be positive, got {self.number}")

    def __str__(self) -> str:
        return f"segment {self.number} ({self.path})"

    @classmethod
    def for_number(cls, table_dir: Path, number: SegmentNumber) -> SegmentDescriptor:
        """Build the descriptor of segment ``number`` inside ``table_dir``."""
        return cls(path=table_dir / f"{number}{SEGMENT_SUFFIX}", number=number)

    @classmethod
    def from_path(cls, path: Path) -> SegmentDescriptor | None:
        """Parse a segment descriptor from a file path.

        Returns:
            The descriptor, or None if the name is not ``<positive int>.csv``.
        """
        if path.suffix != SEGMENT_SUFFIX:
            return None
        stem = path.stem
        if not (stem.isascii() and stem.isdigit()):
            return None
        number = int(stem)
        if number < 1:
            return None
        return cls(path=path, number=SegmentNumber(number))
