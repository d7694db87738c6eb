"""Value objects - immutable identifiers used across the engine."""

from segment_db.domain.value_objects.identifiers import (
    FIRST_SEGMENT,
    SEGMENT_SUFFIX,
    PrimaryKey,
    SegmentDescriptor,
    SegmentNumber,
)

__all__ = [
    "FIRST_SEGMENT",
    "SEGMENT_SUFFIX",
    "PrimaryKey",
    "SegmentDescriptor",
    "SegmentNumber",
]
