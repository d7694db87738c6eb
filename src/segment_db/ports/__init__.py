"""Ports layer - interfaces between the engine and its collaborators."""

from segment_db.ports.outbound import PrimaryKeySequence, RowCodec, SegmentStore

__all__ = [
    "PrimaryKeySequence",
    "RowCodec",
    "SegmentStore",
]
