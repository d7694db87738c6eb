"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the file system facing parts of the
engine: segment storage, row encoding and primary-key sequences.
"""

from segment_db.ports.outbound.row_codec import RowCodec
from segment_db.ports.outbound.segment_store import SegmentStore
from segment_db.ports.outbound.sequence import PrimaryKeySequence

__all__ = [
    "PrimaryKeySequence",
    "RowCodec",
    "SegmentStore",
]
