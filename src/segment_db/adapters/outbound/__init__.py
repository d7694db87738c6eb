"""Outbound adapters - implementations of outbound ports.

These adapters implement the file system facing parts of the engine:
CSV row encoding, segment file management and primary-key counters.
"""

from segment_db.adapters.outbound.csv_row_codec import CSVRowCodec
from segment_db.adapters.outbound.file_pk_sequence import FilePrimaryKeySequence
from segment_db.adapters.outbound.file_segment_store import FileSegmentStore

__all__ = [
    "CSVRowCodec",
    "FilePrimaryKeySequence",
    "FileSegmentStore",
]
