"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (shell, REST, command parsing)
- Outbound adapters: Implement external dependencies (segment files, counters)
"""

from segment_db.adapters.outbound import (
    CSVRowCodec,
    FilePrimaryKeySequence,
    FileSegmentStore,
)

__all__ = [
    # Outbound adapters
    "CSVRowCodec",
    "FilePrimaryKeySequence",
    "FileSegmentStore",
]
