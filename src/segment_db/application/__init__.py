"""Application layer for the segment store.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    Database:
        - Database: Main entry point (initialization + command execution)
    Query Engine:
        - QueryEngine: Executes Insert/Select/Delete commands
        - ExecutionResult: Result of command execution
        - Row: A row of data
        - TableRegistry: Schema tables bound to their directories
"""

from segment_db.application.database import Database
from segment_db.application.query_engine import (
    ExecutionResult,
    QueryEngine,
    Row,
    TableRegistry,
)

__all__ = [
    "Database",
    "QueryEngine",
    "ExecutionResult",
    "Row",
    "TableRegistry",
]
