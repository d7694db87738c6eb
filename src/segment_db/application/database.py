"""Database - unified entry point for the segment store.

This module provides the Database class that wires the schema, the
segment store, the command parser and the query engine together.

Usage:
    from segment_db.application import Database
    from segment_db.domain.entities import Schema

    schema = Schema.load("schema.json")
    with Database(schema, data_dir="/path/to/data") as db:
        db.execute("INSERT INTO users VALUES (1, 'Alice', 'a')")
        result = db.execute("SELECT name FROM users WHERE status = 'a'")

The database root is ``<data_dir>/<schema.name>``; each table lives in
its own directory below it.
"""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path

from segment_db.adapters.inbound.command_parser import Command, CommandParser, ParseError
from segment_db.adapters.outbound.file_segment_store import FileSegmentStore
from segment_db.application.query_engine import (
    ExecutionResult,
    QueryEngine,
    TableRegistry,
)
from segment_db.domain.entities import Schema
from segment_db.infrastructure.config import Config
from segment_db.infrastructure.logging import get_logger
from segment_db.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)


class Database:
    """Main entry point that initializes storage and executes commands.

    Thread Safety:
        Commands on the same table are serialized by the table's lock;
        commands on different tables may run concurrently.
    """

    def __init__(
        self,
        schema: Schema,
        data_dir: str | Path | None = None,
        primary_keys: bool = True,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the database.

        Args:
            schema: The loaded schema.
            data_dir: Directory holding the database root. Uses a temp
                dir if None.
            primary_keys: Whether rows get a synthetic primary key.
            metrics: Metrics registry (default: the global registry).
        """
        if data_dir is None:
            data_dir = tempfile.mkdtemp(prefix="segment_db_")
        self._schema = schema
        self._data_dir = Path(data_dir)
        self._primary_keys = primary_keys
        self._metrics = metrics

        self._registry: TableRegistry | None = None
        self._store: FileSegmentStore | None = None
        self._engine: QueryEngine | None = None
        self._parser = CommandParser()

        self._started = False

    @classmethod
    def from_config(cls, config: Config, metrics: MetricsRegistry | None = None) -> Database:
        """Build a database from configuration, loading the schema file.

        Raises:
            SchemaValidationError: If the schema file is missing or invalid.
        """
        config.ensure_directories()
        schema = Schema.load(config.storage.schema_file)
        return cls(
            schema,
            data_dir=config.storage.data_dir,
            primary_keys=config.storage.primary_keys,
            metrics=metrics,
        )

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def data_dir(self) -> Path:
        """Get the data directory path."""
        return self._data_dir

    @property
    def root(self) -> Path:
        """Directory holding the table directories."""
        return self._data_dir / self._schema.name

    @property
    def is_started(self) -> bool:
        """Check if the database is started."""
        return self._started

    @property
    def engine(self) -> QueryEngine:
        if self._engine is None:
            raise RuntimeError("Database not started")
        return self._engine

    def start(self) -> None:
        """Start the database.

        Creates the table directories, segment 1, primary-key counters and
        lock markers for every table that lacks them. Existing files are
        never overwritten.

        Raises:
            RuntimeError: If already started.
            IOFailure: If the directory tree cannot be created.
        """
        if self._started:
            raise RuntimeError("Database already started")

        self._registry = TableRegistry(self._schema, self.root, self._primary_keys)
        self._store = FileSegmentStore(
            segment_row_limit=self._schema.segment_row_limit,
            metrics=self._metrics,
        )

        for table in self._registry:
            self._store.ensure_table(table)
            sequence = self._registry.sequence(table.name)
            if sequence is not None:
                sequence.initialize()

        self._engine = QueryEngine(
            registry=self._registry,
            store=self._store,
            metrics=self._metrics,
        )
        self._started = True
        logger.info(
            "database_initialized",
            schema=self._schema.name,
            root=str(self.root),
            tables=self._schema.table_names,
        )

    def stop(self) -> None:
        """Stop the database.

        Raises:
            RuntimeError: If not started.
        """
        if not self._started:
            raise RuntimeError("Database not started")
        self._engine = None
        self._store = None
        self._registry = None
        self._started = False

    def execute(self, text: str, cancel: threading.Event | None = None) -> ExecutionResult:
        """Parse and execute one command.

        Args:
            text: Command text.
            cancel: Optional event that aborts multi-segment scans.

        Returns:
            ExecutionResult; parse and engine errors are reported in it.

        Raises:
            RuntimeError: If database not started.
        """
        if not self._started:
            raise RuntimeError("Database not started")

        try:
            command = self._parser.parse(text)
        except ParseError as e:
            logger.info("parse_failed", command=text, error=str(e))
            return ExecutionResult(message=f"Parse error: {e}", error=e)

        return self.engine.execute(command, cancel)

    def execute_command(
        self, command: Command, cancel: threading.Event | None = None
    ) -> ExecutionResult:
        """Execute an already parsed command."""
        if not self._started:
            raise RuntimeError("Database not started")
        return self.engine.execute(command, cancel)

    def execute_many(self, statements: list[str]) -> list[ExecutionResult]:
        """Execute multiple commands in order."""
        return [self.execute(text) for text in statements]

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with the schema and per-table segment counts.
        """
        stats: dict = {
            "started": self._started,
            "schema": self._schema.name,
            "root": str(self.root),
            "segment_row_limit": self._schema.segment_row_limit,
            "primary_keys": self._primary_keys,
        }
        if self._started and self._registry is not None and self._store is not None:
            stats["segments"] = {
                table.name: len(self._store.list_segments(table)) for table in self._registry
            }
        return stats

    def __enter__(self) -> Database:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
