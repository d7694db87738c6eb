"""Query Engine executing commands against segment files.

Each command is a single request/response cycle with no cursor kept
between commands:

    Insert: validate -> next primary key -> writable segment -> append
    Select: validate -> for each table, each segment: read -> filter
            -> accumulate -> project
    Delete: validate -> for each segment: read -> drop matches -> rewrite

Error policy:
    - Schema violations are detected before any file is touched.
    - Select skips a segment it cannot read or filter and carries on.
    - WHERE terms of an unsupported shape make a Select match nothing
      and a Delete fail before any segment is touched.
    - Delete stops at the first failing segment and names it; segments
      already rewritten stay rewritten.

All three operations hold the table's lock for their whole duration.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from opentelemetry.trace import Span

from segment_db.adapters.inbound.command_parser import (
    ColumnRef,
    Command,
    CommandType,
    DeleteCommand,
    InsertCommand,
    SelectCommand,
)
from segment_db.adapters.outbound.file_pk_sequence import FilePrimaryKeySequence
from segment_db.domain.entities import Predicate, Schema, Table
from segment_db.domain.entities.table import PK_SEQUENCE_SUFFIX
from segment_db.domain.errors import (
    ArityMismatch,
    MalformedSegment,
    PredicateSyntaxError,
    QueryCancelled,
    SegmentDbError,
    SegmentOperationError,
    UnknownColumn,
    UnknownTable,
)
from segment_db.domain.services import PredicateEvaluator
from segment_db.domain.value_objects import PrimaryKey
from segment_db.infrastructure.logging import command_context, get_logger
from segment_db.infrastructure.metrics import MetricsRegistry, get_metrics
from segment_db.infrastructure.tracing import ATTR_ROWS, command_span
from segment_db.ports.outbound.segment_store import SegmentStore

logger = get_logger(__name__)


@dataclass
class Row:
    """A row of data returned by the engine.

    Rows can be accessed by column name or index.
    """

    columns: list[str]
    values: list[str]

    def __getitem__(self, key: str | int) -> str:
        if isinstance(key, int):
            return self.values[key]
        try:
            idx = self.columns.index(key)
            return self.values[idx]
        except ValueError as e:
            raise KeyError(f"Column '{key}' not found") from e

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c}={v!r}" for c, v in zip(self.columns, self.values))
        return f"Row({pairs})"


@dataclass
class ExecutionResult:
    """Result of command execution.

    ``columns`` is the projection of the first table of a Select. When a
    multi-table ``SELECT *`` spans tables with different layouts, each
    row keeps its own table's columns in ``Row.columns``.
    """

    rows: list[Row] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    message: str = ""
    primary_key: PrimaryKey | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class TableRegistry:
    """Tables of one schema bound to their directories under a root.

    With primary keys enabled each table gets a file-backed key sequence
    stored next to its segments.
    """

    def __init__(self, schema: Schema, root: str | Path, primary_keys: bool = True) -> None:
        self._schema = schema
        self._root = Path(root)
        self._primary_keys = primary_keys
        self._tables: dict[str, Table] = {}
        self._sequences: dict[str, FilePrimaryKeySequence] = {}
        for name in schema.table_names:
            directory = self._root / name
            sequence = None
            if primary_keys:
                sequence = FilePrimaryKeySequence(directory / f"{name}{PK_SEQUENCE_SUFFIX}")
                self._sequences[name] = sequence
            self._tables[name] = Table(schema.table(name), directory, sequence)

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def root(self) -> Path:
        return self._root

    @property
    def primary_keys(self) -> bool:
        return self._primary_keys

    def get_table(self, name: str) -> Table:
        """Get a table by name.

        Raises:
            UnknownTable: If the table is not in the schema.
        """
        table = self._tables.get(name)
        if table is None:
            raise UnknownTable(name)
        return table

    def sequence(self, name: str) -> FilePrimaryKeySequence | None:
        return self._sequences.get(name)

    def table_exists(self, name: str) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())


class QueryEngine:
    """Executes typed commands against a table registry and a segment store."""

    def __init__(
        self,
        registry: TableRegistry,
        store: SegmentStore,
        evaluator: PredicateEvaluator | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._evaluator = evaluator or PredicateEvaluator()
        self._metrics = metrics

    @property
    def registry(self) -> TableRegistry:
        return self._registry

    def _get_metrics(self) -> MetricsRegistry:
        if self._metrics is None:
            self._metrics = get_metrics()
        return self._metrics

    def execute(
        self, command: Command, cancel: threading.Event | None = None
    ) -> ExecutionResult:
        """Execute a command, reporting engine errors in the result.

        Args:
            command: The command to execute.
            cancel: Optional event that aborts multi-segment scans.

        Returns:
            ExecutionResult with rows and/or status message.
        """
        try:
            if isinstance(command, InsertCommand):
                pk = self.insert(command)
                return ExecutionResult(message="OK: 1 row inserted", primary_key=pk)
            elif isinstance(command, SelectCommand):
                rows = self.select(command, cancel)
                return ExecutionResult(
                    rows=rows, columns=self._output_columns(command), message="OK"
                )
            elif isinstance(command, DeleteCommand):
                self.delete(command, cancel)
                return ExecutionResult(message="OK: delete successful")
            else:
                raise TypeError(f"Unsupported command type: {type(command).__name__}")
        except SegmentDbError as e:
            logger.warning("command_failed", command=str(command), error=str(e))
            return ExecutionResult(message=str(e), error=e)

    def insert(self, command: InsertCommand) -> PrimaryKey | None:
        """Append one row to a table.

        Returns:
            The assigned primary key, or None when primary keys are disabled.

        Raises:
            UnknownTable: If the table is not in the schema.
            UnknownColumn: If the command names a column the table lacks.
            ArityMismatch: If the value count differs from the column count.
            IOFailure: If the key counter or segment cannot be written.
        """
        with self._instrument(CommandType.INSERT, [command.table]):
            table = self._registry.get_table(command.table)
            values = self._order_values(table, command)

            with table.locked():
                pk = None
                row = list(values)
                if table.has_primary_key:
                    pk = table.next_primary_key()
                    row.insert(0, str(pk))
                segment = self._store.writable_segment(table)
                self._store.append_row(table, segment, row)

            self._get_metrics().rows_inserted_total.labels(table=table.name).inc()
            logger.debug("row_inserted", table=table.name, segment=segment.number, pk=pk)
            return pk

    def select(
        self, command: SelectCommand, cancel: threading.Event | None = None
    ) -> list[Row]:
        """Return the projected rows of every listed table matching the predicate.

        Rows come back in table order, then segment order, then file order.
        A WHERE term of an unsupported shape matches no row.

        Raises:
            UnknownTable: If a listed table is not in the schema.
            UnknownColumn: If a projected column cannot be resolved.
            QueryCancelled: If ``cancel`` is set between two segments.
        """
        with self._instrument(CommandType.SELECT, command.tables) as span:
            tables = [self._registry.get_table(name) for name in command.tables]
            projections = {t.name: self._projection(t, command) for t in tables}
            predicate = command.predicate
            if predicate is not None and predicate.skipped:
                # An unsupported term can never be satisfied.
                self._report_skipped_terms(predicate, command.tables)
                span.set_attribute(ATTR_ROWS, 0)
                return []

            result: list[Row] = []
            for table in tables:
                columns, indexes = projections[table.name]
                with table.locked():
                    for segment in self._store.list_segments(table):
                        _check_cancelled(cancel)
                        try:
                            rows = self._store.read_rows(table, segment)
                            if predicate is not None:
                                rows = self._evaluator.filter_rows(predicate, table, rows)
                        except (MalformedSegment, UnknownColumn) as e:
                            logger.warning(
                                "segment_skipped",
                                table=table.name,
                                segment=segment.number,
                                reason=str(e),
                            )
                            self._get_metrics().segments_skipped_total.labels(
                                table=table.name
                            ).inc()
                            continue
                        for row in rows:
                            values = ["" if i is None else row[i] for i in indexes]
                            result.append(Row(columns=list(columns), values=values))
            span.set_attribute(ATTR_ROWS, len(result))
            return result

    def delete(self, command: DeleteCommand, cancel: threading.Event | None = None) -> None:
        """Remove matching rows from every segment of a table.

        Segments in which nothing matches are left untouched.

        Raises:
            UnknownTable: If the table is not in the schema.
            UnknownColumn: If the predicate references an unknown column.
            PredicateSyntaxError: If the predicate is empty or has a term of
                an unsupported shape.
            SegmentOperationError: If a segment fails; earlier segments
                keep their changes and later ones are not processed.
        """
        with self._instrument(CommandType.DELETE, [command.table]) as span:
            table = self._registry.get_table(command.table)
            predicate = command.predicate
            if predicate.skipped:
                self._report_skipped_terms(predicate, [table.name])
                raise PredicateSyntaxError(
                    f"Unsupported WHERE term in DELETE on {table.name}: "
                    + ", ".join(predicate.skipped)
                )
            if not predicate.terms:
                raise PredicateSyntaxError(f"DELETE on {table.name} has no WHERE term")
            self._evaluator.validate(predicate, table)

            deleted = 0
            with table.locked():
                for segment in self._store.list_segments(table):
                    _check_cancelled(cancel)
                    try:
                        rows = self._store.read_rows(table, segment)
                        matched = {id(r) for r in self._evaluator.filter_rows(predicate, table, rows)}
                        if not matched:
                            continue
                        survivors = [r for r in rows if id(r) not in matched]
                        self._store.rewrite_segment(table, segment, survivors)
                    except SegmentDbError as e:
                        raise SegmentOperationError(table.name, segment, e) from e
                    deleted += len(matched)

            span.set_attribute(ATTR_ROWS, deleted)
            self._get_metrics().rows_deleted_total.labels(table=table.name).inc(deleted)
            logger.info("rows_deleted", table=table.name, count=deleted)

    def _order_values(self, table: Table, command: InsertCommand) -> tuple[str, ...]:
        """Return the command's values in schema column order."""
        values = command.values
        if not command.columns:
            if len(values) != len(table.columns):
                raise ArityMismatch(table.name, len(table.columns), len(values))
            return values

        if len(command.columns) != len(values):
            raise ArityMismatch(table.name, len(command.columns), len(values))
        for column in command.columns:
            if column not in table.columns:
                raise UnknownColumn(column, table.name)
        by_column = dict(zip(command.columns, values))
        if len(by_column) != len(table.columns):
            raise ArityMismatch(table.name, len(table.columns), len(by_column))
        return tuple(by_column[c] for c in table.columns)

    def _projection(
        self, table: Table, command: SelectCommand
    ) -> tuple[list[str], list[int | None]]:
        """Resolve the projected columns to stored-row indexes for ``table``.

        ``None`` marks a column qualified with another listed table; it
        projects as an empty field for this table's rows.
        """
        if command.columns is None:
            return list(table.columns), [table.field_index(c) for c in table.columns]

        names: list[str] = []
        indexes: list[int | None] = []
        for ref in command.columns:
            names.append(str(ref))
            indexes.append(self._resolve_column(table, ref, command.tables))
        return names, indexes

    @staticmethod
    def _resolve_column(table: Table, ref: ColumnRef, tables: tuple[str, ...]) -> int | None:
        if ref.table is None or ref.table == table.name:
            return table.field_index(ref.name)
        if ref.table not in tables:
            raise UnknownColumn(str(ref), table.name)
        return None

    def _output_columns(self, command: SelectCommand) -> list[str]:
        if command.columns is not None:
            return [str(c) for c in command.columns]
        return list(self._registry.get_table(command.tables[0]).columns)

    def _report_skipped_terms(self, predicate: Predicate, tables: list[str] | tuple[str, ...]) -> None:
        for term in predicate.skipped:
            logger.warning("predicate_term_skipped", tables=list(tables), term=term)

    @contextmanager
    def _instrument(
        self, kind: CommandType, tables: list[str] | tuple[str, ...]
    ) -> Iterator[Span]:
        metrics = self._get_metrics()
        start = time.perf_counter()
        status = "error"
        with command_span(kind.value, tables) as span, command_context(kind.value, tables):
            try:
                yield span
                status = "success"
            finally:
                metrics.commands_total.labels(command=kind.value, status=status).inc()
                metrics.command_latency_seconds.labels(command=kind.value).observe(
                    time.perf_counter() - start
                )


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise QueryCancelled("Scan cancelled")
