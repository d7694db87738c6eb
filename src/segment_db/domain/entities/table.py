"""Table entity.

A Table binds the schema's column layout to a directory on disk and,
when primary keys are enabled, to the table's key sequence. It also owns
the per-table mutual-exclusion scope held by the query engine.

On-disk row layout with primary keys enabled::

    users_pk, id, name, status      <- header
    1,        7,  Alice, a
    2,        8,  Bob,   b

Without primary keys the header is just the user columns.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from segment_db.domain.entities.schema import TableSchema
from segment_db.domain.errors import SchemaValidationError, UnknownColumn
from segment_db.domain.value_objects import PrimaryKey

if TYPE_CHECKING:
    from segment_db.ports.outbound.sequence import PrimaryKeySequence


PK_COLUMN_SUFFIX = "_pk"
PK_SEQUENCE_SUFFIX = "_pk_sequence"
LOCK_MARKER_SUFFIX = "_Lock"


class Table:
    """A schema table bound to its storage directory.

    Attributes:
        name: Table name.
        columns: User-visible columns in schema order.
        directory: Directory holding the table's segment files.
    """

    def __init__(
        self,
        layout: TableSchema,
        directory: Path,
        pk_sequence: PrimaryKeySequence | None = None,
    ) -> None:
        """Bind a table layout to its directory.

        Raises:
            SchemaValidationError: If a user column takes the name of the
                synthetic primary-key column while primary keys are enabled.
        """
        pk_column = f"{layout.name}{PK_COLUMN_SUFFIX}"
        if pk_sequence is not None and layout.has_column(pk_column):
            raise SchemaValidationError(
                f"Table {layout.name} declares column {pk_column}, "
                "which is reserved for the primary key"
            )
        self._layout = layout
        self._directory = Path(directory)
        self._pk_sequence = pk_sequence
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._layout.name

    @property
    def columns(self) -> tuple[str, ...]:
        return self._layout.columns

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def has_primary_key(self) -> bool:
        return self._pk_sequence is not None

    @property
    def pk_column(self) -> str:
        """Name of the synthetic primary-key column."""
        return f"{self.name}{PK_COLUMN_SUFFIX}"

    @property
    def pk_sequence_path(self) -> Path:
        return self._directory / f"{self.name}{PK_SEQUENCE_SUFFIX}"

    @property
    def lock_marker_path(self) -> Path:
        return self._directory / f"{self.name}{LOCK_MARKER_SUFFIX}"

    @property
    def header(self) -> list[str]:
        """Header row written at the top of every segment."""
        if self.has_primary_key:
            return [self.pk_column, *self.columns]
        return list(self.columns)

    def field_index(self, column: str) -> int:
        """Resolve a column name to its position in a stored row.

        User columns are shifted by one when a synthetic primary key
        occupies position 0. The primary-key column itself resolves to 0.

        Raises:
            UnknownColumn: If the column does not belong to this table.
        """
        if self.has_primary_key:
            if column == self.pk_column:
                return 0
            return self._layout.column_index(column) + 1
        return self._layout.column_index(column)

    def has_field(self, column: str) -> bool:
        try:
            self.field_index(column)
        except UnknownColumn:
            return False
        return True

    def next_primary_key(self) -> PrimaryKey:
        """Atomically increment and fetch the table's key counter.

        Raises:
            RuntimeError: If primary keys are disabled for this table.
        """
        if self._pk_sequence is None:
            raise RuntimeError(f"Table {self.name} has no primary key sequence")
        with self._lock:
            return self._pk_sequence.next()

    @contextmanager
    def locked(self) -> Iterator[Table]:
        """Hold the table's mutual-exclusion scope for a whole operation."""
        with self._lock:
            yield self

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={list(self.columns)!r})"
