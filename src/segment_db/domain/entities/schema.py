"""Schema model: table names, ordered column lists and the segment row limit.

The schema is loaded once from a JSON document of the form::

    {
        "name": "shop",
        "tuples_limit": 1000,
        "structure": {"users": ["id", "name", "status"]}
    }

and is read-only afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from segment_db.domain.errors import SchemaValidationError, UnknownColumn, UnknownTable


def _check_name(kind: str, name: str) -> None:
    if not name or not name.strip():
        raise ValueError(f"{kind} name must not be empty")
    if name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"{kind} name {name!r} is not a valid directory name")


@dataclass(frozen=True, slots=True)
class TableSchema:
    """Column layout of one table as declared in the schema."""

    name: str
    columns: tuple[str, ...]

    def column_index(self, column: str) -> int:
        """Return the position of ``column`` among the user columns.

        Raises:
            UnknownColumn: If the column is not declared for this table.
        """
        try:
            return self.columns.index(column)
        except ValueError as e:
            raise UnknownColumn(column, self.name) from e

    def has_column(self, column: str) -> bool:
        return column in self.columns


class Schema(BaseModel):
    """Static description of the database.

    Attributes:
        name: Database name, also the name of its root directory.
        segment_row_limit: Maximum number of data rows per segment file.
        tables: Table name -> ordered column names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Database name")
    segment_row_limit: int = Field(
        ..., alias="tuples_limit", gt=0, description="Max data rows per segment"
    )
    tables: dict[str, tuple[str, ...]] = Field(
        ..., alias="structure", description="Table name -> ordered columns"
    )

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        _check_name("Schema", value)
        return value

    @field_validator("tables")
    @classmethod
    def _validate_tables(cls, value: dict[str, tuple[str, ...]]) -> dict[str, tuple[str, ...]]:
        if not value:
            raise ValueError("schema must declare at least one table")
        for table, columns in value.items():
            _check_name("Table", table)
            if not columns:
                raise ValueError(f"table {table!r} must declare at least one column")
            if len(set(columns)) != len(columns):
                raise ValueError(f"table {table!r} has duplicate column names")
            for column in columns:
                if not column or not column.strip():
                    raise ValueError(f"table {table!r} has an empty column name")
        return value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        """Build a schema from an already decoded JSON document.

        Raises:
            SchemaValidationError: If the document is not a valid schema.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise SchemaValidationError(f"Invalid schema: {e}") from e

    @classmethod
    def load(cls, path: str | Path) -> Schema:
        """Load and validate a schema file.

        Raises:
            SchemaValidationError: If the file is unreadable, not JSON,
                or not a valid schema.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SchemaValidationError(f"Cannot read schema file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"Schema file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise SchemaValidationError(f"Schema file {path} must contain a JSON object")
        return cls.from_dict(data)

    @property
    def table_names(self) -> list[str]:
        """Table names in declaration order."""
        return list(self.tables)

    def has_table(self, name: str) -> bool:
        return name in self.tables

    def table(self, name: str) -> TableSchema:
        """Return the layout of table ``name``.

        Raises:
            UnknownTable: If the table is not declared.
        """
        columns = self.tables.get(name)
        if columns is None:
            raise UnknownTable(name)
        return TableSchema(name=name, columns=tuple(columns))
