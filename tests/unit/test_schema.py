"""Unit tests for the schema model and the Table entity."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from segment_db.adapters.outbound import FilePrimaryKeySequence
from segment_db.domain.entities import Schema, Table
from segment_db.domain.errors import SchemaValidationError, UnknownColumn, UnknownTable


@pytest.mark.unit
class TestSchema:
    """Tests for Schema loading and validation."""

    def test_from_dict(self, schema: Schema) -> None:
        assert schema.name == "shop"
        assert schema.segment_row_limit == 3
        assert schema.table_names == ["users", "orders"]
        assert schema.tables["users"] == ("id", "name", "status")

    def test_load(self, schema_file: Path) -> None:
        schema = Schema.load(schema_file)
        assert schema.name == "shop"
        assert schema.has_table("orders")

    def test_populate_by_field_name(self) -> None:
        schema = Schema(name="db", segment_row_limit=10, tables={"t": ("a",)})
        assert schema.table("t").columns == ("a",)

    def test_table_layout(self, schema: Schema) -> None:
        layout = schema.table("users")
        assert layout.name == "users"
        assert layout.column_index("status") == 2

    def test_unknown_table(self, schema: Schema) -> None:
        with pytest.raises(UnknownTable):
            schema.table("missing")

    def test_unknown_column(self, schema: Schema) -> None:
        with pytest.raises(UnknownColumn):
            schema.table("users").column_index("age")

    @pytest.mark.parametrize(
        "doc",
        [
            {"name": "db", "tuples_limit": 0, "structure": {"t": ["a"]}},
            {"name": "db", "tuples_limit": 5, "structure": {}},
            {"name": "db", "tuples_limit": 5, "structure": {"t": []}},
            {"name": "db", "tuples_limit": 5, "structure": {"t": ["a", "a"]}},
            {"name": "db", "tuples_limit": 5, "structure": {"../t": ["a"]}},
            {"name": "", "tuples_limit": 5, "structure": {"t": ["a"]}},
            {"tuples_limit": 5, "structure": {"t": ["a"]}},
        ],
    )
    def test_invalid_documents(self, doc: dict) -> None:
        with pytest.raises(SchemaValidationError):
            Schema.from_dict(doc)

    def test_load_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(SchemaValidationError):
            Schema.load(temp_dir / "nope.json")

    def test_load_invalid_json(self, temp_dir: Path) -> None:
        path = temp_dir / "schema.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SchemaValidationError):
            Schema.load(path)

    def test_load_non_object(self, temp_dir: Path) -> None:
        path = temp_dir / "schema.json"
        path.write_text(json.dumps(["users"]), encoding="utf-8")
        with pytest.raises(SchemaValidationError):
            Schema.load(path)


@pytest.mark.unit
class TestTable:
    """Tests for the Table entity."""

    def test_header_with_primary_key(self, schema: Schema, temp_dir: Path) -> None:
        seq = FilePrimaryKeySequence(temp_dir / "users_pk_sequence")
        table = Table(schema.table("users"), temp_dir, seq)

        assert table.has_primary_key
        assert table.pk_column == "users_pk"
        assert table.header == ["users_pk", "id", "name", "status"]

    def test_header_without_primary_key(self, schema: Schema, temp_dir: Path) -> None:
        table = Table(schema.table("users"), temp_dir)

        assert not table.has_primary_key
        assert table.header == ["id", "name", "status"]

    def test_field_index_shifted_by_primary_key(self, schema: Schema, temp_dir: Path) -> None:
        seq = FilePrimaryKeySequence(temp_dir / "users_pk_sequence")
        table = Table(schema.table("users"), temp_dir, seq)

        assert table.field_index("users_pk") == 0
        assert table.field_index("id") == 1
        assert table.field_index("status") == 3

    def test_field_index_without_primary_key(self, schema: Schema, temp_dir: Path) -> None:
        table = Table(schema.table("users"), temp_dir)

        assert table.field_index("id") == 0
        assert not table.has_field("users_pk")
        with pytest.raises(UnknownColumn):
            table.field_index("users_pk")

    def test_marker_paths(self, schema: Schema, temp_dir: Path) -> None:
        table = Table(schema.table("users"), temp_dir / "users")
        assert table.pk_sequence_path == temp_dir / "users" / "users_pk_sequence"
        assert table.lock_marker_path == temp_dir / "users" / "users_Lock"

    def test_next_primary_key_requires_sequence(self, schema: Schema, temp_dir: Path) -> None:
        table = Table(schema.table("users"), temp_dir)
        with pytest.raises(RuntimeError):
            table.next_primary_key()

    def test_user_column_named_like_primary_key(self, temp_dir: Path) -> None:
        """A user column may not hide the synthetic key column."""
        schema = Schema.from_dict({"name": "db", "tuples_limit": 5, "structure": {"t": ["t_pk", "x"]}})
        seq = FilePrimaryKeySequence(temp_dir / "t_pk_sequence")

        with pytest.raises(SchemaValidationError):
            Table(schema.table("t"), temp_dir, seq)

    def test_user_column_named_like_primary_key_without_keys(self, temp_dir: Path) -> None:
        schema = Schema.from_dict({"name": "db", "tuples_limit": 5, "structure": {"t": ["t_pk", "x"]}})

        table = Table(schema.table("t"), temp_dir)

        assert table.header == ["t_pk", "x"]
        assert table.field_index("t_pk") == 0
