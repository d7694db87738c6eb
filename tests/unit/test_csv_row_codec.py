"""Unit tests for the CSV row codec."""

from __future__ import annotations

from pathlib import Path

import pytest

from segment_db.adapters.outbound import CSVRowCodec
from segment_db.domain.errors import IOFailure, MalformedSegment


@pytest.fixture
def codec() -> CSVRowCodec:
    return CSVRowCodec()


@pytest.mark.unit
class TestCSVRowCodec:
    """Tests for CSVRowCodec."""

    def test_write_then_read(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        codec.write_all(path, ["id", "name"], [["1", "Alice"], ["2", "Bob"]])

        header, rows = codec.read_all(path)

        assert header == ["id", "name"]
        assert rows == [["1", "Alice"], ["2", "Bob"]]

    def test_file_layout(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        """Header first, one line per row, minimal quoting."""
        path = temp_dir / "1.csv"
        codec.write_all(path, ["id", "name"], [["1", "Alice"]])

        assert path.read_text(encoding="utf-8") == "id,name\n1,Alice\n"

    def test_special_characters_survive(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        """Delimiters, quotes and line breaks inside a field round-trip intact."""
        path = temp_dir / "1.csv"
        field = 'a,b "quoted"\nnext line'
        codec.write_all(path, ["id", "note"], [["1", field]])

        _, rows = codec.read_all(path)

        assert rows == [["1", field]]
        assert '"a,b ""quoted""' in path.read_text(encoding="utf-8")

    def test_empty_field(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        codec.write_all(path, ["id", "name"], [["1", ""]])

        _, rows = codec.read_all(path)

        assert rows == [["1", ""]]

    def test_append_row(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        codec.write_all(path, ["id", "name"], [])
        codec.append_row(path, ["1", "Alice"])
        codec.append_row(path, ["2", "x,y"])

        _, rows = codec.read_all(path)

        assert rows == [["1", "Alice"], ["2", "x,y"]]

    def test_write_all_truncates(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        codec.write_all(path, ["id"], [["1"], ["2"]])
        codec.write_all(path, ["id"], [["2"]])

        _, rows = codec.read_all(path)

        assert rows == [["2"]]

    def test_blank_lines_ignored(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        path.write_text("id,name\n\n1,Alice\n\n", encoding="utf-8")

        _, rows = codec.read_all(path)

        assert rows == [["1", "Alice"]]

    def test_missing_header(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(MalformedSegment):
            codec.read_all(path)

    def test_field_count_mismatch(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        path.write_text("id,name\n1,Alice,extra\n", encoding="utf-8")

        with pytest.raises(MalformedSegment) as exc_info:
            codec.read_all(path)
        assert "row 2" in str(exc_info.value)

    def test_unterminated_quote(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        path = temp_dir / "1.csv"
        path.write_text('id,name\n1,"Alice\n', encoding="utf-8")

        with pytest.raises(MalformedSegment):
            codec.read_all(path)

    def test_missing_file(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        with pytest.raises(MalformedSegment):
            codec.read_all(temp_dir / "missing.csv")

    def test_write_into_missing_directory(self, codec: CSVRowCodec, temp_dir: Path) -> None:
        with pytest.raises(IOFailure):
            codec.write_all(temp_dir / "nope" / "1.csv", ["id"], [])
