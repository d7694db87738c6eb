"""Unit tests for the logging setup."""

from __future__ import annotations

import json

import pytest
import structlog

from segment_db.infrastructure.logging import (
    MAX_COMMAND_CHARS,
    build_processors,
    command_context,
    truncate_command_text,
)


def _render(log_format: str, method_name: str, **event: object) -> str:
    """Run an event through the processor chain without touching global config."""
    result: object = dict(event)
    for processor in build_processors(log_format):
        result = processor(None, method_name, result)
    assert isinstance(result, str)
    return result


@pytest.mark.unit
class TestTruncateCommandText:
    """Tests for the command text cap."""

    def test_long_command_is_cut(self) -> None:
        text = "INSERT INTO users VALUES ('" + "x" * 500 + "')"

        event = truncate_command_text(None, "info", {"event": "parse_failed", "command": text})

        assert len(event["command"]) == MAX_COMMAND_CHARS + 3
        assert event["command"].endswith("...")
        assert event["command"].startswith("INSERT INTO users")

    def test_short_command_untouched(self) -> None:
        event = truncate_command_text(None, "info", {"command": "SELECT * FROM users"})

        assert event["command"] == "SELECT * FROM users"

    def test_non_text_command_untouched(self) -> None:
        event = truncate_command_text(None, "info", {"command": None, "table": "users"})

        assert event == {"command": None, "table": "users"}


@pytest.mark.unit
class TestProcessors:
    """Tests for the rendered output."""

    def test_json_line(self) -> None:
        line = _render("json", "warning", event="segment_skipped", table="users", segment=2)

        record = json.loads(line)
        assert record["event"] == "segment_skipped"
        assert record["level"] == "warning"
        assert record["segment"] == 2
        assert "timestamp" in record

    def test_console_line(self) -> None:
        line = _render("console", "info", event="rows_deleted", table="orders", count=3)

        assert "rows_deleted" in line
        assert "table=orders" in line
        assert "count=3" in line
        assert "\x1b[" not in line


@pytest.mark.unit
class TestCommandContext:
    """Tests for command context binding."""

    def test_binds_command_fields(self) -> None:
        with command_context("select", ["users", "orders"]):
            bound = structlog.contextvars.get_contextvars()
            line = _render("json", "warning", event="segment_skipped", segment=1)

        assert bound == {"command_kind": "select", "command_tables": "users,orders"}
        record = json.loads(line)
        assert record["command_kind"] == "select"
        assert record["command_tables"] == "users,orders"

    def test_unbinds_after_block(self) -> None:
        with pytest.raises(ValueError):
            with command_context("delete", ["users"]):
                raise ValueError("boom")

        assert "command_kind" not in structlog.contextvars.get_contextvars()
