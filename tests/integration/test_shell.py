"""Integration tests for the interactive shell."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from segment_db.adapters.inbound import shell
from segment_db.adapters.inbound.shell import PROMPT, main, run_shell
from segment_db.application import Database
from segment_db.infrastructure.config import get_config


def _run(db: Database, script: str) -> list[str]:
    stdout = io.StringIO()
    run_shell(db, io.StringIO(script), stdout)
    return [line for line in stdout.getvalue().replace(PROMPT, "").split("\n") if line]


@pytest.mark.integration
class TestShell:
    """Tests for run_shell."""

    def test_transcript(self, db: Database) -> None:
        lines = _run(
            db,
            "INSERT INTO users VALUES (1, 'Alice', 'a')\n"
            "INSERT INTO users VALUES (2, 'Bob, Jr.', 'b')\n"
            "SELECT name, status FROM users\n"
            "exit\n"
            "SELECT * FROM users\n",
        )

        assert lines == [
            "OK: 1 row inserted",
            "OK: 1 row inserted",
            "Alice, a",
            "Bob, Jr., b",
        ]

    def test_errors_do_not_stop_the_loop(self, db: Database) -> None:
        lines = _run(
            db,
            "SELECT * FROM ghosts\n"
            "INSERT INTO users VALUES (1)\n"
            "INSERT INTO users VALUES (1, 'Alice', 'a')\n"
            "EXIT\n",
        )

        assert lines == [
            "Error: Table ghosts does not exist",
            "Error: Wrong number of values for table users: expected 3, got 1",
            "OK: 1 row inserted",
        ]

    def test_parse_error(self, db: Database) -> None:
        lines = _run(db, "FROBNICATE users\nEXIT\n")

        assert len(lines) == 1
        assert lines[0].startswith("Error: Parse error:")

    def test_blank_lines_ignored(self, db: Database) -> None:
        stdout = io.StringIO()

        executed = run_shell(db, io.StringIO("\n   \nEXIT\n"), stdout)

        assert executed == 0
        assert stdout.getvalue() == PROMPT * 3

    def test_end_of_input_ends_session(self, db: Database) -> None:
        executed = run_shell(
            db, io.StringIO("INSERT INTO users VALUES (1, 'Alice', 'a')\n"), io.StringIO()
        )

        assert executed == 1

    def test_delete_message(self, db: Database) -> None:
        lines = _run(
            db,
            "INSERT INTO users VALUES (1, 'Alice', 'a')\n"
            "DELETE FROM users WHERE id = 1\n"
            "SELECT * FROM users\n",
        )

        assert lines == ["OK: 1 row inserted", "OK: delete successful"]


@pytest.mark.integration
class TestMain:
    """Tests for the console entry point."""

    @pytest.fixture(autouse=True)
    def _no_global_setup(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Keep structlog and OpenTelemetry process-wide state untouched."""
        monkeypatch.setattr(shell, "setup_logging", lambda **kwargs: None)
        monkeypatch.setattr(shell, "setup_tracing", lambda **kwargs: None)

    def test_main_runs_shell(
        self,
        temp_dir: Path,
        schema_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(
            "sys.stdin", io.StringIO("INSERT INTO users VALUES (1, 'Alice', 'a')\nEXIT\n")
        )

        code = main(["--schema", str(schema_file), "--data-dir", str(temp_dir / "data")])

        assert code == 0
        assert "OK: 1 row inserted" in capsys.readouterr().out
        assert (temp_dir / "data" / "shop" / "users" / "1.csv").exists()

    def test_main_invalid_schema(
        self, temp_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        schema_file = temp_dir / "bad.json"
        schema_file.write_text(json.dumps({"name": "x"}), encoding="utf-8")

        code = main(["--schema", str(schema_file), "--data-dir", str(temp_dir)])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_main_invalid_settings(
        self,
        schema_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("SEGMENT_DB_OBSERVABILITY__LOG_LEVEL", "LOUD")
        get_config.cache_clear()
        try:
            code = main(["--schema", str(schema_file)])
        finally:
            get_config.cache_clear()

        assert code == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: invalid configuration")
        assert "log_level" in err

    def test_main_data_dir_is_a_file(
        self,
        temp_dir: Path,
        schema_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        code = main(["--schema", str(schema_file), "--data-dir", str(blocker)])

        assert code == 1
        assert "Error:" in capsys.readouterr().err
        assert blocker.read_text(encoding="utf-8") == "not a directory"
