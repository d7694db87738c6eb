"""Interactive command shell.

Reads one command per line, executes it and prints the outcome:

    Enter command: INSERT INTO users VALUES (1, 'Alice', 'a')
    OK: 1 row inserted
    Enter command: SELECT name, status FROM users
    Alice, a
    Enter command: EXIT

Blank lines are ignored. ``EXIT`` (any case) or end of input ends the
session. A failing command prints ``Error: <reason>`` and the loop keeps
going.

Usage:
    segment-db                      # interactive shell
    segment-db --schema s.json      # explicit schema file
    segment-db --serve              # REST API instead of the shell
"""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from pydantic import ValidationError

from segment_db.adapters.inbound.rest_api import run_server
from segment_db.application import Database, ExecutionResult
from segment_db.domain.errors import SegmentDbError
from segment_db.infrastructure.config import Config, StorageConfig, get_config
from segment_db.infrastructure.logging import get_logger, setup_logging
from segment_db.infrastructure.metrics import setup_metrics
from segment_db.infrastructure.tracing import setup_tracing

logger = get_logger(__name__)

PROMPT = "Enter command: "
EXIT_COMMAND = "EXIT"


def format_result(result: ExecutionResult) -> list[str]:
    """Render a result as the lines printed by the shell."""
    if not result.success:
        return [f"Error: {result.message}"]
    if result.columns or result.rows:
        return [", ".join(row.values) for row in result.rows]
    return [result.message]


def run_shell(db: Database, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    """Run the read-execute-print loop until EXIT or end of input.

    Args:
        db: A started database.
        stdin: Input stream (default: sys.stdin).
        stdout: Output stream (default: sys.stdout).

    Returns:
        Number of commands executed.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    executed = 0

    while True:
        stdout.write(PROMPT)
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write("\n")
            break

        text = line.strip()
        if not text:
            continue
        if text.upper() == EXIT_COMMAND:
            break

        result = db.execute(text)
        executed += 1
        for out in format_result(result):
            stdout.write(out + "\n")

    stdout.flush()
    return executed


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segment-db",
        description="File-backed CSV segment store",
    )
    parser.add_argument("--schema", help="Schema JSON file (overrides config)")
    parser.add_argument("--data-dir", help="Directory holding the database root")
    parser.add_argument(
        "--no-primary-keys",
        action="store_true",
        help="Store rows without the synthetic primary key column",
    )
    parser.add_argument("--serve", action="store_true", help="Run the REST API")
    return parser


def _apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Return ``config`` with the command line storage overrides applied."""
    overrides: dict = {}
    if args.schema:
        overrides["schema_file"] = args.schema
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.no_primary_keys:
        overrides["primary_keys"] = False
    if not overrides:
        return config
    storage = StorageConfig.model_validate({**config.storage.model_dump(), **overrides})
    return config.model_copy(update={"storage": storage})


def _fail(reason: object) -> int:
    logger.error("startup_failed", error=str(reason))
    sys.stderr.write(f"Error: {reason}\n")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Console entry point.

    Returns:
        Process exit code. Invalid settings or a database that cannot be
        laid out give 1.
    """
    args = _build_arg_parser().parse_args(argv)
    try:
        config = _apply_args(get_config(), args)
    except ValidationError as e:
        return _fail(f"invalid configuration: {e}")

    setup_logging(
        level=config.observability.log_level,
        log_format=config.observability.log_format,
    )
    setup_tracing(
        service_name=config.observability.otel_service_name,
        otlp_endpoint=config.observability.otel_endpoint,
    )
    if args.serve:
        setup_metrics(port=config.server.metrics_port)

    try:
        db = Database.from_config(config)
        db.start()
    except (SegmentDbError, OSError) as e:
        return _fail(e)

    try:
        if args.serve:
            run_server(db, host=config.server.host, port=config.server.port)
        else:
            run_shell(db)
    finally:
        db.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
