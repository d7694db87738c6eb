"""Structured logging for the segment store.

Events go through structlog to stderr, so rows printed by the shell on
stdout never interleave with them. While a command runs, its kind and
tables are bound as context variables: segment-level events such as a
rollover or a skipped segment then name the command that caused them.

Usage:
    setup_logging(level="INFO", log_format="json")
    logger = get_logger(__name__)

    with command_context("select", ["users", "orders"]):
        logger.warning("segment_skipped", segment=3)
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Sequence, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Longest command text kept in an event; an INSERT can carry a whole row.
MAX_COMMAND_CHARS = 200


def truncate_command_text(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Cap the ``command`` field of an event at ``MAX_COMMAND_CHARS``."""
    text = event_dict.get("command")
    if isinstance(text, str) and len(text) > MAX_COMMAND_CHARS:
        event_dict["command"] = text[:MAX_COMMAND_CHARS] + "..."
    return event_dict


def build_processors(log_format: str = "console", colors: bool = False) -> list[Processor]:
    """Return the processor chain for ``log_format`` ('json' or 'console')."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        truncate_command_text,
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def setup_logging(
    level: str = "WARNING",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog for the process.

    Library loggers (uvicorn, sqlglot) use stdlib logging and are sent to
    the same stream at the same level.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for one object per line, 'console' for key=value
        stream: Destination (default: sys.stderr). Console output is
            colored only when it is a terminal.
    """
    stream = stream or sys.stderr
    numeric_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level)

    colors = log_format != "json" and stream.isatty()
    structlog.configure(
        processors=build_processors(log_format, colors=colors),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


@contextmanager
def command_context(kind: str, tables: Sequence[str]) -> Iterator[None]:
    """Bind ``command_kind`` and ``command_tables`` to events logged in the block."""
    with structlog.contextvars.bound_contextvars(
        command_kind=kind, command_tables=",".join(tables)
    ):
        yield


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, optionally bound to ``initial_context``."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
