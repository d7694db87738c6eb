"""Inbound adapters for the segment store.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    Command Parser:
        - CommandParser: Parser that converts command text to typed commands
        - InsertCommand, SelectCommand, DeleteCommand: The typed commands
        - ParseError: Exception for parsing errors

The shell (``adapters.inbound.shell``) and the REST API
(``adapters.inbound.rest_api``) depend on the application layer and are
imported from their own modules.
"""

from segment_db.adapters.inbound.command_parser import (
    ColumnRef,
    Command,
    CommandParser,
    CommandType,
    DeleteCommand,
    InsertCommand,
    ParseError,
    SelectCommand,
)

__all__ = [
    "CommandParser",
    "ParseError",
    "CommandType",
    "Command",
    "ColumnRef",
    "InsertCommand",
    "SelectCommand",
    "DeleteCommand",
]
