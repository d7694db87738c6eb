"""REST API adapter for the segment store.

This module provides a FastAPI-based REST API for executing commands
against a started Database.

Endpoints:
    POST /execute - Execute one command
    GET /health - Health check
    GET /tables - Schema name, segment row limit and table layouts

Usage:
    from segment_db.adapters.inbound.rest_api import create_app
    from segment_db.application import Database

    db = Database(schema, data_dir="/path/to/data")
    db.start()

    app = create_app(db)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000

References:
    - FastAPI documentation: https://fastapi.tiangolo.com/
"""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from segment_db import __version__
from segment_db.application import Database, ExecutionResult


class CommandRequest(BaseModel):
    """Request model for command execution."""

    command: str = Field(..., description="Command to execute")
    as_objects: bool = Field(
        False, description="Return rows as column -> value objects instead of lists"
    )


class CommandResponse(BaseModel):
    """Response model for command execution."""

    success: bool = Field(..., description="Whether the command succeeded")
    message: str = Field("", description="Status or error message")
    columns: list[str] = Field(default_factory=list, description="Column names")
    rows: list[list[str]] | list[dict[str, str]] = Field(
        default_factory=list, description="Result rows"
    )
    primary_key: int | None = Field(None, description="Primary key assigned by an insert")


class TablesResponse(BaseModel):
    """Response model for the schema description."""

    name: str = Field(..., description="Database name")
    segment_row_limit: int = Field(..., description="Max data rows per segment")
    tables: dict[str, list[str]] = Field(default_factory=dict, description="Table -> columns")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def _result_to_response(result: ExecutionResult, as_objects: bool = False) -> CommandResponse:
    """Convert ExecutionResult to CommandResponse."""
    rows: list[list[str]] | list[dict[str, str]]
    if as_objects:
        rows = [dict(zip(row.columns, row.values)) for row in result.rows]
    else:
        rows = [list(row.values) for row in result.rows]

    return CommandResponse(
        success=result.success,
        message=result.message,
        columns=result.columns,
        rows=rows,
        primary_key=result.primary_key,
    )


def create_app(db: Database) -> FastAPI:
    """Create a FastAPI application for the segment store.

    Args:
        db: The database to serve.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="Segment DB API",
        description="REST API for executing segment store commands",
        version=__version__,
    )

    def _require_started() -> None:
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy" if db.is_started else "unhealthy",
            version=__version__,
        )

    @app.get("/tables", response_model=TablesResponse, tags=["Schema"])
    def list_tables() -> TablesResponse:
        """Describe the loaded schema."""
        _require_started()
        schema = db.schema
        return TablesResponse(
            name=schema.name,
            segment_row_limit=schema.segment_row_limit,
            tables={name: list(columns) for name, columns in schema.tables.items()},
        )

    # Sync handler: FastAPI runs it on its thread pool, table locks
    # serialize concurrent commands on the same table.
    @app.post("/execute", response_model=CommandResponse, tags=["Commands"])
    def execute_command(request: CommandRequest) -> CommandResponse:
        """Execute one command.

        Args:
            request: The request containing the command text.

        Returns:
            The execution result.
        """
        _require_started()
        result = db.execute(request.command)
        return _result_to_response(result, request.as_objects)

    return app


def run_server(
    db: Database,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        db: The started database.
        host: Host to bind to.
        port: Port to bind to.
    """
    app = create_app(db)
    uvicorn.run(app, host=host, port=port)
