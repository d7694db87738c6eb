"""Pytest configuration and fixtures for segment_db tests."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from segment_db.application import Database
from segment_db.domain.entities import Schema
from segment_db.infrastructure.config import Config, StorageConfig
from segment_db.infrastructure.metrics import MetricsRegistry


SCHEMA_DOC = {
    "name": "shop",
    "tuples_limit": 3,
    "structure": {
        "users": ["id", "name", "status"],
        "orders": ["id", "user_id", "status"],
    },
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def schema() -> Schema:
    """Provide a two-table schema with a small segment row limit."""
    return Schema.from_dict(SCHEMA_DOC)


@pytest.fixture
def schema_file(temp_dir: Path) -> Path:
    """Write the test schema to a JSON file."""
    path = temp_dir / "schema.json"
    path.write_text(json.dumps(SCHEMA_DOC), encoding="utf-8")
    return path


@pytest.fixture
def test_config(temp_dir: Path, schema_file: Path) -> Config:
    """Provide a test configuration with temporary directories."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "data",
            schema_file=schema_file,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def db(
    schema: Schema, temp_dir: Path, metrics_registry: MetricsRegistry
) -> Generator[Database, None, None]:
    """Provide a started database with primary keys enabled."""
    with Database(schema, data_dir=temp_dir / "data", metrics=metrics_registry) as database:
        yield database


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
