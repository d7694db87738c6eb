"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from segment_db.infrastructure.config import (
    Config,
    ObservabilityConfig,
    ServerConfig,
    StorageConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.storage.schema_file == Path("schema.json")
        assert config.storage.primary_keys is True
        assert config.server.port == 8000
        assert config.observability.log_level == "WARNING"
        assert config.observability.log_format == "console"

    def test_custom_storage_config(self, temp_dir: Path) -> None:
        """Test custom storage configuration."""
        storage = StorageConfig(
            data_dir=temp_dir / "data",
            schema_file=temp_dir / "s.json",
            primary_keys=False,
        )

        assert storage.data_dir == temp_dir / "data"
        assert storage.primary_keys is False

    def test_ensure_directories(self, temp_dir: Path) -> None:
        """Test that ensure_directories creates the data directory."""
        config = Config(storage=StorageConfig(data_dir=temp_dir / "data"))

        config.ensure_directories()

        assert config.storage.data_dir.exists()

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(port=0)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError):
            ObservabilityConfig(log_level="LOUD")  # type: ignore

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        """Nested settings are read from SEGMENT_DB_<SECTION>__<FIELD>."""
        monkeypatch.setenv("SEGMENT_DB_STORAGE__DATA_DIR", str(temp_dir))
        monkeypatch.setenv("SEGMENT_DB_STORAGE__PRIMARY_KEYS", "false")
        monkeypatch.setenv("SEGMENT_DB_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.storage.data_dir == temp_dir
        assert config.storage.primary_keys is False
        assert config.observability.log_level == "DEBUG"


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2
