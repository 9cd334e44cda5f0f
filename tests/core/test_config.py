"""Tests for configuration loading and logging setup."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from msfs_api.core import config as config_module
from msfs_api.core.config import ApiConfig, LoggingConfig, load_config
from msfs_api.core.errors import ConfigError
from msfs_api.core.logging_system import get_logger, setup_logging, shutdown_logging


class TestLoadConfig:
    """Test YAML config loading."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        """Test that missing default files give the built-in defaults."""
        with patch.object(config_module, "DEFAULT_CONFIG_PATHS", [tmp_path / "none.yaml"]):
            config = load_config()

        assert config.app_name == "MSFS API"
        assert config.ids.ceiling == 900
        assert config.requests.timeout_s == 30.0
        assert config.airports.default_radius_nm == 200.0

    def test_load_sections(self, tmp_path: Path) -> None:
        """Test that values from every section are applied."""
        path = tmp_path / "msfs_api.yaml"
        path.write_text(
            """
app_name: "Copilot"
connection:
  url: "ws://sim:9000"
  retries: 3
  retry_interval_s: 2
requests:
  timeout_s: null
airports:
  cache_path: "~/airports.db.gz"
  default_radius_nm: 50
logging:
  level: debug
simvars:
  FUEL TOTAL QUANTITY:
    units: gallons
""",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.app_name == "Copilot"
        assert config.connection.url == "ws://sim:9000"
        assert config.connection.retries == 3
        assert config.connection.retry_interval_s == 2.0
        assert config.requests.timeout_s is None
        assert config.airports.cache_path == Path("~/airports.db.gz").expanduser()
        assert config.airports.default_radius_nm == 50.0
        assert config.logging.level == "DEBUG"
        assert "FUEL TOTAL QUANTITY" in config.simvars

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test that an empty YAML file is a valid config."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == ApiConfig()

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        """Test that an explicitly named missing file is an error."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test that malformed YAML is reported as ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("connection: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        """Test that a scalar section is rejected."""
        path = tmp_path / "bad.yaml"
        path.write_text("connection: 5\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)


class TestLogging:
    """Test logging setup."""

    def test_setup_adds_file_handler(self, tmp_path: Path) -> None:
        """Test that a log file is created when configured."""
        log_file = tmp_path / "logs" / "msfs_api.log"
        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            setup_logging(LoggingConfig(level="DEBUG", file=str(log_file)))
            get_logger("msfs_api.test").debug("hello")
            for handler in root.handlers:
                handler.flush()

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2
            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])

    def test_get_logger_is_cached(self) -> None:
        """Test that get_logger returns the same instance per name."""
        assert get_logger("msfs_api.cached") is get_logger("msfs_api.cached")

    def test_shutdown_closes_handlers(self, tmp_path: Path) -> None:
        """Test that shutdown flushes and detaches the configured handlers."""
        log_file = tmp_path / "msfs_api.log"
        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            setup_logging(LoggingConfig(level="INFO", file=str(log_file)))
            (file_handler,) = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
            get_logger("msfs_api.shutdown").info("last words")

            shutdown_logging()

            assert root.handlers == []
            assert file_handler.stream is None
            assert "last words" in log_file.read_text(encoding="utf-8")
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
