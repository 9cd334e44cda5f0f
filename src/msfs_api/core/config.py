"""Configuration loading for the MSFS API.

Configuration lives in a YAML file. Missing files and missing keys fall back
to defaults, so an empty config is a valid config.

Example config/msfs_api.yaml:
    app_name: "MSFS API"
    connection:
      url: "ws://127.0.0.1:51128"
      retries: 3
      retry_interval_s: 5
    requests:
      timeout_s: 30
      write_cleanup_delay_s: 0.5
    airports:
      enabled: true
      cache_path: "~/.cache/msfs_api/airport.db.gz"

Typical usage:
    from msfs_api.core.config import load_config

    config = load_config()
    print(config.connection.url)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from msfs_api.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    Path("config/msfs_api.yaml"),
    Path(__file__).parent.parent.parent.parent / "config" / "msfs_api.yaml",
]

DEFAULT_CACHE_PATH = Path.home() / ".cache" / "msfs_api" / "airport.db.gz"


@dataclass
class ConnectionConfig:
    """Simulator connection settings.

    Attributes:
        url: WebSocket URL of the simulator bridge.
        retries: Number of extra connection attempts after the first failure.
        retry_interval_s: Delay between attempts in seconds.
    """

    url: str = "ws://127.0.0.1:51128"
    retries: int = 0
    retry_interval_s: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionConfig":
        """Create from dictionary."""
        return cls(
            url=data.get("url", cls.url),
            retries=int(data.get("retries", cls.retries)),
            retry_interval_s=float(data.get("retry_interval_s", cls.retry_interval_s)),
        )


@dataclass
class IdConfig:
    """Protocol ID range settings."""

    first_id: int = 1
    ceiling: int = 900

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IdConfig":
        """Create from dictionary."""
        return cls(
            first_id=int(data.get("first_id", cls.first_id)),
            ceiling=int(data.get("ceiling", cls.ceiling)),
        )


@dataclass
class RequestConfig:
    """Request correlation settings.

    Attributes:
        timeout_s: Seconds to wait for a response (None waits forever).
        write_cleanup_delay_s: Seconds a write keeps its ID before cleanup.
    """

    timeout_s: float | None = 30.0
    write_cleanup_delay_s: float = 0.5

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RequestConfig":
        """Create from dictionary."""
        timeout = data.get("timeout_s", cls.timeout_s)
        return cls(
            timeout_s=float(timeout) if timeout is not None else None,
            write_cleanup_delay_s=float(
                data.get("write_cleanup_delay_s", cls.write_cleanup_delay_s)
            ),
        )


@dataclass
class AirportConfig:
    """Airport database settings.

    Attributes:
        enabled: Build or load the airport database on connect.
        cache_path: Location of the compressed airport snapshot.
        default_radius_nm: Radius used by NEARBY AIRPORTS without argument.
        detail_timeout_s: Per-event timeout while fetching airport details.
        dedicated_connection: Use a second transport for facility requests.
    """

    enabled: bool = True
    cache_path: Path = DEFAULT_CACHE_PATH
    default_radius_nm: float = 200.0
    detail_timeout_s: float | None = 30.0
    dedicated_connection: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AirportConfig":
        """Create from dictionary."""
        cache_path = data.get("cache_path")
        timeout = data.get("detail_timeout_s", cls.detail_timeout_s)
        return cls(
            enabled=bool(data.get("enabled", cls.enabled)),
            cache_path=Path(cache_path).expanduser() if cache_path else DEFAULT_CACHE_PATH,
            default_radius_nm=float(data.get("default_radius_nm", cls.default_radius_nm)),
            detail_timeout_s=float(timeout) if timeout is not None else None,
            dedicated_connection=bool(
                data.get("dedicated_connection", cls.dedicated_connection)
            ),
        )


@dataclass
class LoggingConfig:
    """Logging settings. An empty file disables the log file."""

    level: str = "INFO"
    file: str | None = None
    max_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", cls.level)).upper(),
            file=data.get("file") or None,
            max_size_mb=int(data.get("max_size_mb", cls.max_size_mb)),
            backup_count=int(data.get("backup_count", cls.backup_count)),
        )


@dataclass
class ApiConfig:
    """Complete MSFS API configuration."""

    app_name: str = "MSFS API"
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    ids: IdConfig = field(default_factory=IdConfig)
    requests: RequestConfig = field(default_factory=RequestConfig)
    airports: AirportConfig = field(default_factory=AirportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    simvars: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiConfig":
        """Create from a parsed YAML dictionary.

        Raises:
            ConfigError: If a section has the wrong shape.
        """
        for section in ("connection", "ids", "requests", "airports", "logging", "simvars"):
            if not isinstance(data.get(section, {}), dict):
                raise ConfigError(f"Configuration key is not a section: {section}")

        return cls(
            app_name=data.get("app_name", cls.app_name),
            connection=ConnectionConfig.from_dict(data.get("connection", {})),
            ids=IdConfig.from_dict(data.get("ids", {})),
            requests=RequestConfig.from_dict(data.get("requests", {})),
            airports=AirportConfig.from_dict(data.get("airports", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
            simvars=dict(data.get("simvars", {})),
        )


def load_config(config_path: str | Path | None = None) -> ApiConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit config file. If None, default locations are
            searched and defaults are used when none exists.

    Returns:
        Parsed configuration.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if config_path is not None:
        paths = [Path(config_path)]
        if not paths[0].exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
    else:
        paths = DEFAULT_CONFIG_PATHS

    for path in paths:
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to load configuration: {e}") from e

            if not isinstance(data, dict):
                raise ConfigError(f"Configuration root must be a mapping: {path}")

            logger.info("Loaded config from: %s", path)
            return ApiConfig.from_dict(data)

    logger.debug("No config file found, using defaults")
    return ApiConfig()
