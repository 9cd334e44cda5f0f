"""Logging setup for applications using the MSFS API.

The library itself only logs through module loggers. Applications call
setup_logging() once at startup to attach console and file handlers.

Typical usage:
    from msfs_api.core.logging_system import get_logger, setup_logging

    setup_logging(config.logging)
    log = get_logger("my_app")
    log.info("Connected")
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from msfs_api.core.config import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_loggers_cache: dict[str, logging.Logger] = {}


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger from config.

    Replaces existing root handlers, so calling it twice does not duplicate
    output.

    Args:
        config: Logging settings. Defaults to console-only INFO logging.
    """
    config = config or LoggingConfig()
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a cached logger for a component.

    Args:
        name: Logger name (typically the module name).

    Returns:
        Logger instance.
    """
    if name not in _loggers_cache:
        _loggers_cache[name] = logging.getLogger(name)
    return _loggers_cache[name]


def shutdown_logging() -> None:
    """Flush, close and detach the handlers added by setup_logging()."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
    _loggers_cache.clear()
