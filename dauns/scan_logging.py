"""Centralized logging configuration for the variable scanner.

Provides:
- Console and rotating-file handlers configured through dictConfig
- Structured JSON logging support
- Per-component category loggers
"""

import json
import logging
import logging.config
import logging.handlers
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

ROOT_LOGGER_NAME = "dauns"


class LogCategory(Enum):
    """Log categories for multi-component debugging."""

    PARSER = "parser"
    CACHE = "cache"
    SCANNER = "scanner"
    WATCHER = "watcher"
    PERFORMANCE = "performance"
    MEMORY = "memory"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces one JSON object per record with consistent fields and
    the scanner-specific extras when they are attached to the record.
    """

    EXTRA_FIELDS = ("duration_ms", "operation", "file_path", "variable_count")

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log entry.
        """
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Setup global logging configuration.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR).
        quiet: Suppress console output (only ERROR level).
        verbose: Enable debug-level output.
        log_file: Explicit log file path.
        log_format: File output format ("text" or "json").
        rotation_count: Number of backup files.
        max_bytes: Max file size before rotation.

    Returns:
        Configured root scanner logger.
    """
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            ROOT_LOGGER_NAME: {
                "handlers": ["console"],
                "level": "DEBUG",
                "propagate": False,
            }
        },
    }

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if log_format == "json" else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_logger() -> logging.Logger:
    """Get the global scanner logger."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Get a logger for a specific category.

    Example:
        >>> from dauns.scan_logging import get_category_logger, LogCategory
        >>> logger = get_category_logger(LogCategory.CACHE)
        >>> logger.debug("Cache hit")
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{category.value}")
