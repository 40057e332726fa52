"""
Structured logging configuration.

This module provides console and JSON-formatted logging with support for:
- Contextual fields (connection_id, user_id, device_class, etc.)
- A human-readable console handler for development
- A JSON file handler for errors
"""

import json
import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from shopchat.constants import MAX_LOG_SIZE_BYTES
from shopchat.settings import app_settings

# Context variable for storing connection-specific logging context
log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "connection_label",
    }
)


def set_log_context(**kwargs: Any) -> None:
    """
    Set contextual fields for structured logging.

    Each WebSocket connection runs in its own task, so fields set here are
    attached to every message logged while that connection is handled.

    Args:
        **kwargs: Key-value pairs to add to log context.

    Example:
        >>> set_log_context(connection_id="5f0c...", user_id="1d7d...")
        >>> logger.info("Registering connection")
    """
    current = dict(log_context.get())
    current.update(kwargs)
    log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """
    Get current log context.

    Returns:
        Dictionary of contextual log fields.
    """
    return log_context.get()


def clear_log_context() -> None:
    """Clear the log context (useful when a connection closes)."""
    log_context.set({})


class StructuredJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs standard fields (timestamp, level, logger, message), the
    contextual fields from log_context, extra fields passed to the logger
    and exception information when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
        }

        context = get_log_context()
        if context:
            log_data.update(context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        json_str = json.dumps(log_data, default=str)
        if len(json_str) > MAX_LOG_SIZE_BYTES:
            log_data["message"] = (
                log_data["message"][: MAX_LOG_SIZE_BYTES - 1000]
                + "... [TRUNCATED]"
            )
            json_str = json.dumps(log_data, default=str)

        return json_str


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for console output (non-JSON).

    Uses different format strings based on log level for better readability
    during development.
    """

    INFO_FMT = "%(asctime)s - [%(connection_label)s] %(levelname)s: %(message)s"
    ERROR_FMT = "%(asctime)s - [%(connection_label)s] %(levelname)s: %(module)s.%(funcName)s:%(lineno)d - %(message)s"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._formatters = {
            logging.INFO: logging.Formatter(
                self.INFO_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.WARNING: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.ERROR: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
            logging.DEBUG: logging.Formatter(
                self.ERROR_FMT, datefmt="%Y-%m-%d %H:%M:%S"
            ),
        }

    def format(self, record: logging.LogRecord) -> str:
        # Short connection id keeps console lines readable
        connection_id = get_log_context().get("connection_id", "")
        record.connection_label = connection_id[:8] or "-"

        formatter = self._formatters.get(
            record.levelno, self._formatters[logging.INFO]
        )
        return formatter.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure logging with console and JSON error-file output.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    # Console handler - 'json' for log collectors, 'human' for development
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    if app_settings.LOG_CONSOLE_FORMAT.lower() == "human":
        console_handler.setFormatter(HumanReadableFormatter())
    else:
        console_handler.setFormatter(StructuredJSONFormatter())
    logger.addHandler(console_handler)

    try:
        Path(app_settings.LOG_FILE_PATH).parent.mkdir(
            parents=True, exist_ok=True
        )
        file_handler = logging.FileHandler(app_settings.LOG_FILE_PATH)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(StructuredJSONFormatter())
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not create file handler: {e}")

    # Disable logging during pytest runs
    if sys.argv[0].split("/")[-1] in ["pytest"]:
        logging.disable(logging.ERROR)

    return logger


# Create default logger instance
logger = setup_logging()
