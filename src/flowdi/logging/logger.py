# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Logger implementation for flowdi.

This module provides the default logger implementation based on Python's
standard logging module, enhanced with structured logging capabilities.
"""

from __future__ import annotations

import contextlib
import datetime
import enum
import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from flowdi.logging.config import LoggingSettings, LogLevel

if TYPE_CHECKING:
    from collections.abc import Generator

# Context variable for storing log context data
_log_context: ContextVar[dict[str, Any]] = ContextVar("flowdi_log_context", default={})

# Record attribute carrying the structured context
CONTEXT_ATTR = "flowdi_context"

# Names of stdlib loggers already configured by FlowLogger
_configured: set[str] = set()


class FlowJsonEncoder(json.JSONEncoder):
    """JSON encoder that falls back to strings for unserializable objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime.datetime | datetime.date):
            return obj.isoformat()
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if isinstance(obj, enum.Enum):
            return obj.value
        if hasattr(obj, "model_dump"):  # Pydantic v2 models
            return obj.model_dump()
        if isinstance(obj, set | frozenset | tuple):
            return list(obj)
        return str(obj)


class StructuredFormatter(logging.Formatter):
    """Formatter that supports structured logging with context data."""

    def __init__(
        self,
        json_format: bool = False,
        include_timestamp: bool = True,
    ) -> None:
        """Initialize a structured formatter.

        Args:
            json_format: Whether to format logs as JSON
            include_timestamp: Whether to include timestamps in logs
        """
        self.json_format = json_format
        self.include_timestamp = include_timestamp

        fmt = "%(name)s %(message)s [%(levelname)s]"
        if include_timestamp:
            fmt = "%(asctime)s " + fmt

        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with its structured context."""
        context: dict[str, Any] = getattr(record, CONTEXT_ATTR, None) or {}
        if self.json_format:
            return self._format_json(record, context)
        message = super().format(record)
        return self._format_text(message, context)

    def _format_json(self, record: logging.LogRecord, context: dict[str, Any]) -> str:
        log_data: dict[str, Any] = {
            "message": record.getMessage(),
            "level": record.levelname,
            "name": record.name,
            **context,
        }
        if self.include_timestamp:
            log_data["timestamp"] = self.formatTime(record, self.datefmt)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            log_data["error"] = str(record.exc_info[1])
        return json.dumps(log_data, cls=FlowJsonEncoder, ensure_ascii=False)

    def _format_text(self, message: str, context: dict[str, Any]) -> str:
        if not context:
            return message
        ctx_str = " ".join(f"{k}={self._format_value(v)}" for k, v in context.items())
        return f"{message} {ctx_str}"

    def _format_value(self, value: Any) -> str:
        if isinstance(value, str):
            # Quote strings that contain spaces
            if " " in value:
                return f'"{value}"'
            return value
        if isinstance(value, enum.Enum):
            return str(value.value)
        if isinstance(value, dict | list):
            return json.dumps(value, cls=FlowJsonEncoder)
        return str(value)


class FlowLogger:
    """Default logger implementation for flowdi.

    Wraps a standard library logger; every call may carry keyword context
    which is merged with bound context and the active ``context()`` block.
    """

    def __init__(
        self,
        name: str,
        settings: LoggingSettings | None = None,
        _logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize a new logger.

        Args:
            name: Logger name
            settings: Optional logger settings (loads from environment if None)
        """
        self.name = name
        self._settings = settings or LoggingSettings.load()
        self._bound_context: dict[str, Any] = {}

        if _logger is not None:
            # Bound copies share the already configured stdlib logger
            self._logger = _logger
        else:
            self._logger = logging.getLogger(name)
            self._configure()

    def _configure(self) -> None:
        # Configure each stdlib logger once so later loggers of the same
        # name do not reset a level set at runtime
        if self.name in _configured:
            return
        _configured.add(self.name)

        self._logger.setLevel(self._settings.level)
        if not self._settings.console_enabled:
            return

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(
            StructuredFormatter(
                json_format=self._settings.json_format,
                include_timestamp=self._settings.include_timestamp,
            )
        )
        self._logger.addHandler(console)

    def _log(
        self, level: int, msg: str, *args: Any, exc_info: Any = None, **kwargs: Any
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return

        combined_context = {**self._bound_context, **_log_context.get(), **kwargs}
        self._logger.log(
            level,
            msg,
            *args,
            exc_info=exc_info,
            extra={CONTEXT_ATTR: combined_context},
            stacklevel=3,
        )

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug message."""
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an info message."""
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning message."""
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error message."""
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a critical message."""
        self._log(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error message with the active exception's traceback."""
        self._log(logging.ERROR, msg, *args, exc_info=True, **kwargs)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return self._logger.isEnabledFor(level.to_stdlib_level())

    def set_level(self, level: LogLevel) -> None:
        """Set the log level for this logger."""
        self._logger.setLevel(level.to_stdlib_level())

    @contextlib.contextmanager
    def context(self, **kwargs: Any) -> Generator[None]:
        """
        Add context to every log emitted within this block.

        The context lives in a context variable, so it follows the
        current task across awaits.
        """
        token = _log_context.set({**_log_context.get(), **kwargs})
        try:
            yield
        finally:
            _log_context.reset(token)

    def bind(self, **kwargs: Any) -> FlowLogger:
        """Create a new logger with bound context values.

        Args:
            **kwargs: Context values to bind

        Returns:
            New logger instance sharing this logger's configuration
        """
        logger = FlowLogger(self.name, settings=self._settings, _logger=self._logger)
        logger._bound_context = {**self._bound_context, **kwargs}
        return logger

    def with_correlation_id(self, correlation_id: str) -> FlowLogger:
        """Bind a correlation ID to all logs from this logger."""
        return self.bind(correlation_id=correlation_id)


def get_logger(
    name: str,
    level: LogLevel | None = None,
    settings: LoggingSettings | None = None,
) -> FlowLogger:
    """Get a logger for the specified name.

    Args:
        name: Logger name (typically __name__)
        level: Optional log level override
        settings: Optional settings, loaded from the environment when omitted

    Returns:
        Configured logger instance
    """
    logger = FlowLogger(name, settings=settings)

    if level is not None:
        logger.set_level(level)

    return logger
