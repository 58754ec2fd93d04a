# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Configuration for the flowdi logging system.

Settings are environment-driven through pydantic-settings.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Level names accepted by flowdi loggers and settings."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_stdlib_level(self) -> int:
        return logging.getLevelNamesMapping()[self.value]

    @classmethod
    def from_string(cls, value: str) -> LogLevel:
        """Parse a level name case-insensitively.

        Raises:
            ValueError: If ``value`` names no known level
        """
        try:
            return cls(value.strip().upper())
        except ValueError:
            choices = ", ".join(cls.__members__)
            raise ValueError(f"Invalid log level: {value!r} (expected one of {choices})") from None


class LoggingSettings(BaseSettings):
    """
    Configuration settings for the flowdi logging system.
    Loads from ``FLOWDI_LOGGING_*`` environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWDI_LOGGING_",
        extra="ignore",
        case_sensitive=False,
    )

    level: str = Field(default=LogLevel.WARNING.value, description="Log level")
    json_format: bool = Field(default=False, description="Enable JSON log format")
    include_timestamp: bool = Field(
        default=True, description="Include timestamp in logs"
    )
    console_enabled: bool = Field(default=True, description="Enable console logging")

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> str:
        """Validate that the level is a valid log level."""
        if isinstance(v, LogLevel):
            return v.value
        if not isinstance(v, str):
            raise ValueError(f"Log level must be a string, got {type(v).__name__}")
        return LogLevel.from_string(v).value

    @classmethod
    def load(cls) -> LoggingSettings:
        """Load logging settings from environment variables or defaults."""
        return cls()
