# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Configuration for the flowdi DI system.

Defines the service lifetimes and the container settings, which load from
``FLOWDI_*`` environment variables via pydantic-settings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Lifetime(str, Enum):
    """Defines how long a service instance lives.

    Values:
        SINGLETON: One instance per owning container, shared with descendants
        TRANSIENT: New instance every time it's requested
        SCOPED: One instance per scope; transient when resolved at the root
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"
    SCOPED = "scoped"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def normalize(cls, value: Any) -> Lifetime | Any:
        """Map known lifetime names onto the enum, leaving anything else as is."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                return value
        return value


class ContainerSettings(BaseSettings):
    """Runtime options shared by a container and its scopes."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWDI_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    default_scope: Lifetime = Field(
        default=Lifetime.SINGLETON,
        description="Lifetime used when a registration names none",
    )
    detect_cycles: bool = Field(
        default=True,
        description="Fail fast when a factory requires the service it is creating",
    )
    log_resolutions: bool = Field(
        default=False, description="Emit a debug log line for every resolution"
    )

    @classmethod
    def load(cls) -> ContainerSettings:
        """Load container settings from environment variables or defaults."""
        return cls()
