# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi

"""
Public API for the flowdi logging system.

Structured logging on top of the standard library ``logging`` module.
"""

from __future__ import annotations

from flowdi.logging.config import LoggingSettings, LogLevel
from flowdi.logging.logger import FlowLogger, StructuredFormatter, get_logger

__all__ = [
    "FlowLogger",
    "LogLevel",
    "LoggingSettings",
    "StructuredFormatter",
    "get_logger",
]
