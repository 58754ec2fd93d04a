# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi

"""
Error handling for flowdi.
"""

from __future__ import annotations

from flowdi.errors.base import (
    INTERNAL,
    INTERNAL_ERROR,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    FlowError,
)
from flowdi.errors.registry import ErrorRegistry, registry

__all__ = [
    # Error categories and codes
    "ErrorCategory",
    "ErrorCode",
    "ErrorSeverity",
    "INTERNAL",
    "INTERNAL_ERROR",
    # Base errors
    "FlowError",
    # Registry
    "ErrorRegistry",
    "registry",
]
