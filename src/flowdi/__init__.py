# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi

"""
flowdi: a hierarchical async dependency injection container.

Services are registered against tokens with a lifetime (singleton,
transient, or scoped), resolved asynchronously, isolated in child scopes,
and torn down children-first on disposal.
"""

from __future__ import annotations

from flowdi.di import (
    CircularDependencyError,
    Container,
    ContainerBuilder,
    ContainerDisposedError,
    ContainerHooks,
    ContainerSettings,
    DIError,
    DisposalError,
    Lifetime,
    ServiceCreationError,
    ServiceMetadata,
    ServiceNotRegisteredError,
    Token,
    TokenRegistry,
    UnknownScopeError,
    create_string_token,
    create_token,
    create_unique_token,
    global_token_registry,
    has_dispose_capability,
)
from flowdi.errors import FlowError

__version__ = "0.1.0"

__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerBuilder",
    "ContainerDisposedError",
    "ContainerHooks",
    "ContainerSettings",
    "DIError",
    "DisposalError",
    "FlowError",
    "Lifetime",
    "ServiceCreationError",
    "ServiceMetadata",
    "ServiceNotRegisteredError",
    "Token",
    "TokenRegistry",
    "UnknownScopeError",
    "create_string_token",
    "create_token",
    "create_unique_token",
    "global_token_registry",
    "has_dispose_capability",
]
