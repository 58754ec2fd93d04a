# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi

"""
Public API for the flowdi DI system.
"""

from __future__ import annotations

from flowdi.di.builder import ContainerBuilder
from flowdi.di.config import ContainerSettings, Lifetime
from flowdi.di.container import Container
from flowdi.di.disposal import dispose_instance, has_dispose_capability
from flowdi.di.errors import (
    CircularDependencyError,
    ContainerDisposedError,
    DIError,
    DisposalError,
    ServiceCreationError,
    ServiceNotRegisteredError,
    UnknownScopeError,
)
from flowdi.di.hooks import ContainerHooks
from flowdi.di.protocols import (
    ContainerModuleProtocol,
    ContainerProtocol,
    DisposableProtocol,
    ServiceFactory,
)
from flowdi.di.registration import ServiceEntry, ServiceMetadata
from flowdi.di.tokens import (
    Token,
    TokenExistsError,
    TokenRegistry,
    create_string_token,
    create_token,
    create_unique_token,
    global_token_registry,
)

__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerBuilder",
    "ContainerDisposedError",
    "ContainerHooks",
    "ContainerModuleProtocol",
    "ContainerProtocol",
    "ContainerSettings",
    "DIError",
    "DisposableProtocol",
    "DisposalError",
    "Lifetime",
    "ServiceCreationError",
    "ServiceEntry",
    "ServiceFactory",
    "ServiceMetadata",
    "ServiceNotRegisteredError",
    "Token",
    "TokenExistsError",
    "TokenRegistry",
    "UnknownScopeError",
    "create_string_token",
    "create_token",
    "create_unique_token",
    "dispose_instance",
    "global_token_registry",
    "has_dispose_capability",
]
