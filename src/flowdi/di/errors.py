# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Error classes for the flowdi DI system.

This module contains specialized error classes for the dependency injection system,
providing detailed error messages and context for DI-related failures.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any, Final

from flowdi.errors.base import ErrorCategory, ErrorCode, ErrorSeverity, FlowError

# Prefix for all DI error codes
ERROR_CODE_PREFIX: Final[str] = "DI"

DI: Final = ErrorCategory.get_or_create("DI")

DI_ERROR: Final = ErrorCode.get_or_create(f"{ERROR_CODE_PREFIX}_ERROR", DI)
DI_CONTAINER_DISPOSED: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_CONTAINER_DISPOSED", DI, DI_ERROR
)
DI_SERVICE_NOT_FOUND: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_SERVICE_NOT_FOUND", DI, DI_ERROR
)
DI_UNKNOWN_SCOPE: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_UNKNOWN_SCOPE", DI, DI_ERROR
)
DI_SERVICE_CREATION: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_SERVICE_CREATION", DI, DI_ERROR
)
DI_CIRCULAR_DEPENDENCY: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_CIRCULAR_DEPENDENCY", DI, DI_ERROR
)
DI_DISPOSAL: Final = ErrorCode.get_or_create(
    f"{ERROR_CODE_PREFIX}_DISPOSAL", DI, DI_ERROR
)


def token_name(token: Hashable) -> str:
    """Readable name for a token: class name, token name, or ``str()``."""
    if isinstance(token, type):
        return token.__name__
    return str(token)


class DIError(FlowError):
    """Base class for all DI-related errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = DI_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        **context: Any,
    ) -> None:
        """Initialize a DI error.

        Args:
            message: Human-readable error message
            code: Error code within the DI category
            severity: How severe this error is
            **context: Additional context information
        """
        super().__init__(message=message, code=code, severity=severity, context=context)


class ContainerDisposedError(DIError):
    """Raised when an operation is attempted on a disposed container or scope."""

    def __init__(self, operation: str, **context: Any) -> None:
        self.operation = operation
        super().__init__(
            message=f"Cannot {operation} on disposed container",
            code=DI_CONTAINER_DISPOSED,
            operation=operation,
            **context,
        )


class ServiceNotRegisteredError(DIError):
    """Raised when resolution reaches the root without finding a registration."""

    def __init__(self, token: Hashable, **context: Any) -> None:
        self.token = token
        super().__init__(
            message=f"Service '{token_name(token)}' not registered",
            code=DI_SERVICE_NOT_FOUND,
            token=token_name(token),
            **context,
        )


class UnknownScopeError(DIError):
    """Raised when an entry names a lifetime the container does not recognize."""

    def __init__(self, scope: Any, token: Hashable, **context: Any) -> None:
        self.scope = scope
        self.token = token
        super().__init__(
            message=f"Unknown scope: {scope!s} (service '{token_name(token)}')",
            code=DI_UNKNOWN_SCOPE,
            scope=str(scope),
            token=token_name(token),
            **context,
        )


class ServiceCreationError(DIError):
    """Raised when a factory fails while creating a service instance."""

    def __init__(
        self, token: Hashable, original_error: BaseException, **context: Any
    ) -> None:
        self.token = token
        self.original_error = original_error
        super().__init__(
            message=f"Failed to create service '{token_name(token)}': {original_error}",
            code=DI_SERVICE_CREATION,
            token=token_name(token),
            error_type=type(original_error).__name__,
            **context,
        )
        self.__cause__ = original_error


class CircularDependencyError(DIError):
    """Raised when a factory requires, directly or not, the service it is creating."""

    def __init__(self, dependency_chain: Sequence[Hashable], **context: Any) -> None:
        names = [token_name(token) for token in dependency_chain]
        self.dependency_chain = list(dependency_chain)

        # The cycle starts at the first occurrence of the repeated token
        start = names.index(names[-1]) if names else 0
        cycle = names[start:]
        super().__init__(
            message=f"Circular dependency detected: {' -> '.join(cycle)}",
            code=DI_CIRCULAR_DEPENDENCY,
            dependency_chain=names,
            circular_dependency=cycle,
            **context,
        )


class DisposalError(DIError):
    """Raised after teardown when one or more instances failed to dispose.

    Teardown always runs to completion; ``errors`` holds every failure seen
    in the node and its descendants.
    """

    def __init__(self, errors: Sequence[BaseException], **context: Any) -> None:
        self.errors = list(errors)
        super().__init__(
            message=f"{len(self.errors)} service(s) failed to dispose: "
            + "; ".join(str(error) for error in self.errors),
            code=DI_DISPOSAL,
            failure_count=len(self.errors),
            **context,
        )
