"""
Protocol definitions for the flowdi DI system.

This module contains the capability shapes the container consumes and
exposes: factories, disposable services, and the container itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Hashable
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from flowdi.di.registration import ServiceMetadata

T = TypeVar("T")

# A factory receives the owning container and returns the instance,
# either directly or as an awaitable
ServiceFactory = Callable[["ContainerProtocol"], T | Awaitable[T]]


@runtime_checkable
class DisposableProtocol(Protocol):
    """Protocol for services that need cleanup.

    ``dispose`` may be a plain method or a coroutine function. Detection is
    structural, see ``flowdi.di.disposal.has_dispose_capability``.
    """

    def dispose(self) -> Awaitable[None] | None:
        """Release resources held by the service."""
        ...


class ContainerProtocol(Protocol):
    """Protocol for a container node as seen by factories and builders."""

    @property
    def parent(self) -> ContainerProtocol | None:
        """The container that created this scope, or None at the root."""
        ...

    @property
    def is_disposed(self) -> bool:
        ...

    def register(
        self,
        token: Hashable,
        factory: ServiceFactory[Any],
        scope: Any = None,
        *,
        metadata: ServiceMetadata | None = None,
        tags: Any = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Register a factory for a token."""
        ...

    async def resolve(self, token: Hashable) -> Any:
        """Resolve a service by token."""
        ...

    def has(self, token: Hashable) -> bool:
        ...

    def get_tokens(self) -> list[Hashable]:
        ...

    def create_scope(self) -> ContainerProtocol:
        """Create a child scope."""
        ...

    async def dispose(self) -> None:
        """Dispose the container, its scopes, and its cached services."""
        ...


@runtime_checkable
class ContainerModuleProtocol(Protocol):
    """A unit of registrations applied through a builder."""

    def configure(self, builder: Any) -> None:
        ...
