# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Extension hooks for the flowdi container.

A ``ContainerHooks`` instance is handed to the root container and shared by
every scope created from it. Each callback is optional; the container calls
it at a fixed point of registration, resolution, scope creation, or
disposal. Resolution and disposal callbacks may be coroutine functions.
Registration and scope-creation callbacks run synchronously.

Example:
    ```python
    created: list[object] = []
    container = Container(hooks=ContainerHooks(
        on_singleton_created=lambda token, instance: created.append(instance),
    ))
    ```
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from flowdi.di.container import Container
    from flowdi.di.registration import ServiceEntry, ServiceMetadata

T = TypeVar("T")

MaybeAwaitable = Awaitable[T] | T

# Hooks invoked from synchronous operations
_SYNC_ONLY = frozenset({"before_register", "after_register", "on_scope_created"})


@dataclass(frozen=True)
class ContainerHooks:
    """Optional callbacks invoked by the container.

    Attributes:
        before_register: ``(token, entry)`` before the entry is stored
        after_register: ``(token, entry)`` after the entry is stored
        try_custom_resolve: ``(container, token)``; a non-None result is
            returned as the resolution and nothing else runs
        before_resolve: ``(token, metadata)`` before lifetime handling
        after_resolve: ``(token, instance)`` after lifetime handling
        on_singleton_created: ``(token, instance)`` once per singleton
        on_transient_created: ``(token, instance)`` for every transient
        on_scoped_created: ``(token, instance)`` once per scope
        on_scope_created: ``(scope)`` after a child scope is populated
        before_dispose: ``(container)`` before teardown starts
        after_dispose: ``(container)`` after teardown completes
        on_service_disposed: ``(token, instance)`` after an instance is disposed
        handle_missing_service: ``(container, token)``; its result becomes
            the resolution, or it raises
    """

    before_register: Callable[[Hashable, ServiceEntry[Any]], None] | None = None
    after_register: Callable[[Hashable, ServiceEntry[Any]], None] | None = None
    try_custom_resolve: Callable[[Container, Hashable], MaybeAwaitable[Any]] | None = None
    before_resolve: Callable[[Hashable, ServiceMetadata], MaybeAwaitable[None]] | None = None
    after_resolve: Callable[[Hashable, Any], MaybeAwaitable[None]] | None = None
    on_singleton_created: Callable[[Hashable, Any], MaybeAwaitable[None]] | None = None
    on_transient_created: Callable[[Hashable, Any], MaybeAwaitable[None]] | None = None
    on_scoped_created: Callable[[Hashable, Any], MaybeAwaitable[None]] | None = None
    on_scope_created: Callable[[Container], None] | None = None
    before_dispose: Callable[[Container], MaybeAwaitable[None]] | None = None
    after_dispose: Callable[[Container], MaybeAwaitable[None]] | None = None
    on_service_disposed: Callable[[Hashable, Any], MaybeAwaitable[None]] | None = None
    handle_missing_service: Callable[[Container, Hashable], MaybeAwaitable[Any]] | None = None

    def __post_init__(self) -> None:
        for field in fields(self):
            callback = getattr(self, field.name)
            if callback is None:
                continue
            if not callable(callback):
                raise TypeError(f"Hook '{field.name}' must be callable")
            if field.name in _SYNC_ONLY and inspect.iscoroutinefunction(callback):
                raise TypeError(
                    f"Hook '{field.name}' runs synchronously and cannot be a coroutine function"
                )


async def maybe_await(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it."""
    if inspect.isawaitable(value):
        return await value
    return value
