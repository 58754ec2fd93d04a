# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
DI container implementation for flowdi.

This module implements the hierarchical container that provides service
registration, lifetime-scoped resolution, child scopes, and cascading disposal.
"""

from __future__ import annotations

import asyncio
import contextvars
from collections.abc import Hashable
from typing import TYPE_CHECKING, Any, TypeVar

from flowdi.di.config import ContainerSettings, Lifetime
from flowdi.di.disposal import dispose_instance
from flowdi.di.errors import (
    CircularDependencyError,
    ContainerDisposedError,
    DIError,
    DisposalError,
    ServiceCreationError,
    ServiceNotRegisteredError,
    UnknownScopeError,
    token_name,
)
from flowdi.di.hooks import ContainerHooks, maybe_await
from flowdi.di.registration import ServiceEntry, ServiceMetadata
from flowdi.logging import get_logger

if TYPE_CHECKING:
    from types import TracebackType

    from flowdi.di.protocols import ServiceFactory
    from flowdi.logging import FlowLogger

T = TypeVar("T")

# Chain of (container id, token) pairs whose factories are running in the
# current task, used to detect a factory waiting on its own result
_DI_RESOLUTION_CHAIN: contextvars.ContextVar[tuple[tuple[int, Hashable], ...]] = (
    contextvars.ContextVar("_DI_RESOLUTION_CHAIN", default=())
)


class Container:
    """Dependency Injection container node.

    This container supports three service lifetimes:
    - Singleton: One instance per owning container, shared with its scopes
    - Scoped: One instance per child scope, a fresh one per call at the root
    - Transient: New instance per resolution

    A container created directly is a root. ``create_scope()`` creates a
    child that receives uncached copies of every non-singleton entry and
    delegates any other token to its parent.

    Attributes:
        _parent: Container | None
            The container that created this scope, None at the root.
        _services: dict[Hashable, ServiceEntry]
            Entries owned by this node, keyed by token.
        _scopes: list[Container]
            Child scopes created by this node and not yet disposed.
    """

    def __init__(
        self,
        *,
        hooks: ContainerHooks | None = None,
        settings: ContainerSettings | None = None,
        logger: FlowLogger | None = None,
    ) -> None:
        """Initialize a new root container.

        Args:
            hooks: Callbacks for the extension points, shared with scopes
            settings: Container settings, loaded from the environment if omitted
            logger: Logger, ``flowdi.di.container`` if omitted
        """
        self._parent: Container | None = None
        self._hooks = hooks or ContainerHooks()
        self._settings = settings or ContainerSettings.load()
        self._logger = logger or get_logger(__name__)
        self._services: dict[Hashable, ServiceEntry[Any]] = {}
        self._scopes: list[Container] = []
        self._disposing = False
        self._disposed = False
        self._dispose_task: asyncio.Future[None] | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def children(self) -> tuple[Container, ...]:
        return tuple(self._scopes)

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def hooks(self) -> ContainerHooks:
        return self._hooks

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    def has(self, token: Hashable) -> bool:
        """Check whether this container or any ancestor registers ``token``."""
        if token in self._services:
            return True
        return self._parent is not None and self._parent.has(token)

    def get_tokens(self) -> list[Hashable]:
        """All tokens visible from this container, own tokens first."""
        tokens = dict.fromkeys(self._services)
        if self._parent is not None:
            tokens.update(dict.fromkeys(self._parent.get_tokens()))
        return list(tokens)

    def get_tokens_by_tag(self, tag: str) -> list[Hashable]:
        """Visible tokens whose registration carries ``tag``."""
        tokens = dict.fromkeys(
            token for token, entry in self._services.items() if entry.metadata.has_tag(tag)
        )
        if self._parent is not None:
            tokens.update(dict.fromkeys(self._parent.get_tokens_by_tag(tag)))
        return list(tokens)

    def get_metadata(self, token: Hashable) -> ServiceMetadata | None:
        """Metadata of the entry ``token`` resolves to, or None if unregistered."""
        entry = self._services.get(token)
        if entry is not None:
            return entry.metadata
        if self._parent is not None:
            return self._parent.get_metadata(token)
        return None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        token: Hashable,
        factory: ServiceFactory[T],
        scope: Lifetime | str | None = None,
        *,
        metadata: ServiceMetadata | None = None,
        tags: Any = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Register a factory for a token in this container.

        A later registration of the same token replaces the earlier one;
        no duplicate error is raised. Parent and child scopes are untouched.

        Example:
            ```python
            container.register("db", lambda c: Database(), Lifetime.SINGLETON)
            container.register(Session, make_session, "scoped", tags={"db"})
            ```

        Args:
            token: Any hashable service identifier
            factory: Callable receiving this container and returning the
                instance or an awaitable of it
            scope: Service lifetime, the configured default if omitted
            metadata: Complete metadata, an alternative to scope/tags/extra
            tags: Optional tag or tags for lookup
            extra: Optional free-form mapping

        Raises:
            ContainerDisposedError: If the container is disposed or being disposed
            TypeError: If ``factory`` is not callable, or ``metadata`` is
                combined with scope/tags/extra
        """
        self._check_not_disposed("register")
        if not callable(factory):
            raise TypeError(f"Factory for '{token_name(token)}' must be callable")

        entry = self._create_service_entry(token, factory, scope, metadata, tags, extra)
        self.before_register(token, entry)
        replaced = token in self._services
        self._services[token] = entry
        self.after_register(token, entry)
        self._logger.debug(
            "Registered service",
            token=token_name(token),
            scope=str(entry.scope),
            replaced=replaced,
        )

    def _create_service_entry(
        self,
        token: Hashable,
        factory: ServiceFactory[T],
        scope: Lifetime | str | None,
        metadata: ServiceMetadata | None,
        tags: Any,
        extra: dict[str, Any] | None,
    ) -> ServiceEntry[T]:
        if metadata is not None:
            if scope is not None or tags is not None or extra is not None:
                raise TypeError("Pass either metadata or scope/tags/extra, not both")
            if "scope" not in metadata.model_fields_set:
                metadata = metadata.model_copy(
                    update={"scope": self._settings.default_scope}
                )
        else:
            metadata = ServiceMetadata(
                scope=scope if scope is not None else self._settings.default_scope,
                tags=tags,
                extra=extra,
            )
        return ServiceEntry(token, factory, metadata)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(self, token: Hashable) -> Any:
        """Resolve a service instance asynchronously.

        Looks in this container first, then delegates to the parent.

        Args:
            token: The service identifier

        Returns:
            The service instance

        Raises:
            ContainerDisposedError: If the container is disposed or being disposed
            ServiceNotRegisteredError: If no container up to the root registers the token
            UnknownScopeError: If the entry names an unrecognized lifetime
            ServiceCreationError: If the factory fails
            CircularDependencyError: If a factory requires the service it is creating
        """
        self._check_not_disposed("resolve")

        custom = await self.try_custom_resolve(token)
        if custom is not None:
            return custom

        entry = self._services.get(token)
        if entry is not None:
            return await self._resolve_entry(token, entry)

        if self._parent is not None:
            return await self._parent.resolve(token)

        return await self.handle_missing_service(token)

    async def _resolve_entry(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        if self._settings.detect_cycles:
            self._check_cycle(token)

        await self.before_resolve(token, entry.metadata)

        match entry.scope:
            case Lifetime.SINGLETON:
                instance = await self._resolve_singleton(token, entry)
            case Lifetime.TRANSIENT:
                instance = await self._resolve_transient(token, entry)
            case Lifetime.SCOPED:
                instance = await self._resolve_scoped(token, entry)
            case _:
                instance = await self._resolve_custom_scope(token, entry)

        await self.after_resolve(token, instance)
        if self._settings.log_resolutions:
            self._logger.debug(
                "Resolved service", token=token_name(token), scope=str(entry.scope)
            )
        return instance

    async def _resolve_singleton(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        return await self._resolve_cached(token, entry, self.on_singleton_created)

    async def _resolve_transient(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        instance = await self._create_instance(token, entry)
        await self.on_transient_created(token, instance)
        return instance

    async def _resolve_scoped(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        # A scope-confined lifetime needs an enclosing scope
        if self._parent is None:
            return await self._resolve_transient(token, entry)
        return await self._resolve_cached(token, entry, self.on_scoped_created)

    async def _resolve_custom_scope(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        raise UnknownScopeError(entry.scope, token)

    async def _resolve_cached(self, token: Hashable, entry: ServiceEntry[T], on_created: Any) -> T:
        """Return the entry's instance, creating it at most once.

        The first caller stores the creation task on the entry before any
        suspension point; concurrent callers await that same task.
        """
        if entry.has_instance:
            return entry.instance

        if entry.pending is None:
            entry.pending = asyncio.ensure_future(
                self._create_cached(token, entry, on_created)
            )
        return await asyncio.shield(entry.pending)

    async def _create_cached(self, token: Hashable, entry: ServiceEntry[T], on_created: Any) -> T:
        try:
            instance = await self._create_instance(token, entry)
        except BaseException:
            # Let a later resolution retry
            entry.pending = None
            raise
        entry.instance = instance
        entry.pending = None
        await on_created(token, instance)
        return instance

    async def _create_instance(self, token: Hashable, entry: ServiceEntry[T]) -> T:
        chain = _DI_RESOLUTION_CHAIN.get()
        reset_token = _DI_RESOLUTION_CHAIN.set((*chain, (id(self), token)))
        try:
            return await maybe_await(entry.factory(self))
        except DIError:
            raise
        except Exception as exc:
            raise ServiceCreationError(token, exc) from exc
        finally:
            _DI_RESOLUTION_CHAIN.reset(reset_token)

    def _check_cycle(self, token: Hashable) -> None:
        chain = _DI_RESOLUTION_CHAIN.get()
        if (id(self), token) in chain:
            raise CircularDependencyError([t for _, t in chain] + [token])

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def create_scope(self) -> Container:
        """Create a child scope of this container.

        Every non-singleton entry is copied into the child uncached, so
        scoped services get one instance per child. Singletons stay here
        and are reached through parent delegation.

        Example:
            ```python
            async with container.create_scope() as scope:
                session = await scope.resolve(Session)
            # Scope is disposed here
            ```

        Raises:
            ContainerDisposedError: If the container is disposed or being disposed
        """
        self._check_not_disposed("create_scope")

        scope = self._create_scope_instance()
        scope._parent = self
        self._scopes.append(scope)
        self._copy_services_to_scope(scope)
        self.on_scope_created(scope)
        self._logger.debug(
            "Created scope", scope_id=id(scope), parent_id=id(self), copied=len(scope._services)
        )
        return scope

    def _create_scope_instance(self) -> Container:
        """Build an unlinked child; override when a subclass changes ``__init__``."""
        return type(self)(hooks=self._hooks, settings=self._settings, logger=self._logger)

    def _copy_services_to_scope(self, scope: Container) -> None:
        for token, entry in self._services.items():
            if self._should_copy_to_scope(entry):
                scope._services[token] = entry.copy_for_scope()

    def _should_copy_to_scope(self, entry: ServiceEntry[Any]) -> bool:
        # Singletons have exactly one owner; scopes reach them by delegation
        return entry.scope != Lifetime.SINGLETON

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    async def dispose(self) -> None:
        """Dispose the container, its scopes, and its cached services.

        This method:
        1. Disposes all child scopes, depth-first
        2. Waits for any in-flight instance creation on this node
        3. Disposes every cached instance that exposes ``dispose``

        Teardown always completes, even when a disposal hook fails. Calls
        made while teardown runs wait for it; calls made afterwards are
        no-ops.

        Raises:
            DisposalError: After teardown, if any instance or hook failed
        """
        if self._disposed:
            return
        if self._dispose_task is None:
            self._dispose_task = asyncio.ensure_future(self._dispose())
        await asyncio.shield(self._dispose_task)

    async def _dispose(self) -> None:
        self._disposing = True
        errors: list[BaseException] = []

        try:
            await self.before_dispose()
        except Exception as exc:
            self._logger.warning("before_dispose hook failed", error=str(exc))
            errors.append(exc)

        for scope in list(self._scopes):
            try:
                await scope.dispose()
            except DisposalError as exc:
                errors.extend(exc.errors)
            except Exception as exc:
                self._logger.warning(
                    "Error disposing scope", scope_id=id(scope), error=str(exc)
                )
                errors.append(exc)
        self._scopes.clear()

        await self._wait_for_pending_tasks()
        errors.extend(await self._dispose_services())

        self._services.clear()
        self._disposed = True
        if self._parent is not None and self in self._parent._scopes:
            self._parent._scopes.remove(self)

        try:
            await self.after_dispose()
        except Exception as exc:
            self._logger.warning("after_dispose hook failed", error=str(exc))
            errors.append(exc)
        self._logger.debug("Disposed container", container_id=id(self), failures=len(errors))

        if errors:
            raise DisposalError(errors)

    async def _wait_for_pending_tasks(self) -> None:
        pending = [entry.pending for entry in self._services.values() if entry.pending is not None]
        if pending:
            # Failures were already reported to the resolvers awaiting them
            await asyncio.gather(*pending, return_exceptions=True)

    async def _dispose_services(self) -> list[BaseException]:
        errors: list[BaseException] = []
        for token, entry in list(self._services.items()):
            if not entry.has_instance:
                continue
            try:
                await self._dispose_service(token, entry.instance)
            except Exception as exc:
                self._logger.warning(
                    "Error disposing service", token=token_name(token), error=str(exc)
                )
                errors.append(exc)
        return errors

    async def _dispose_service(self, token: Hashable, instance: Any) -> None:
        if await dispose_instance(instance):
            await self.on_service_disposed(token, instance)

    def _check_not_disposed(self, operation: str) -> None:
        if self._disposed:
            raise ContainerDisposedError(operation)
        if self._disposing:
            raise ContainerDisposedError(operation, disposing=True)

    async def __aenter__(self) -> Container:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.dispose()

    def __repr__(self) -> str:
        kind = "root" if self._parent is None else "scope"
        state = "disposed" if self._disposed else f"{len(self._services)} services"
        return f"<{type(self).__name__} {kind} {state}>"

    # ------------------------------------------------------------------
    # Extension hooks - override in subclasses or supply ContainerHooks
    # ------------------------------------------------------------------

    def before_register(self, token: Hashable, entry: ServiceEntry[Any]) -> None:
        if self._hooks.before_register is not None:
            self._hooks.before_register(token, entry)

    def after_register(self, token: Hashable, entry: ServiceEntry[Any]) -> None:
        if self._hooks.after_register is not None:
            self._hooks.after_register(token, entry)

    async def try_custom_resolve(self, token: Hashable) -> Any:
        """Return a non-None value to answer a resolution before any lookup."""
        if self._hooks.try_custom_resolve is None:
            return None
        return await maybe_await(self._hooks.try_custom_resolve(self, token))

    async def before_resolve(self, token: Hashable, metadata: ServiceMetadata) -> None:
        if self._hooks.before_resolve is not None:
            await maybe_await(self._hooks.before_resolve(token, metadata))

    async def after_resolve(self, token: Hashable, instance: Any) -> None:
        if self._hooks.after_resolve is not None:
            await maybe_await(self._hooks.after_resolve(token, instance))

    async def handle_missing_service(self, token: Hashable) -> Any:
        """Called at the root when no container registers ``token``."""
        if self._hooks.handle_missing_service is not None:
            return await maybe_await(self._hooks.handle_missing_service(self, token))
        raise ServiceNotRegisteredError(token)

    async def on_singleton_created(self, token: Hashable, instance: Any) -> None:
        if self._hooks.on_singleton_created is not None:
            await maybe_await(self._hooks.on_singleton_created(token, instance))

    async def on_transient_created(self, token: Hashable, instance: Any) -> None:
        if self._hooks.on_transient_created is not None:
            await maybe_await(self._hooks.on_transient_created(token, instance))

    async def on_scoped_created(self, token: Hashable, instance: Any) -> None:
        if self._hooks.on_scoped_created is not None:
            await maybe_await(self._hooks.on_scoped_created(token, instance))

    def on_scope_created(self, scope: Container) -> None:
        if self._hooks.on_scope_created is not None:
            self._hooks.on_scope_created(scope)

    async def before_dispose(self) -> None:
        if self._hooks.before_dispose is not None:
            await maybe_await(self._hooks.before_dispose(self))

    async def after_dispose(self) -> None:
        if self._hooks.after_dispose is not None:
            await maybe_await(self._hooks.after_dispose(self))

    async def on_service_disposed(self, token: Hashable, instance: Any) -> None:
        if self._hooks.on_service_disposed is not None:
            await maybe_await(self._hooks.on_service_disposed(token, instance))
