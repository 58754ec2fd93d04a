# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Fluent container builder.

The builder only records registrations; ``build()`` replays them onto a
fresh container through ``Container.register``.

Example:
    ```python
    container = (
        ContainerBuilder.create()
        .singleton("config", load_config)
        .scoped("session", open_session)
        .with_tags("session", ["db"])
        .use_module(AuditModule())
        .build()
    )
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flowdi.di.config import Lifetime
from flowdi.di.container import Container

if TYPE_CHECKING:
    from flowdi.di.protocols import ContainerModuleProtocol, ServiceFactory


@dataclass
class _BuilderRegistration:
    token: Hashable
    factory: ServiceFactory[Any]
    scope: Lifetime
    tags: frozenset[str] | None = None
    extra: dict[str, Any] | None = None


class ContainerBuilder:
    """Collects registrations and modules, then builds a configured container."""

    def __init__(self) -> None:
        self._registrations: list[_BuilderRegistration] = []
        self._modules: list[ContainerModuleProtocol] = []
        self._container_factory: Callable[[], Container] | None = None

    @classmethod
    def create(cls) -> ContainerBuilder:
        return cls()

    def singleton(self, token: Hashable, factory: ServiceFactory[Any]) -> ContainerBuilder:
        return self._add_registration(token, factory, Lifetime.SINGLETON)

    def transient(self, token: Hashable, factory: ServiceFactory[Any]) -> ContainerBuilder:
        return self._add_registration(token, factory, Lifetime.TRANSIENT)

    def scoped(self, token: Hashable, factory: ServiceFactory[Any]) -> ContainerBuilder:
        return self._add_registration(token, factory, Lifetime.SCOPED)

    def with_tags(self, token: Hashable, tags: Iterable[str]) -> ContainerBuilder:
        """Attach tags to the most recent registration of ``token``."""
        registration = self._find_registration(token)
        if registration is not None:
            registration.tags = frozenset(tags)
        return self

    def with_metadata(self, token: Hashable, extra: dict[str, Any]) -> ContainerBuilder:
        """Attach free-form metadata to the most recent registration of ``token``."""
        registration = self._find_registration(token)
        if registration is not None:
            registration.extra = dict(extra)
        return self

    def use_module(self, module: ContainerModuleProtocol) -> ContainerBuilder:
        self._modules.append(module)
        return self

    def use_container(self, factory: Callable[[], Container]) -> ContainerBuilder:
        """Build into the container ``factory`` returns instead of a default one."""
        self._container_factory = factory
        return self

    def build(self) -> Container:
        """Create the container, apply registrations in order, then modules."""
        container = self._create_container()
        for registration in self._registrations:
            container.register(
                registration.token,
                registration.factory,
                registration.scope,
                tags=registration.tags,
                extra=registration.extra,
            )
        for module in self._modules:
            module.configure(_ModuleBuilderProxy(container))
        return container

    def _create_container(self) -> Container:
        if self._container_factory is not None:
            return self._container_factory()
        return Container()

    def _add_registration(
        self, token: Hashable, factory: ServiceFactory[Any], scope: Lifetime
    ) -> ContainerBuilder:
        self._registrations.append(_BuilderRegistration(token, factory, scope))
        return self

    def _find_registration(self, token: Hashable) -> _BuilderRegistration | None:
        for registration in reversed(self._registrations):
            if registration.token == token:
                return registration
        return None


class _ModuleBuilderProxy:
    """Builder handed to modules; registers straight into the built container."""

    def __init__(self, container: Container) -> None:
        self._container = container

    def singleton(self, token: Hashable, factory: ServiceFactory[Any]) -> _ModuleBuilderProxy:
        self._container.register(token, factory, Lifetime.SINGLETON)
        return self

    def transient(self, token: Hashable, factory: ServiceFactory[Any]) -> _ModuleBuilderProxy:
        self._container.register(token, factory, Lifetime.TRANSIENT)
        return self

    def scoped(self, token: Hashable, factory: ServiceFactory[Any]) -> _ModuleBuilderProxy:
        self._container.register(token, factory, Lifetime.SCOPED)
        return self

    def use_module(self, module: ContainerModuleProtocol) -> _ModuleBuilderProxy:
        module.configure(self)
        return self

    def build(self) -> Container:
        return self._container
