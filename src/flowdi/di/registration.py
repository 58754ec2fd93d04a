# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Service registration module for the flowdi container.

This module defines the metadata and entry records a container keeps for
every registered token.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable, Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowdi.di.config import Lifetime
from flowdi.di.protocols import ServiceFactory

T = TypeVar("T")

# Marks an entry that holds no cached instance (None is a valid instance)
_UNSET: Any = object()


class ServiceMetadata(BaseModel):
    """Lifetime and descriptive data attached to a registration."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    scope: Any = Lifetime.SINGLETON
    tags: frozenset[str] | None = None
    extra: dict[str, Any] | None = Field(default=None)

    @field_validator("scope", mode="before")
    @classmethod
    def normalize_scope(cls, value: Any) -> Lifetime | Any:
        return Lifetime.normalize(value)

    @field_validator("tags", mode="before")
    @classmethod
    def collect_tags(cls, value: Any) -> frozenset[str] | None:
        if value is None:
            return None
        if isinstance(value, str):
            return frozenset((value,))
        if isinstance(value, Iterable):
            return frozenset(value)
        return value

    def has_tag(self, tag: str) -> bool:
        return self.tags is not None and tag in self.tags

    def duplicate(self) -> ServiceMetadata:
        """Copy for a child scope; the extra mapping is not shared."""
        extra = dict(self.extra) if self.extra is not None else None
        return self.model_copy(update={"extra": extra})


class ServiceEntry(Generic[T]):
    """Represents a service registration owned by one container.

    An entry holds the factory, its metadata, and at most one cached
    instance. While a cached lifetime is being created, ``pending`` holds
    the in-flight task so concurrent resolvers share one factory call.
    """

    __slots__ = ("token", "factory", "metadata", "_instance", "pending")

    def __init__(
        self,
        token: Hashable,
        factory: ServiceFactory[T],
        metadata: ServiceMetadata,
    ) -> None:
        """Initialize a service entry.

        Args:
            token: The token this entry is registered under
            factory: Callable receiving the owning container, returning
                the instance or an awaitable of it
            metadata: Lifetime and descriptive metadata
        """
        self.token = token
        self.factory = factory
        self.metadata = metadata
        self._instance: T = _UNSET
        self.pending: asyncio.Task[T] | None = None

    @property
    def scope(self) -> Lifetime | Any:
        return self.metadata.scope

    @property
    def has_instance(self) -> bool:
        return self._instance is not _UNSET

    @property
    def instance(self) -> T:
        """The cached instance.

        Raises:
            AttributeError: If nothing is cached
        """
        if self._instance is _UNSET:
            raise AttributeError(f"No cached instance for {self.token!r}")
        return self._instance

    @instance.setter
    def instance(self, value: T) -> None:
        self._instance = value

    def copy_for_scope(self) -> ServiceEntry[T]:
        """A fresh, uncached entry sharing the factory, for a child scope."""
        return ServiceEntry(self.token, self.factory, self.metadata.duplicate())

    def __repr__(self) -> str:
        return (
            f"ServiceEntry(token={self.token!r}, scope={self.metadata.scope!s}, "
            f"cached={self.has_instance})"
        )
