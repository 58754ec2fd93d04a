# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""
Service token helpers.

Any hashable value can key a registration. ``Token`` adds a named
symbolic value compared by identity, so two tokens with the same
description stay distinct unless they come from the same interned name.
"""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

from flowdi.di.errors import DI
from flowdi.errors.base import ErrorCode, FlowError

T = TypeVar("T")

DI_TOKEN_EXISTS = ErrorCode.get_or_create("DI_TOKEN_EXISTS", DI)


class TokenExistsError(FlowError):
    """Raised when creating a token whose name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            message=f"Token '{name}' already exists in registry",
            code=DI_TOKEN_EXISTS,
            token=name,
        )


class Token(Generic[T]):
    """Opaque, identity-compared service identifier.

    The type parameter only documents the service type for readers and
    type checkers.
    """

    __slots__ = ("description",)

    def __init__(self, description: str | None = None) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Token({self.description!r})"

    def __str__(self) -> str:
        return self.description or "<anonymous token>"


# Process-wide interned tokens, the equivalent of a global symbol table
_interned: dict[str, Token] = {}
_interned_lock = threading.Lock()


def create_token(name: str) -> Token:
    """Return the interned token for ``name``; equal names yield the same token."""
    with _interned_lock:
        token = _interned.get(name)
        if token is None:
            token = _interned[name] = Token(name)
        return token


def create_string_token(name: str) -> str:
    """Plain string token. Strings compare by value."""
    return name


def create_unique_token(description: str | None = None) -> Token:
    """A fresh token that never equals any other."""
    return Token(description)


class TokenRegistry:
    """Named token store guarding against accidental duplicates."""

    def __init__(self) -> None:
        self._tokens: dict[str, Token] = {}

    def get(self, name: str) -> Token:
        """Get or create the token for ``name``."""
        token = self._tokens.get(name)
        if token is None:
            token = self._tokens[name] = create_token(name)
        return token

    def create(self, name: str) -> Token:
        """Create the token for ``name``.

        Raises:
            TokenExistsError: If ``name`` is already registered
        """
        if name in self._tokens:
            raise TokenExistsError(name)
        token = self._tokens[name] = create_token(name)
        return token

    def ensure(self, name: str) -> Token:
        return self.get(name)

    def has(self, name: str) -> bool:
        return name in self._tokens

    def delete(self, name: str) -> bool:
        return self._tokens.pop(name, None) is not None

    def clear(self) -> None:
        self._tokens.clear()

    def names(self) -> list[str]:
        return list(self._tokens)

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


# Global token registry instance
global_token_registry = TokenRegistry()
