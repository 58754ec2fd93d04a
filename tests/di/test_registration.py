"""Tests for service registration and metadata."""

from __future__ import annotations

import pytest

from flowdi.di import Container, ContainerSettings, Lifetime, ServiceMetadata
from flowdi.di.registration import ServiceEntry


class Database:
    pass


@pytest.mark.asyncio
async def test_register_and_resolve_by_class_token(container: Container) -> None:
    container.register(Database, lambda c: Database())

    assert container.has(Database)
    assert isinstance(await container.resolve(Database), Database)


@pytest.mark.asyncio
async def test_last_registration_wins(container: Container) -> None:
    container.register("greeting", lambda c: "hello")
    container.register("greeting", lambda c: "bonjour")

    assert await container.resolve("greeting") == "bonjour"
    assert container.get_tokens().count("greeting") == 1


@pytest.mark.asyncio
async def test_reregistration_drops_cached_singleton(container: Container) -> None:
    container.register("value", lambda c: 1)
    assert await container.resolve("value") == 1

    container.register("value", lambda c: 2)
    assert await container.resolve("value") == 2


def test_default_scope_is_singleton(container: Container) -> None:
    container.register("svc", lambda c: object())

    assert container.get_metadata("svc").scope is Lifetime.SINGLETON


def test_default_scope_follows_settings() -> None:
    root = Container(settings=ContainerSettings(default_scope=Lifetime.TRANSIENT))
    root.register("svc", lambda c: object())
    root.register("meta", lambda c: object(), metadata=ServiceMetadata(tags={"x"}))

    assert root.get_metadata("svc").scope is Lifetime.TRANSIENT
    assert root.get_metadata("meta").scope is Lifetime.TRANSIENT


def test_string_scopes_are_normalized(container: Container) -> None:
    container.register("a", lambda c: 1, "Transient")
    container.register("b", lambda c: 1, "scoped")

    assert container.get_metadata("a").scope is Lifetime.TRANSIENT
    assert container.get_metadata("b").scope is Lifetime.SCOPED


def test_unknown_scope_is_accepted_at_registration(container: Container) -> None:
    container.register("odd", lambda c: 1, "request")

    assert container.get_metadata("odd").scope == "request"


def test_tags_and_extra_are_stored(container: Container) -> None:
    container.register("repo", lambda c: 1, tags=["db", "io"], extra={"owner": "core"})
    container.register("cache", lambda c: 1, tags="io")

    metadata = container.get_metadata("repo")
    assert metadata.tags == frozenset({"db", "io"})
    assert metadata.extra == {"owner": "core"}
    assert container.get_tokens_by_tag("io") == ["repo", "cache"]
    assert container.get_tokens_by_tag("db") == ["repo"]


def test_metadata_cannot_be_combined_with_scope(container: Container) -> None:
    with pytest.raises(TypeError):
        container.register(
            "svc", lambda c: 1, Lifetime.TRANSIENT, metadata=ServiceMetadata()
        )


def test_factory_must_be_callable(container: Container) -> None:
    with pytest.raises(TypeError, match="must be callable"):
        container.register("svc", "not a factory")  # type: ignore[arg-type]


def test_has_and_get_tokens_include_ancestors(container: Container) -> None:
    container.register("root_only", lambda c: 1)
    container.register("shared", lambda c: 1, Lifetime.SCOPED)
    scope = container.create_scope()
    scope.register("scope_only", lambda c: 1)

    assert scope.has("root_only")
    assert scope.has("scope_only")
    assert not container.has("scope_only")
    assert not scope.has("missing")
    assert scope.get_tokens() == ["shared", "scope_only", "root_only"]


@pytest.mark.asyncio
async def test_registering_in_scope_leaves_parent_untouched(container: Container) -> None:
    container.register("svc", lambda c: "parent", Lifetime.TRANSIENT)
    scope = container.create_scope()
    scope.register("svc", lambda c: "child", Lifetime.TRANSIENT)
    scope.register("extra", lambda c: "child")

    assert await scope.resolve("svc") == "child"
    assert await container.resolve("svc") == "parent"
    assert not container.has("extra")


def test_service_entry_cache_state() -> None:
    entry = ServiceEntry("svc", lambda c: None, ServiceMetadata())

    assert not entry.has_instance
    with pytest.raises(AttributeError):
        _ = entry.instance

    # None is a legitimate cached value
    entry.instance = None
    assert entry.has_instance
    assert entry.instance is None

    copy = entry.copy_for_scope()
    assert not copy.has_instance
    assert copy.factory is entry.factory
