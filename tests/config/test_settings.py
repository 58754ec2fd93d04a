"""Tests for environment-driven settings."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from flowdi.di import Container, ContainerSettings, Lifetime
from flowdi.logging import LoggingSettings, LogLevel


def test_container_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FLOWDI_DEFAULT_SCOPE", "FLOWDI_DETECT_CYCLES", "FLOWDI_LOG_RESOLUTIONS"):
        monkeypatch.delenv(name, raising=False)

    settings = ContainerSettings.load()

    assert settings.default_scope is Lifetime.SINGLETON
    assert settings.detect_cycles is True
    assert settings.log_resolutions is False


def test_container_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOWDI_DEFAULT_SCOPE", "transient")
    monkeypatch.setenv("FLOWDI_DETECT_CYCLES", "false")
    monkeypatch.setenv("FLOWDI_LOG_RESOLUTIONS", "1")

    settings = ContainerSettings.load()

    assert settings.default_scope is Lifetime.TRANSIENT
    assert settings.detect_cycles is False
    assert settings.log_resolutions is True


def test_container_settings_reject_unknown_scope(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOWDI_DEFAULT_SCOPE", "request")

    with pytest.raises(ValidationError):
        ContainerSettings.load()


def test_container_settings_are_frozen() -> None:
    settings = ContainerSettings()

    with pytest.raises(ValidationError):
        settings.detect_cycles = False  # type: ignore[misc]


@pytest.mark.asyncio
async def test_container_reads_environment_on_construction(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("FLOWDI_DEFAULT_SCOPE", "transient")
    container = Container()

    container.register("svc", lambda c: object())

    assert container.get_metadata("svc").scope is Lifetime.TRANSIENT
    assert await container.resolve("svc") is not await container.resolve("svc")


def test_lifetime_normalize() -> None:
    assert Lifetime.normalize("SCOPED") is Lifetime.SCOPED
    assert Lifetime.normalize(Lifetime.TRANSIENT) is Lifetime.TRANSIENT
    assert Lifetime.normalize("pooled") == "pooled"
    assert Lifetime.normalize(7) == 7
    assert str(Lifetime.SINGLETON) == "singleton"


def test_logging_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOWDI_LOGGING_LEVEL", "debug")
    monkeypatch.setenv("FLOWDI_LOGGING_JSON_FORMAT", "true")
    monkeypatch.setenv("FLOWDI_LOGGING_CONSOLE_ENABLED", "false")

    settings = LoggingSettings.load()

    assert settings.level == "DEBUG"
    assert settings.json_format is True
    assert settings.console_enabled is False
    assert settings.include_timestamp is True


def test_logging_settings_reject_invalid_level() -> None:
    with pytest.raises(ValidationError):
        LoggingSettings(level="LOUD")


def test_log_level_parsing() -> None:
    assert LogLevel.from_string(" warning ") is LogLevel.WARNING
    assert LogLevel.ERROR.to_stdlib_level() == logging.ERROR

    with pytest.raises(ValueError, match="expected one of DEBUG, INFO"):
        LogLevel.from_string("verbose")
