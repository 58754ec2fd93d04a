"""Tests for the structured logger."""

from __future__ import annotations

import json
import logging
import uuid

import pytest

from flowdi.di import Container
from flowdi.logging import (
    FlowLogger,
    LoggingSettings,
    LogLevel,
    StructuredFormatter,
    get_logger,
)
from flowdi.logging.logger import CONTEXT_ATTR


def quiet_settings(level: str = "DEBUG") -> LoggingSettings:
    return LoggingSettings(level=level, console_enabled=False)


def unique_name() -> str:
    return f"flowdi.tests.{uuid.uuid4().hex}"


def make_record(message: str, **context: object) -> logging.LogRecord:
    record = logging.LogRecord("flowdi.test", logging.INFO, __file__, 1, message, None, None)
    setattr(record, CONTEXT_ATTR, context)
    return record


def test_logs_carry_keyword_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = FlowLogger(unique_name(), settings=quiet_settings())

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        logger.info("user created", user_id=42)

    [record] = caplog.records
    assert record.getMessage() == "user created"
    assert getattr(record, CONTEXT_ATTR) == {"user_id": 42}


def test_bound_and_block_context_are_merged(caplog: pytest.LogCaptureFixture) -> None:
    logger = FlowLogger(unique_name(), settings=quiet_settings())
    bound = logger.bind(service="billing").with_correlation_id("abc")

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        with bound.context(request="r1"):
            bound.warning("slow call", ms=250)
        bound.warning("after block")

    first, second = caplog.records
    assert getattr(first, CONTEXT_ATTR) == {
        "service": "billing",
        "correlation_id": "abc",
        "request": "r1",
        "ms": 250,
    }
    assert getattr(second, CONTEXT_ATTR) == {"service": "billing", "correlation_id": "abc"}
    # Binding leaves the original logger untouched
    assert logger._bound_context == {}


def test_level_filters_messages(caplog: pytest.LogCaptureFixture) -> None:
    logger = FlowLogger(unique_name(), settings=quiet_settings("WARNING"))

    with caplog.at_level(logging.DEBUG):
        logger.info("hidden")
        logger.error("shown")

    assert [record.getMessage() for record in caplog.records] == ["shown"]
    assert not logger.is_enabled_for(LogLevel.INFO)

    logger.set_level(LogLevel.INFO)
    assert logger.is_enabled_for(LogLevel.INFO)


def test_exception_includes_traceback(caplog: pytest.LogCaptureFixture) -> None:
    logger = FlowLogger(unique_name(), settings=quiet_settings())

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        try:
            raise ValueError("broken")
        except ValueError:
            logger.exception("operation failed", step="load")

    [record] = caplog.records
    assert record.levelno == logging.ERROR
    assert record.exc_info is not None
    assert record.exc_info[0] is ValueError


def test_get_logger_applies_level_override() -> None:
    logger = get_logger(unique_name(), level=LogLevel.ERROR, settings=quiet_settings())

    assert not logger.is_enabled_for(LogLevel.WARNING)
    assert logger.is_enabled_for(LogLevel.ERROR)


def test_console_handler_is_added_once() -> None:
    name = unique_name()
    settings = LoggingSettings(level="INFO", console_enabled=True)

    FlowLogger(name, settings=settings)
    FlowLogger(name, settings=settings)

    handlers = logging.getLogger(name).handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, StructuredFormatter)


def test_text_formatter_appends_context() -> None:
    formatter = StructuredFormatter(include_timestamp=False)

    output = formatter.format(make_record("saved", table="users", note="two words"))

    assert output == 'flowdi.test saved [INFO] table=users note="two words"'


def test_json_formatter_renders_context() -> None:
    formatter = StructuredFormatter(json_format=True, include_timestamp=False)

    output = json.loads(
        formatter.format(make_record("saved", tags={"a"}, level_hint=LogLevel.INFO))
    )

    assert output == {
        "message": "saved",
        "level": "INFO",
        "name": "flowdi.test",
        "tags": ["a"],
        "level_hint": "INFO",
    }


@pytest.mark.asyncio
async def test_container_logs_lifecycle_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    logger = FlowLogger(unique_name(), settings=quiet_settings())
    container = Container(logger=logger)

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        container.register("svc", lambda c: 1)
        container.create_scope()
        await container.dispose()

    messages = [record.getMessage() for record in caplog.records]
    assert "Registered service" in messages
    assert "Created scope" in messages
    assert messages.count("Disposed container") == 2
    registered = caplog.records[messages.index("Registered service")]
    assert getattr(registered, CONTEXT_ATTR)["token"] == "svc"


@pytest.mark.asyncio
async def test_container_logs_disposal_failures_as_warnings(
    caplog: pytest.LogCaptureFixture,
) -> None:
    class Broken:
        def dispose(self) -> None:
            raise RuntimeError("stuck")

    logger = FlowLogger(unique_name(), settings=quiet_settings("WARNING"))
    container = Container(logger=logger)
    container.register("broken", lambda c: Broken())
    await container.resolve("broken")

    with caplog.at_level(logging.WARNING, logger=logger.name):
        with pytest.raises(Exception, match="failed to dispose"):
            await container.dispose()

    [record] = caplog.records
    assert record.levelno == logging.WARNING
    assert getattr(record, CONTEXT_ATTR) == {"token": "broken", "error": "stuck"}
