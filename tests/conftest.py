"""Top-level pytest configuration for flowdi."""

from __future__ import annotations

import pytest

# Register the error codes before any test inspects the registry
import flowdi.di.errors  # noqa: F401
import flowdi.di.tokens  # noqa: F401
from flowdi.di import Container, ContainerSettings


@pytest.fixture
def settings() -> ContainerSettings:
    return ContainerSettings()


@pytest.fixture
def container(settings: ContainerSettings) -> Container:
    """A fresh root container."""
    return Container(settings=settings)


@pytest.fixture
def dispose_log() -> list[str]:
    return []
