"""
Service disposal implementation for the flowdi DI system.
"""

from __future__ import annotations

import inspect
from typing import Any

from flowdi.di.hooks import maybe_await


def has_dispose_capability(obj: Any) -> bool:
    """Whether ``obj`` exposes a callable ``dispose`` operation.

    Detection is structural: no base class or protocol registration is
    required. Classes are not disposable, only their instances.
    """
    if obj is None or inspect.isclass(obj):
        return False
    return callable(getattr(obj, "dispose", None))


def is_already_disposed(obj: Any) -> bool:
    """Whether ``obj`` reports itself disposed through an ``is_disposed`` flag."""
    return getattr(obj, "is_disposed", False) is True


async def dispose_instance(obj: Any) -> bool:
    """Safely dispose a service if it supports disposal.

    Returns:
        True if a dispose call was made, False if the object was skipped
    """
    if not has_dispose_capability(obj) or is_already_disposed(obj):
        return False
    await maybe_await(obj.dispose())
    return True
