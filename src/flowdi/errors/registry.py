# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: flowdi
"""Unified error registry implementation for flowdi."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowdi.errors.base import ErrorCategory, ErrorCode

logger = logging.getLogger(__name__)


class ErrorRegistry:
    """Singleton registry for all error codes and categories in flowdi."""

    _instance: ErrorRegistry | None = None
    _lock = threading.RLock()

    _categories: dict[str, ErrorCategory]
    _codes: dict[str, ErrorCode]

    def __new__(cls) -> ErrorRegistry:
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._categories = {}
                instance._codes = {}
                cls._instance = instance
            return cls._instance

    def get_category(
        self, name: str, parent: ErrorCategory | None = None
    ) -> ErrorCategory:
        """Get or create a category.

        Args:
            name: The category name
            parent: Optional parent category, only used on creation

        Returns:
            The ErrorCategory
        """
        with self._lock:
            if name in self._categories:
                return self._categories[name]

            from flowdi.errors.base import ErrorCategory

            category = ErrorCategory(name, parent)
            self._categories[name] = category
            return category

    def get_code(
        self,
        code: str,
        category_name: str = "INTERNAL",
        parent: ErrorCode | None = None,
    ) -> ErrorCode:
        """Get or create an error code within a category.

        Args:
            code: The error code
            category_name: The category name (defaults to INTERNAL)
            parent: Optional parent code, only used on creation

        Returns:
            The ErrorCode
        """
        with self._lock:
            key = f"{category_name}.{code}"
            if key in self._codes:
                return self._codes[key]

            from flowdi.errors.base import ErrorCode

            error_code = ErrorCode(code, self.get_category(category_name), parent)
            self._codes[key] = error_code
            return error_code

    def lookup_code(self, code: str) -> ErrorCode | None:
        """Look up an error code by bare or qualified name without creating it."""
        with self._lock:
            if code in self._codes:
                return self._codes[code]
            for key, error_code in self._codes.items():
                if key.endswith(f".{code}"):
                    return error_code
        logger.debug("Error code '%s' not found in registry", code)
        return None

    def lookup_category(self, name: str) -> ErrorCategory | None:
        """Look up a category by name without creating it."""
        with self._lock:
            return self._categories.get(name)

    def get_all_categories(self) -> list[ErrorCategory]:
        with self._lock:
            return list(self._categories.values())

    def get_all_codes(self) -> list[ErrorCode]:
        with self._lock:
            return list(self._codes.values())


# Create a single instance for use throughout the package
registry = ErrorRegistry()
