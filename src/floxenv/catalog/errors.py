# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exceptions raised by catalog adapters."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog adapter failures."""


class CatalogLockError(CatalogError):
    """Raised when a catalog reference cannot be pinned."""


class CatalogEvaluationError(CatalogError):
    """Raised when evaluating an attribute path fails."""

    def __init__(self, message: str, *, attr_path: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.attr_path = attr_path


class InsecurePackageError(CatalogEvaluationError):
    """Raised when policy refuses a package marked insecure or broken."""


class UnsupportedSystemError(CatalogEvaluationError):
    """Raised when a package does not support the requested system."""


__all__ = [
    "CatalogError",
    "CatalogEvaluationError",
    "CatalogLockError",
    "InsecurePackageError",
    "UnsupportedSystemError",
]
