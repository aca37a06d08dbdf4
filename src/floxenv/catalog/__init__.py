# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Package catalog adapters."""

from __future__ import annotations

from .errors import (
    CatalogError,
    CatalogEvaluationError,
    CatalogLockError,
    InsecurePackageError,
    UnsupportedSystemError,
)
from .nix import NixCatalog, NixCursor
from .static import StaticCatalog, StaticCursor

__all__ = [
    "CatalogError",
    "CatalogEvaluationError",
    "CatalogLockError",
    "InsecurePackageError",
    "NixCatalog",
    "NixCursor",
    "StaticCatalog",
    "StaticCursor",
    "UnsupportedSystemError",
]
