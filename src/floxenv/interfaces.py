# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Service interfaces consumed by the realisation engine."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class LockedRef:
    """Catalog reference pinned to an immutable revision."""

    original: str
    locked: str


@runtime_checkable
class EvaluationCursor(Protocol):
    """Handle into catalog evaluation state for a single attribute path."""

    @property
    def attr_path(self) -> tuple[str, ...]:
        """Return the attribute path this cursor is bound to."""

        raise NotImplementedError

    def evaluate(self) -> str:
        """Return the output path of the bound package or raise on failure."""

        raise NotImplementedError


@runtime_checkable
class Catalog(Protocol):
    """Narrow surface of the external package catalog."""

    def lock(self, ref: str) -> LockedRef:
        """Pin ``ref`` to an immutable revision."""

        raise NotImplementedError

    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> EvaluationCursor:
        """Return a fresh cursor bound to ``attr_path`` within ``locked``."""

        raise NotImplementedError


@runtime_checkable
class LogSink(Protocol):
    """Destination for user-facing realisation messages."""

    def info(self, message: str) -> None:
        """Record an informational message."""

        raise NotImplementedError

    def ok(self, message: str) -> None:
        """Record a success message."""

        raise NotImplementedError

    def warn(self, message: str) -> None:
        """Record a warning."""

        raise NotImplementedError

    def fail(self, message: str) -> None:
        """Record a failure."""

        raise NotImplementedError

    def debug(self, message: str) -> None:
        """Record a diagnostic message."""

        raise NotImplementedError


__all__ = ["Catalog", "EvaluationCursor", "LockedRef", "LogSink"]
