# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory catalog backed by a fixed table of evaluation results."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..interfaces import LockedRef
from .errors import CatalogEvaluationError, CatalogLockError

# An entry is either the output path or the exception evaluation raises.
CatalogEntry = str | CatalogEvaluationError


@dataclass(slots=True)
class StaticCursor:
    """Cursor that replays a single pre-recorded catalog entry."""

    attr_path: tuple[str, ...]
    entry: CatalogEntry | None

    def evaluate(self) -> str:
        if self.entry is None:
            raise CatalogEvaluationError(
                f"attribute '{'.'.join(self.attr_path)}' missing",
                attr_path=self.attr_path,
            )
        if isinstance(self.entry, CatalogEvaluationError):
            raise self.entry
        return self.entry


class StaticCatalog:
    """Catalog answering from a ``(system, name) -> entry`` table.

    Useful for embedding pre-evaluated package sets and for tests.
    """

    def __init__(
        self,
        packages: Mapping[tuple[str, str], CatalogEntry],
        *,
        refs: Mapping[str, str] | None = None,
    ) -> None:
        self._packages = dict(packages)
        self._refs = dict(refs) if refs is not None else None
        self.cursors_issued: list[tuple[str, ...]] = []

    def lock(self, ref: str) -> LockedRef:
        """Resolve ``ref`` through the configured reference table.

        Args:
            ref: Catalog reference to lock.

        Returns:
            LockedRef: ``ref`` itself when no table was given, otherwise its mapping.

        Raises:
            CatalogLockError: Raised when ``ref`` is missing from the table.
        """

        if self._refs is None:
            return LockedRef(original=ref, locked=ref)
        try:
            return LockedRef(original=ref, locked=self._refs[ref])
        except KeyError as exc:
            raise CatalogLockError(f"unknown catalog reference '{ref}'") from exc

    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> StaticCursor:
        """Return a cursor for ``attr_path`` and record that it was issued.

        Args:
            locked: Locked catalog reference (unused; entries are not versioned).
            attr_path: Attribute path of the form ``legacyPackages.<system>.<name>``.

        Returns:
            StaticCursor: Cursor over the matching entry, or over nothing when absent.
        """

        path = tuple(attr_path)
        self.cursors_issued.append(path)
        entry: CatalogEntry | None = None
        if len(path) == 3 and path[0] == "legacyPackages":
            entry = self._packages.get((path[1], path[2]))
        return StaticCursor(attr_path=path, entry=entry)


__all__ = ["CatalogEntry", "StaticCatalog", "StaticCursor"]
