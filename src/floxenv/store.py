# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Syntactic validation of store paths produced by the package catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Final

DEFAULT_STORE_DIR: Final[PurePosixPath] = PurePosixPath("/nix/store")
HASH_LENGTH: Final[int] = 32
MAX_NAME_LENGTH: Final[int] = 211
# Nix base-32 omits e, o, u and t.
BASE32_ALPHABET: Final[str] = "0123456789abcdfghijklmnpqrsvwxyz"

_HASH_RE: Final[re.Pattern[str]] = re.compile(rf"[{BASE32_ALPHABET}]{{{HASH_LENGTH}}}")
_NAME_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9+\-._?=]+")


class InvalidStorePathError(ValueError):
    """Raised when a string does not follow the store path grammar."""


@dataclass(frozen=True, slots=True)
class StorePath:
    """Parsed store path split into its hash and name parts."""

    store_dir: PurePosixPath
    hash_part: str
    name: str

    @property
    def base_name(self) -> str:
        """Return the final path component, ``<hash>-<name>``."""

        return f"{self.hash_part}-{self.name}"

    @property
    def path(self) -> PurePosixPath:
        """Return the absolute path inside the store directory."""

        return self.store_dir / self.base_name

    def __str__(self) -> str:
        return str(self.path)


def parse_store_path(raw: str, *, store_dir: PurePosixPath = DEFAULT_STORE_DIR) -> StorePath:
    """Parse ``raw`` as a store path located directly under ``store_dir``.

    Args:
        raw: Absolute path string reported by the catalog.
        store_dir: Store directory the path must live in.

    Returns:
        StorePath: Parsed representation of ``raw``.

    Raises:
        InvalidStorePathError: Raised when ``raw`` violates the grammar.
    """

    if not isinstance(raw, str):
        raise InvalidStorePathError(f"expected a path string, got {type(raw).__name__}: {raw!r}")
    if not raw or "\n" in raw or "\0" in raw:
        raise InvalidStorePathError(f"'{raw}' is not a valid store path")
    candidate = PurePosixPath(raw)
    if not candidate.is_absolute() or str(candidate) != raw:
        raise InvalidStorePathError(f"'{raw}' is not a canonical absolute path")
    if candidate.parent != store_dir:
        raise InvalidStorePathError(f"'{raw}' is not in the store directory '{store_dir}'")

    base_name = candidate.name
    hash_part, separator, name = base_name.partition("-")
    if not separator or not _HASH_RE.fullmatch(hash_part):
        raise InvalidStorePathError(f"'{raw}' has an invalid hash part")
    if not name or len(name) > MAX_NAME_LENGTH:
        raise InvalidStorePathError(f"'{raw}' has an invalid name length")
    if name.startswith(".") or not _NAME_RE.fullmatch(name):
        raise InvalidStorePathError(f"'{raw}' has an invalid name '{name}'")
    return StorePath(store_dir=store_dir, hash_part=hash_part, name=name)


def maybe_parse_store_path(
    raw: str,
    *,
    store_dir: PurePosixPath = DEFAULT_STORE_DIR,
) -> StorePath | None:
    """Return the parsed store path or ``None`` when ``raw`` is invalid."""

    try:
        return parse_store_path(raw, store_dir=store_dir)
    except InvalidStorePathError:
        return None


__all__ = [
    "BASE32_ALPHABET",
    "DEFAULT_STORE_DIR",
    "HASH_LENGTH",
    "InvalidStorePathError",
    "MAX_NAME_LENGTH",
    "StorePath",
    "maybe_parse_store_path",
    "parse_store_path",
]
