# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for store path parsing."""

from __future__ import annotations

from pathlib import PurePosixPath

import pytest

from floxenv.store import (
    InvalidStorePathError,
    maybe_parse_store_path,
    parse_store_path,
)

VALID_HASH = "0c0ynfggq1zh7a1gwbg4ddmvjj2a98bn"


def test_parse_store_path_splits_hash_and_name() -> None:
    raw = f"/nix/store/{VALID_HASH}-ripgrep-14.1.0"
    parsed = parse_store_path(raw)
    assert parsed.hash_part == VALID_HASH
    assert parsed.name == "ripgrep-14.1.0"
    assert parsed.base_name == f"{VALID_HASH}-ripgrep-14.1.0"
    assert str(parsed) == raw


def test_parse_store_path_honours_custom_store_dir() -> None:
    store_dir = PurePosixPath("/opt/store")
    parsed = parse_store_path(f"/opt/store/{VALID_HASH}-hello", store_dir=store_dir)
    assert parsed.path == store_dir / f"{VALID_HASH}-hello"
    assert maybe_parse_store_path(f"/nix/store/{VALID_HASH}-hello", store_dir=store_dir) is None


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "ripgrep",
        f"nix/store/{VALID_HASH}-ripgrep",
        f"/nix/store/{VALID_HASH}-ripgrep/",
        f"/nix/store/{VALID_HASH}-ripgrep/bin/rg",
        f"/nix/other/{VALID_HASH}-ripgrep",
        f"/nix/store/{VALID_HASH}",
        f"/nix/store/{VALID_HASH}-",
        "/nix/store/eeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee-ripgrep",
        "/nix/store/0c0ynfggq1zh-ripgrep",
        f"/nix/store/{VALID_HASH}-.hidden",
        f"/nix/store/{VALID_HASH}-has space",
        f"/nix/store/{VALID_HASH}-ripgrep\n",
        f"/nix/store/{VALID_HASH}-" + "a" * 212,
    ],
)
def test_parse_store_path_rejects_invalid_paths(raw: str) -> None:
    with pytest.raises(InvalidStorePathError):
        parse_store_path(raw)
    assert maybe_parse_store_path(raw) is None


@pytest.mark.parametrize("raw", [PurePosixPath(f"/nix/store/{VALID_HASH}-hello"), b"/nix/store/x", 42])
def test_parse_store_path_rejects_non_string_input(raw: object) -> None:
    with pytest.raises(InvalidStorePathError, match="expected a path string"):
        parse_store_path(raw)
    assert maybe_parse_store_path(raw) is None


def test_parse_store_path_accepts_allowed_name_punctuation() -> None:
    parsed = parse_store_path(f"/nix/store/{VALID_HASH}-gtk+3_x.y-1?=2")
    assert parsed.name == "gtk+3_x.y-1?=2"
