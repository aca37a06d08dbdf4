# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Catalog adapter that drives the ``nix`` command line."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from ..interfaces import LockedRef
from ..process_utils import SubprocessExecutionError, merge_env, run_command
from .errors import (
    CatalogEvaluationError,
    CatalogLockError,
    InsecurePackageError,
    UnsupportedSystemError,
)

if TYPE_CHECKING:
    from ..config import RealiseConfig

EXPERIMENTAL_FEATURES: Final[tuple[str, ...]] = (
    "--extra-experimental-features",
    "nix-command flakes",
)

# nixpkgs `check-meta.nix` refusal messages.
INSECURE_MARKERS: Final[tuple[str, ...]] = (
    "is marked as insecure",
    "is marked as broken",
)
UNSUPPORTED_MARKERS: Final[tuple[str, ...]] = (
    "is not available on the requested hostPlatform",
    "is not supported on",
)

_NIX_IDENTIFIER_SAFE: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_-]+$")


def nix_str_safe(component: str) -> str:
    """Quote ``component`` unless it is a bare attribute identifier."""

    if _NIX_IDENTIFIER_SAFE.match(component):
        return component
    return json.dumps(component)


def attr_path_installable(locked: LockedRef, attr_path: Sequence[str]) -> str:
    """Return the ``<flake>#<attr>.outPath`` installable for ``attr_path``."""

    attribute = ".".join(nix_str_safe(part) for part in attr_path)
    return f"{locked.locked}#{attribute}.outPath"


def classify_evaluation_error(stderr: str, attr_path: tuple[str, ...]) -> CatalogEvaluationError:
    """Map ``nix eval`` diagnostics onto typed catalog errors.

    Args:
        stderr: Diagnostic output captured from ``nix eval``.
        attr_path: Attribute path that was evaluated.

    Returns:
        CatalogEvaluationError: Insecure, unsupported, or generic evaluation error.
    """

    message = stderr.strip() or "evaluation failed without diagnostics"
    if any(marker in stderr for marker in INSECURE_MARKERS):
        return InsecurePackageError(message, attr_path=attr_path)
    if any(marker in stderr for marker in UNSUPPORTED_MARKERS):
        return UnsupportedSystemError(message, attr_path=attr_path)
    return CatalogEvaluationError(message, attr_path=attr_path)


@dataclass(slots=True)
class NixCursor:
    """Cursor evaluating one attribute path through ``nix eval``."""

    attr_path: tuple[str, ...]
    locked: LockedRef
    executable: str
    env: Mapping[str, str] = field(default_factory=dict)
    impure: bool = False
    timeout: float | None = None

    def command(self) -> list[str]:
        args = [self.executable, *EXPERIMENTAL_FEATURES, "eval", "--raw"]
        if self.impure:
            args.append("--impure")
        args.append(attr_path_installable(self.locked, self.attr_path))
        return args

    def evaluate(self) -> str:
        completed = run_command(
            self.command(),
            env=merge_env(self.env),
            check=False,
            timeout=self.timeout,
        )
        if completed.returncode != 0:
            raise classify_evaluation_error(completed.stderr or "", self.attr_path)
        return completed.stdout.removesuffix("\n")


class NixCatalog:
    """Catalog backed by a flake reference evaluated with the ``nix`` CLI."""

    def __init__(
        self,
        *,
        executable: str = "nix",
        allow_insecure: bool = False,
        allow_broken: bool = False,
        allow_unsupported_system: bool = False,
        timeout: float | None = None,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._env: dict[str, str] = {}
        if allow_insecure:
            self._env["NIXPKGS_ALLOW_INSECURE"] = "1"
        if allow_broken:
            self._env["NIXPKGS_ALLOW_BROKEN"] = "1"
        if allow_unsupported_system:
            self._env["NIXPKGS_ALLOW_UNSUPPORTED_SYSTEM"] = "1"

    @classmethod
    def from_config(cls, config: RealiseConfig) -> NixCatalog:
        """Build a catalog honouring the policy overrides in ``config``."""

        return cls(
            executable=config.nix_executable,
            allow_insecure=config.allow_insecure,
            allow_broken=config.allow_broken,
            allow_unsupported_system=config.allow_unsupported_system,
            timeout=config.eval_timeout,
        )

    @property
    def policy_env(self) -> dict[str, str]:
        return dict(self._env)

    def lock(self, ref: str) -> LockedRef:
        """Pin ``ref`` using ``nix flake metadata``.

        Raises:
            CatalogLockError: Raised when metadata cannot be fetched or parsed.
        """

        args = [self._executable, *EXPERIMENTAL_FEATURES, "flake", "metadata", "--json", ref]
        try:
            completed = run_command(args, timeout=self._timeout)
            metadata = json.loads(completed.stdout)
        except (OSError, SubprocessExecutionError, json.JSONDecodeError) as exc:
            raise CatalogLockError(f"failed to lock '{ref}': {exc}") from exc
        if not isinstance(metadata, dict):
            raise CatalogLockError(f"unexpected metadata for '{ref}'")
        locked = metadata.get("lockedUrl") or metadata.get("url")
        if not isinstance(locked, str) or not locked:
            raise CatalogLockError(f"metadata for '{ref}' has no locked URL")
        return LockedRef(original=ref, locked=locked)

    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> NixCursor:
        """Return a cursor evaluating ``attr_path`` inside ``locked``.

        Args:
            locked: Locked flake reference returned by :meth:`lock`.
            attr_path: Attribute path of the package to evaluate.

        Returns:
            NixCursor: Cursor carrying the policy environment; ``--impure`` is
            passed whenever that environment is non-empty.
        """

        return NixCursor(
            attr_path=tuple(attr_path),
            locked=locked,
            executable=self._executable,
            env=dict(self._env),
            impure=bool(self._env),
            timeout=self._timeout,
        )


__all__ = [
    "EXPERIMENTAL_FEATURES",
    "INSECURE_MARKERS",
    "NixCatalog",
    "NixCursor",
    "UNSUPPORTED_MARKERS",
    "attr_path_installable",
    "classify_evaluation_error",
    "nix_str_safe",
]
