# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Evaluate a single package reference and classify the outcome."""

from __future__ import annotations

from pathlib import PurePosixPath

from ..catalog.errors import InsecurePackageError, UnsupportedSystemError
from ..interfaces import EvaluationCursor
from ..store import DEFAULT_STORE_DIR, InvalidStorePathError, parse_store_path
from .models import EvalFailureKind, EvaluationOutcome, Failed, Realized


def classify_failure(error: Exception) -> EvalFailureKind:
    """Return the failure kind matching a catalog evaluation error.

    Args:
        error: Exception raised while evaluating a cursor.

    Returns:
        EvalFailureKind: ``INSECURE_PACKAGE`` and ``UNSUPPORTED_SYSTEM`` for
        policy and platform refusals, ``OTHER`` for anything else.
    """

    if isinstance(error, InsecurePackageError):
        return EvalFailureKind.INSECURE_PACKAGE
    if isinstance(error, UnsupportedSystemError):
        return EvalFailureKind.UNSUPPORTED_SYSTEM
    return EvalFailureKind.OTHER


def evaluate_package(
    cursor: EvaluationCursor,
    name: str,
    system: str,
    *,
    store_dir: PurePosixPath = DEFAULT_STORE_DIR,
) -> EvaluationOutcome:
    """Evaluate ``cursor`` and return a realised store path or a classified failure.

    The cursor must already be bound to ``legacyPackages.<system>.<name>``;
    callers are responsible for checking that binding. Catalog errors never
    escape this function.

    Args:
        cursor: Cursor bound to the package's attribute path.
        name: Package attribute name, used in failure messages.
        system: Target system double, used in failure messages.
        store_dir: Store directory the output path must live in.

    Returns:
        EvaluationOutcome: ``Realized`` with a parsed store path, or ``Failed``.
    """

    try:
        raw_path = cursor.evaluate()
    except Exception as exc:  # noqa: BLE001 - every catalog error becomes an outcome
        kind = classify_failure(exc)
        return Failed(kind=kind, message=f"failed to evaluate '{name}' for {system}: {exc}")

    try:
        store_path = parse_store_path(raw_path, store_dir=store_dir)
    except InvalidStorePathError as exc:
        return Failed(
            kind=EvalFailureKind.OTHER,
            message=f"evaluating '{name}' for {system} produced an invalid output path: {exc}",
        )
    return Realized(store_path=store_path)


__all__ = ["classify_failure", "evaluate_package"]
