# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestrate package evaluation and activation script assembly."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from ..config import RealiseConfig
from ..interfaces import Catalog, LockedRef, LogSink
from ..logging import build_log_sink
from .evaluator import classify_failure, evaluate_package
from .models import (
    EvaluationOutcome,
    Failed,
    HookScript,
    PackageReference,
    RealisationResult,
    Realized,
)
from .scripts import ACTIVATION_SCRIPT_NAME, ActivationComposer, ScriptStagingError, stage_script


class CursorMismatchError(RuntimeError):
    """Raised when the catalog hands out a cursor bound to the wrong attribute path."""


@dataclass(slots=True)
class _StagingState:
    """Shared bookkeeping for one staging phase."""

    hooks: Sequence[HookScript]
    scripts_dir: Path
    staged: dict[int, Path] = field(default_factory=dict)
    errors: dict[int, ScriptStagingError] = field(default_factory=dict)
    abort: threading.Event = field(default_factory=threading.Event)


class EnvironmentRealiser:
    """Turn package references and hook scripts into an activatable environment."""

    def __init__(
        self,
        catalog: Catalog,
        config: RealiseConfig | None = None,
        *,
        logger: LogSink | None = None,
    ) -> None:
        self._catalog = catalog
        self._config = config if config is not None else RealiseConfig()
        self._logger: LogSink = logger if logger is not None else build_log_sink()

    @property
    def config(self) -> RealiseConfig:
        return self._config

    def realise(
        self,
        packages: Sequence[PackageReference],
        hooks: Sequence[HookScript],
        scripts_dir: Path,
    ) -> RealisationResult:
        """Evaluate every package, stage every hook, and write the activation script.

        Package failures are collected rather than raised, so the result lists
        every failing package. Staging stops at the first filesystem error.

        Args:
            packages: Package references in manifest order.
            hooks: Hook scripts in activation order.
            scripts_dir: Environment root receiving ``activate/`` and ``activate.sh``.

        Returns:
            RealisationResult: Store paths, activation text, and failures.

        Raises:
            CatalogLockError: Raised when the catalog reference cannot be pinned.
            CursorMismatchError: Raised when a cursor is bound to the wrong path.
            ScriptStagingError: Raised when a hook or the activation script
                cannot be written.
        """

        outcomes = self.evaluate(packages)
        composer, staged = self.stage_hooks(hooks, scripts_dir)
        script_path = self._write_activation_script(scripts_dir, composer)

        result = RealisationResult(
            outcomes=outcomes,
            activation_script=composer.text,
            staged_scripts=staged,
            activation_script_path=script_path,
        )
        if result.succeeded:
            self._logger.ok(f"Realised {len(result.store_paths)} package(s) with {len(composer)} hook(s)")
        else:
            self._logger.fail(f"{len(result.failures)} of {len(outcomes)} package(s) failed to evaluate")
        return result

    def evaluate(
        self,
        packages: Sequence[PackageReference],
    ) -> tuple[tuple[PackageReference, EvaluationOutcome], ...]:
        """Evaluate ``packages`` concurrently and return outcomes in input order.

        Each evaluation obtains its own cursor; cursors are never shared.

        Args:
            packages: Package references in manifest order.

        Returns:
            tuple[tuple[PackageReference, EvaluationOutcome], ...]: One outcome per package.
        """

        if not packages:
            return ()
        locked = self._catalog.lock(self._config.catalog_ref)
        self._logger.debug(f"locked catalog={locked.original} revision={locked.locked}")
        workers = min(self._config.jobs, len(packages))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(partial(self._evaluate_one, locked), packages))
        return tuple(zip(packages, outcomes))

    def _evaluate_one(self, locked: LockedRef, package: PackageReference) -> EvaluationOutcome:
        expected = package.attr_path
        try:
            cursor = self._catalog.cursor(locked, expected)
        except Exception as exc:  # noqa: BLE001 - cursor lookups fail like evaluations
            outcome: EvaluationOutcome = Failed(
                kind=classify_failure(exc),
                message=f"failed to evaluate '{package.name}' for {package.system}: {exc}",
            )
        else:
            if tuple(cursor.attr_path) != expected:
                raise CursorMismatchError(
                    f"cursor bound to {'.'.join(cursor.attr_path)} while evaluating {'.'.join(expected)}"
                )
            self._logger.debug(f"evaluating package={package.name} system={package.system}")
            outcome = evaluate_package(
                cursor,
                package.name,
                package.system,
                store_dir=self._config.store_dir,
            )

        if isinstance(outcome, Realized):
            self._logger.debug(f"realised package={package.name} path={outcome.store_path}")
        elif outcome.kind.expected:
            self._logger.warn(outcome.message)
        else:
            self._logger.fail(outcome.message)
        return outcome

    def stage_hooks(
        self,
        hooks: Sequence[HookScript],
        scripts_dir: Path,
    ) -> tuple[ActivationComposer, tuple[Path, ...]]:
        """Stage ``hooks`` and compose their activation lines in declared order.

        Hooks sharing a name are staged one after another so the last
        declaration wins; distinct names may be staged in parallel.

        Args:
            hooks: Hook scripts in activation order.
            scripts_dir: Environment root receiving the ``activate`` directory.

        Returns:
            tuple[ActivationComposer, tuple[Path, ...]]: Composer holding one
            line per hook, and the staged paths in declared order.

        Raises:
            ScriptStagingError: First staging failure in declared order.
        """

        composer = ActivationComposer()
        if not hooks:
            return composer, ()

        groups: dict[str, list[int]] = {}
        for index, hook in enumerate(hooks):
            groups.setdefault(hook.name, []).append(index)

        state = _StagingState(hooks=hooks, scripts_dir=scripts_dir)
        workers = min(self._config.jobs, len(groups))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._stage_group, state, indices) for indices in groups.values()]
            for future in futures:
                future.result()

        if state.errors:
            error = state.errors[min(state.errors)]
            self._logger.fail(str(error))
            raise error

        staged: list[Path] = []
        for index, hook in enumerate(hooks):
            composer.append(hook.name, hook.mode)
            staged.append(state.staged[index])
        return composer, tuple(staged)

    def _stage_group(self, state: _StagingState, indices: Sequence[int]) -> None:
        for index in indices:
            if state.abort.is_set():
                return
            hook = state.hooks[index]
            try:
                state.staged[index] = stage_script(state.scripts_dir, hook.name, hook.contents)
            except ScriptStagingError as exc:
                state.errors[index] = exc
                state.abort.set()
                return
            self._logger.debug(f"staged hook={hook.name} mode={hook.mode.value}")

    def _write_activation_script(self, scripts_dir: Path, composer: ActivationComposer) -> Path:
        target = scripts_dir / ACTIVATION_SCRIPT_NAME
        try:
            scripts_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(composer.text, encoding="utf-8")
        except OSError as exc:
            error = ScriptStagingError(ACTIVATION_SCRIPT_NAME, target, exc)
            self._logger.fail(str(error))
            raise error from exc
        return target


__all__ = ["CursorMismatchError", "EnvironmentRealiser"]
