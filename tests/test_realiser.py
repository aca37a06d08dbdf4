# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the environment realisation orchestrator."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from floxenv.catalog import CatalogLockError, StaticCatalog, StaticCursor, UnsupportedSystemError
from floxenv.config import RealiseConfig
from floxenv.interfaces import LockedRef
from floxenv.realise import (
    ACTIVATION_SCRIPT_NAME,
    ACTIVATION_SUBDIR_NAME,
    CursorMismatchError,
    EnvironmentRealiser,
    EvalFailureKind,
    Failed,
    HookScript,
    InvocationMode,
    PackageReference,
    Realized,
    ScriptStagingError,
)
from tests.helpers.realise import HOST_SYSTEM, RecordingLogSink, store_path


def _refs(*names: str) -> list[PackageReference]:
    return [PackageReference(name=name, system=HOST_SYSTEM) for name in names]


def test_all_valid_packages_succeed(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    realiser = EnvironmentRealiser(catalog, config, logger=log_sink)
    result = realiser.realise(_refs("ripgrep", "hello"), [], tmp_path)

    assert result.succeeded
    assert result.failures == ()
    assert [str(path) for path in result.store_paths] == [
        store_path("ripgrep-14.1.0", "1"),
        store_path("hello-2.12.1", "2"),
    ]
    assert log_sink.oks


def test_every_failure_is_reported_in_manifest_order(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    realiser = EnvironmentRealiser(catalog, config, logger=log_sink)
    result = realiser.realise(
        _refs("python2", "ripgrep", "spacebar", "broken-def", "weird"),
        [],
        tmp_path,
    )

    assert not result.succeeded
    assert result.store_paths == ()
    assert [(failure.package.name, failure.kind) for failure in result.failures] == [
        ("python2", EvalFailureKind.INSECURE_PACKAGE),
        ("spacebar", EvalFailureKind.UNSUPPORTED_SYSTEM),
        ("broken-def", EvalFailureKind.OTHER),
        ("weird", EvalFailureKind.OTHER),
    ]
    assert [package.name for package, _ in result.outcomes] == [
        "python2",
        "ripgrep",
        "spacebar",
        "broken-def",
        "weird",
    ]
    assert isinstance(result.outcomes[1][1], Realized)
    assert len(log_sink.warnings) == 2
    assert any("broken-def" in message for message in log_sink.failures)


def test_each_evaluation_gets_its_own_cursor(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    EnvironmentRealiser(catalog, config, logger=log_sink).realise(_refs("ripgrep", "hello", "ripgrep"), [], tmp_path)

    assert sorted(catalog.cursors_issued) == sorted(
        [
            ("legacyPackages", HOST_SYSTEM, "ripgrep"),
            ("legacyPackages", HOST_SYSTEM, "hello"),
            ("legacyPackages", HOST_SYSTEM, "ripgrep"),
        ]
    )


def test_duplicate_store_paths_are_collapsed(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    result = EnvironmentRealiser(catalog, config, logger=log_sink).realise(_refs("ripgrep", "ripgrep"), [], tmp_path)
    assert len(result.outcomes) == 2
    assert len(result.store_paths) == 1


def test_order_is_preserved_with_many_workers(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    names = [f"pkg{index}" for index in range(40)]
    catalog = StaticCatalog({(HOST_SYSTEM, name): store_path(name, "3") for name in names})
    config = RealiseConfig(system=HOST_SYSTEM, jobs=8)

    result = EnvironmentRealiser(catalog, config, logger=log_sink).realise(_refs(*names), [], tmp_path)

    assert [path.name for path in result.store_paths] == names


class MisboundCatalog(StaticCatalog):
    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> StaticCursor:
        return StaticCursor(attr_path=("legacyPackages", HOST_SYSTEM, "other"), entry=store_path("other"))


def test_mismatched_cursor_is_a_programming_error(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    realiser = EnvironmentRealiser(MisboundCatalog({}), RealiseConfig(system=HOST_SYSTEM, jobs=1), logger=log_sink)
    with pytest.raises(CursorMismatchError):
        realiser.realise(_refs("hello"), [], tmp_path)


class RefusingCatalog(StaticCatalog):
    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> StaticCursor:
        raise UnsupportedSystemError("no such system", attr_path=tuple(attr_path))


def test_cursor_creation_errors_are_classified(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    realiser = EnvironmentRealiser(RefusingCatalog({}), RealiseConfig(system=HOST_SYSTEM, jobs=1), logger=log_sink)
    result = realiser.realise(_refs("hello"), [], tmp_path)

    outcome = result.outcomes[0][1]
    assert isinstance(outcome, Failed)
    assert outcome.kind is EvalFailureKind.UNSUPPORTED_SYSTEM


class LookupFailingCatalog(StaticCatalog):
    def cursor(self, locked: LockedRef, attr_path: Sequence[str]) -> StaticCursor:
        if attr_path[-1] == "bad":
            raise KeyError("attribute set lookup failed")
        return super().cursor(locked, attr_path)


def test_unexpected_cursor_errors_become_other_failures(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    catalog = LookupFailingCatalog({(HOST_SYSTEM, "hello"): store_path("hello-2.12.1", "2")})
    realiser = EnvironmentRealiser(catalog, RealiseConfig(system=HOST_SYSTEM, jobs=2), logger=log_sink)

    result = realiser.realise(_refs("bad", "hello"), [], tmp_path)

    assert not result.succeeded
    assert [failure.package.name for failure in result.failures] == ["bad"]
    assert result.failures[0].kind is EvalFailureKind.OTHER
    assert "attribute set lookup failed" in result.failures[0].failure.message
    assert isinstance(result.outcomes[1][1], Realized)
    assert log_sink.failures


def test_lock_failure_aborts_realisation(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    catalog = StaticCatalog({}, refs={})
    realiser = EnvironmentRealiser(catalog, RealiseConfig(system=HOST_SYSTEM), logger=log_sink)
    with pytest.raises(CatalogLockError):
        realiser.realise(_refs("hello"), [], tmp_path)


def test_empty_manifest_skips_locking(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    catalog = StaticCatalog({}, refs={})
    result = EnvironmentRealiser(catalog, RealiseConfig(system=HOST_SYSTEM), logger=log_sink).realise([], [], tmp_path)
    assert result.succeeded
    assert result.outcomes == ()


def test_hooks_are_staged_and_composed_in_declared_order(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    hooks = [
        HookScript(name="z-env.sh", contents="export Z=1\n"),
        HookScript(name="a-setup.sh", contents="echo setup\n", mode=InvocationMode.EXECED),
        HookScript(name="m-prompt.sh", contents="PS1='> '\n"),
    ]
    result = EnvironmentRealiser(catalog, config, logger=log_sink).realise(_refs("ripgrep"), hooks, tmp_path)

    assert result.activation_script.splitlines() == [
        'source "$FLOX_ENV/activate/z-env.sh";',
        'bash "$FLOX_ENV/activate/a-setup.sh";',
        'source "$FLOX_ENV/activate/m-prompt.sh";',
    ]
    assert result.staged_scripts == tuple(tmp_path / ACTIVATION_SUBDIR_NAME / hook.name for hook in hooks)
    assert result.activation_script_path == tmp_path / ACTIVATION_SCRIPT_NAME
    assert result.activation_script_path.read_text(encoding="utf-8") == result.activation_script


def test_duplicate_hook_names_keep_last_contents(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    hooks = [
        HookScript(name="hook.sh", contents="first"),
        HookScript(name="other.sh", contents="other"),
        HookScript(name="hook.sh", contents="second", mode=InvocationMode.EXECED),
    ]
    result = EnvironmentRealiser(catalog, config, logger=log_sink).realise([], hooks, tmp_path)

    assert (tmp_path / ACTIVATION_SUBDIR_NAME / "hook.sh").read_text(encoding="utf-8") == "second"
    assert len(result.activation_script.splitlines()) == 3
    assert sorted(path.name for path in (tmp_path / ACTIVATION_SUBDIR_NAME).iterdir()) == ["hook.sh", "other.sh"]


def test_staging_failure_keeps_earlier_files_and_raises(tmp_path: Path, log_sink: RecordingLogSink) -> None:
    blocked = tmp_path / ACTIVATION_SUBDIR_NAME / "blocked.sh"
    blocked.mkdir(parents=True)
    hooks = [
        HookScript(name="first.sh", contents="echo first"),
        HookScript(name="blocked.sh", contents="echo blocked"),
        HookScript(name="last.sh", contents="echo last"),
    ]
    realiser = EnvironmentRealiser(StaticCatalog({}), RealiseConfig(system=HOST_SYSTEM, jobs=1), logger=log_sink)

    with pytest.raises(ScriptStagingError) as excinfo:
        realiser.realise([], hooks, tmp_path)

    assert excinfo.value.name == "blocked.sh"
    assert (tmp_path / ACTIVATION_SUBDIR_NAME / "first.sh").is_file()
    assert not (tmp_path / ACTIVATION_SUBDIR_NAME / "last.sh").exists()
    assert not (tmp_path / ACTIVATION_SCRIPT_NAME).exists()
    assert any("blocked.sh" in message for message in log_sink.failures)


def test_no_hooks_writes_empty_activation_script(
    tmp_path: Path, catalog: StaticCatalog, config: RealiseConfig, log_sink: RecordingLogSink
) -> None:
    result = EnvironmentRealiser(catalog, config, logger=log_sink).realise(_refs("hello"), [], tmp_path / "env")

    assert result.activation_script == ""
    assert (tmp_path / "env" / ACTIVATION_SCRIPT_NAME).read_text(encoding="utf-8") == ""
    assert not (tmp_path / "env" / ACTIVATION_SUBDIR_NAME).exists()
