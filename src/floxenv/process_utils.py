# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Subprocess helpers used to drive the external package catalog."""

from __future__ import annotations

import os
import shutil

# Bandit: commands are argument lists built by the catalog adapters and are
# never passed through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from subprocess import CompletedProcess as _CompletedProcess  # nosec B404

TIMEOUT_EXIT_STATUS: Final[int] = 124


class SubprocessExecutionError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def merge_env(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a copy of the process environment updated with ``overrides``."""

    env = os.environ.copy()
    if overrides:
        env.update(overrides)
    return env


def _resolve_executable(args: Sequence[str]) -> list[str]:
    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    if Path(head).is_absolute():
        return [head, *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def _as_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    timeout: float | None = None,
) -> _CompletedProcess[str]:
    """Run ``args`` capturing text output.

    Args:
        args: Command and arguments; the executable is resolved on ``PATH``.
        cwd: Optional working directory.
        env: Complete environment for the child process.
        check: Raise :class:`SubprocessExecutionError` on non-zero exit.
        timeout: Seconds before the child is killed. Expiry is reported as
            exit status ``124`` with a note appended to stderr.

    Returns:
        CompletedProcess[str]: Completed process with captured output.

    Raises:
        FileNotFoundError: Raised when the executable cannot be located.
        SubprocessExecutionError: Raised when ``check`` is set and the command fails.
    """

    normalized = _resolve_executable(args)
    try:
        completed: _CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _as_text(exc.stderr)
        note = f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out"
        completed = subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_EXIT_STATUS,
            stdout=_as_text(exc.stdout) or "",
            stderr=f"{stderr}\n{note}" if stderr else note,
        )

    if check and completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            completed.stdout,
            completed.stderr,
        )
    return completed


__all__ = ["SubprocessExecutionError", "TIMEOUT_EXIT_STATUS", "merge_env", "run_command"]
