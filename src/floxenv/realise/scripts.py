# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Stage hook scripts and compose the activation script that runs them."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from .models import InvocationMode

ACTIVATION_SUBDIR_NAME: Final[str] = "activate"
ACTIVATION_SCRIPT_NAME: Final[str] = "activate.sh"
ENV_ROOT_VARIABLE: Final[str] = "FLOX_ENV"

_LINE_TEMPLATES: Final[dict[InvocationMode, str]] = {
    InvocationMode.SOURCED: 'source "${root}/{subdir}/{name}";',
    InvocationMode.EXECED: 'bash "${root}/{subdir}/{name}";',
}


class ScriptStagingError(RuntimeError):
    """Raised when a hook script cannot be written into the scripts directory."""

    def __init__(self, name: str, path: Path, reason: OSError) -> None:
        super().__init__(f"failed to stage hook script '{name}' at {path}: {reason}")
        self.name = name
        self.path = path
        self.reason = reason


def activation_subdir(scripts_dir: Path) -> Path:
    """Return the directory hook scripts are staged into."""

    return scripts_dir / ACTIVATION_SUBDIR_NAME


def stage_script(scripts_dir: Path, name: str, contents: str) -> Path:
    """Write ``contents`` to ``<scripts_dir>/activate/<name>``.

    The activation subdirectory is created when missing. An existing file of
    the same name is overwritten.

    Args:
        scripts_dir: Environment root holding the activation subdirectory.
        name: File name of the hook script.
        contents: Script body, written verbatim.

    Returns:
        Path: Location of the staged script.

    Raises:
        ScriptStagingError: Raised when the directory or file cannot be written.
    """

    target_dir = activation_subdir(scripts_dir)
    staged = target_dir / name
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with staged.open("w", encoding="utf-8", newline="") as handle:
            handle.write(contents)
    except OSError as exc:
        raise ScriptStagingError(name, staged, exc) from exc
    return staged


def activation_line(name: str, mode: InvocationMode) -> str:
    """Return the shell statement invoking hook ``name`` in ``mode``."""

    return _LINE_TEMPLATES[mode].format(root=ENV_ROOT_VARIABLE, subdir=ACTIVATION_SUBDIR_NAME, name=name)


class ActivationComposer:
    """Append-only builder for the activation script body."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def append(self, name: str, mode: InvocationMode) -> str:
        """Append the invocation line for hook ``name``.

        Args:
            name: File name of the staged hook under the activation directory.
            mode: Whether the hook is sourced or run in a child ``bash``.

        Returns:
            str: The line that was appended.
        """

        line = activation_line(name, mode)
        self._lines.append(line)
        return line

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def text(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def __len__(self) -> int:
        return len(self._lines)


def add_script_to_scripts_dir(
    contents: str,
    scripts_dir: Path,
    name: str,
    composer: ActivationComposer,
    mode: InvocationMode,
) -> Path:
    """Stage a hook script and append its activation line.

    The line is only appended once the file exists on disk.

    Returns:
        Path: Location of the staged script.
    """

    staged = stage_script(scripts_dir, name, contents)
    composer.append(name, mode)
    return staged


__all__ = [
    "ACTIVATION_SCRIPT_NAME",
    "ACTIVATION_SUBDIR_NAME",
    "ENV_ROOT_VARIABLE",
    "ActivationComposer",
    "ScriptStagingError",
    "activation_line",
    "activation_subdir",
    "add_script_to_scripts_dir",
    "stage_script",
]
