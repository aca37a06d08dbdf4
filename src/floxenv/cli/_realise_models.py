# SPDX-License-Identifier: MIT
"""Data structures for the ``realise`` CLI command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Final

import typer

from ..realise import HookScript, InvocationMode

HOOK_MODE_PREFIXES: Final[dict[str, InvocationMode]] = {
    "source:": InvocationMode.SOURCED,
    "exec:": InvocationMode.EXECED,
}

PACKAGES_ARGUMENT = Annotated[
    list[str],
    typer.Argument(help="Package attribute names to realise, in manifest order."),
]
OUT_OPTION = Annotated[
    Path,
    typer.Option("--out", "-o", help="Environment root receiving activation scripts."),
]
HOOK_OPTION = Annotated[
    list[str] | None,
    typer.Option(
        "--hook",
        help="Hook script to stage, optionally prefixed with 'source:' or 'exec:'. Repeatable.",
    ),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="TOML configuration file."),
]
SYSTEM_OPTION = Annotated[
    str | None,
    typer.Option("--system", help="Target system, e.g. x86_64-linux."),
]
CATALOG_OPTION = Annotated[
    str | None,
    typer.Option("--catalog", help="Catalog flake reference."),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Parallel evaluation workers."),
]
ALLOW_INSECURE_OPTION = Annotated[
    bool,
    typer.Option("--allow-insecure", help="Evaluate packages marked insecure."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Show debug output."),
]


def parse_hook_spec(spec: str) -> HookScript:
    """Return a :class:`HookScript` read from ``[source:|exec:]PATH``.

    Raises:
        typer.BadParameter: Raised when the file is unreadable or badly named.
    """

    mode = InvocationMode.SOURCED
    raw_path = spec
    for prefix, candidate in HOOK_MODE_PREFIXES.items():
        if spec.startswith(prefix):
            mode = candidate
            raw_path = spec[len(prefix) :]
            break
    path = Path(raw_path)
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"cannot read hook script {path}: {exc}", param_hint="--hook") from exc
    try:
        return HookScript(name=path.name, contents=contents, mode=mode)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--hook") from exc


@dataclass(slots=True)
class RealiseCLIOptions:
    """Normalized options for the ``realise`` command."""

    packages: list[str]
    out: Path
    hooks: list[HookScript]
    config_path: Path | None
    overrides: dict[str, object]
    emoji: bool
    debug: bool


__all__ = [
    "ALLOW_INSECURE_OPTION",
    "CATALOG_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "HOOK_MODE_PREFIXES",
    "HOOK_OPTION",
    "JOBS_OPTION",
    "OUT_OPTION",
    "PACKAGES_ARGUMENT",
    "RealiseCLIOptions",
    "SYSTEM_OPTION",
    "parse_hook_spec",
]
