# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich console construction helpers."""

from __future__ import annotations

import sys
from typing import IO, Literal

from rich.console import Console


def detect_tty(stream: IO[str] | None = None) -> bool:
    """Return ``True`` when ``stream`` (stdout by default) is a terminal.

    Args:
        stream: Optional stream to probe instead of ``sys.stdout``.

    Returns:
        bool: ``True`` when the stream reports TTY support.
    """

    target = stream if stream is not None else sys.stdout
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


def make_console(*, color: bool, emoji: bool, stream: IO[str] | None = None) -> Console:
    """Return a Rich console honouring colour and emoji preferences.

    Args:
        color: ``True`` when ANSI colour output is wanted.
        emoji: ``True`` when Rich should render emoji glyphs.
        stream: Optional file-like target; defaults to stdout.

    Returns:
        Console: Console configured for the requested presentation.
    """

    tty = detect_tty(stream)
    color_system: Literal["auto", "standard", "256", "truecolor", "windows"] | None = (
        "auto" if color and tty else None
    )
    return Console(
        file=stream,
        color_system=color_system,
        force_terminal=tty,
        no_color=not (color and tty),
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
    )


__all__ = ["detect_tty", "make_console"]
