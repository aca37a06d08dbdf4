# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing log sinks with optional colour and emoji support."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import IO, Final

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, make_console

_KEY_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


@dataclass(slots=True)
class ConsoleLogSink:
    """Render realisation progress to a Rich console.

    Instances are passed explicitly to the realiser; nothing here touches
    process-wide logging state.
    """

    console: Console
    use_emoji: bool = True
    use_color: bool = field(default_factory=detect_tty)
    debug_enabled: bool = False

    def info(self, message: str) -> None:
        """Emit an informational message."""

        self._print_line(f"{emoji('ℹ️ ', self.use_emoji)}{message}", style="cyan")

    def ok(self, message: str) -> None:
        """Emit a success message."""

        self._print_line(f"{emoji('✅ ', self.use_emoji)}{message}", style="green")

    def warn(self, message: str) -> None:
        """Emit a warning message."""

        self._print_line(f"{emoji('⚠️ ', self.use_emoji)}{message}", style="yellow")

    def fail(self, message: str) -> None:
        """Emit an error message."""

        self._print_line(f"{emoji('❌ ', self.use_emoji)}{message}", style="red")

    def section(self, title: str) -> None:
        """Print a section header."""

        if self.use_color:
            self.console.print()
            self.console.print(Rule(title))
        else:
            self.console.print(f"\n--- {title} ---")

    def debug(self, message: str) -> None:
        """Emit ``message`` with ``key=value`` highlighting when debugging is on.

        Args:
            message: Debug payload; ``key=value`` pairs are highlighted.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)

    def _print_line(self, message: str, *, style: str) -> None:
        text = Text(message)
        if self.use_color:
            text.stylize(style)
        self.console.print(text)


def build_log_sink(
    *,
    emoji: bool = True,
    debug: bool = False,
    no_color: bool = False,
    stream: IO[str] | None = None,
) -> ConsoleLogSink:
    """Return a :class:`ConsoleLogSink` bound to a dedicated console.

    Args:
        emoji: Whether messages may include emoji glyphs.
        debug: Whether debug messages are rendered.
        no_color: Disable colour output even on a terminal.
        stream: Optional output stream; defaults to stdout.

    Returns:
        ConsoleLogSink: Sink ready to hand to the realiser.
    """

    color = not no_color and detect_tty(stream)
    console = make_console(color=color, emoji=emoji, stream=stream)
    return ConsoleLogSink(console=console, use_emoji=emoji, use_color=color, debug_enabled=debug)


__all__ = ["ConsoleLogSink", "build_log_sink", "emoji"]
