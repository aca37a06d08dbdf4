# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host platform detection expressed as catalog system doubles."""

from __future__ import annotations

import platform
from typing import Final

SUPPORTED_SYSTEMS: Final[tuple[str, ...]] = (
    "aarch64-darwin",
    "aarch64-linux",
    "x86_64-darwin",
    "x86_64-linux",
)

_MACHINE_ALIASES: Final[dict[str, str]] = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


def native_system() -> str:
    """Return the ``<arch>-<kernel>`` double describing the running host.

    Returns:
        str: System identifier such as ``x86_64-linux``. Unknown machines
        are reported with their raw, lower-cased names.
    """

    machine = platform.machine().lower()
    arch = _MACHINE_ALIASES.get(machine, machine)
    kernel = platform.system().lower()
    return f"{arch}-{kernel}"


def is_supported_system(system: str) -> bool:
    """Return whether ``system`` is one of the known system doubles."""

    return system in SUPPORTED_SYSTEMS


__all__ = ["SUPPORTED_SYSTEMS", "is_supported_system", "native_system"]
