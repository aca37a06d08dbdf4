# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface for environment realisation.

The Typer application lives in :mod:`floxenv.cli.app`; it is not re-exported
here so that ``floxenv.cli.app`` always names the module.
"""

from __future__ import annotations
