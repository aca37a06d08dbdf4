# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Realisation engine: package evaluation and activation script assembly."""

from __future__ import annotations

from .evaluator import classify_failure, evaluate_package
from .models import (
    EvalFailureKind,
    EvaluationOutcome,
    Failed,
    HookScript,
    InvocationMode,
    PackageFailure,
    PackageReference,
    RealisationResult,
    Realized,
)
from .realiser import CursorMismatchError, EnvironmentRealiser
from .scripts import (
    ACTIVATION_SCRIPT_NAME,
    ACTIVATION_SUBDIR_NAME,
    ENV_ROOT_VARIABLE,
    ActivationComposer,
    ScriptStagingError,
    activation_line,
    add_script_to_scripts_dir,
    stage_script,
)

__all__ = [
    "ACTIVATION_SCRIPT_NAME",
    "ACTIVATION_SUBDIR_NAME",
    "ENV_ROOT_VARIABLE",
    "ActivationComposer",
    "CursorMismatchError",
    "EnvironmentRealiser",
    "EvalFailureKind",
    "EvaluationOutcome",
    "Failed",
    "HookScript",
    "InvocationMode",
    "PackageFailure",
    "PackageReference",
    "RealisationResult",
    "Realized",
    "ScriptStagingError",
    "activation_line",
    "add_script_to_scripts_dir",
    "classify_failure",
    "evaluate_package",
    "stage_script",
]
