# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models exchanged with the realisation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from ..store import StorePath

# Characters that would break out of the double-quoted activation reference.
_UNSAFE_NAME_CHARS: Final[frozenset[str]] = frozenset('/"$`\\\n\r\0')


class EvalFailureKind(str, Enum):
    """Enumerate the causes a package evaluation can fail with."""

    INSECURE_PACKAGE = "insecure-package"
    UNSUPPORTED_SYSTEM = "unsupported-system"
    OTHER = "other"

    @property
    def expected(self) -> bool:
        """Return whether the failure stems from policy or platform, not a defect."""

        return self is not EvalFailureKind.OTHER


class InvocationMode(str, Enum):
    """Describe how the activation script invokes a hook."""

    SOURCED = "source"
    EXECED = "exec"


class PackageReference(BaseModel):
    """Package requested by the manifest for a target system."""

    model_config = ConfigDict(frozen=True)

    name: str
    system: str

    @property
    def attr_path(self) -> tuple[str, str, str]:
        """Return the catalog attribute path ``legacyPackages.<system>.<name>``."""

        return ("legacyPackages", self.system, self.name)

    def __str__(self) -> str:
        return f"{self.name} ({self.system})"


class HookScript(BaseModel):
    """Activation-time script to stage and reference from the activation script."""

    model_config = ConfigDict(frozen=True)

    name: str
    contents: str
    mode: InvocationMode = InvocationMode.SOURCED

    @field_validator("name")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        if value in {"", ".", ".."}:
            raise ValueError(f"'{value}' is not a usable hook script name")
        unsafe = sorted(_UNSAFE_NAME_CHARS.intersection(value))
        if unsafe:
            raise ValueError(f"hook script name '{value}' contains unsupported characters {unsafe!r}")
        return value


@dataclass(frozen=True, slots=True)
class Realized:
    """Successful evaluation carrying the validated output path."""

    store_path: StorePath
    status: Literal["realized"] = "realized"


@dataclass(frozen=True, slots=True)
class Failed:
    """Classified evaluation failure."""

    kind: EvalFailureKind
    message: str
    status: Literal["failed"] = "failed"


EvaluationOutcome = Realized | Failed


@dataclass(frozen=True, slots=True)
class PackageFailure:
    """Failing package paired with its classified failure."""

    package: PackageReference
    failure: Failed

    @property
    def kind(self) -> EvalFailureKind:
        return self.failure.kind

    def describe(self) -> str:
        return f"{self.package}: [{self.failure.kind.value}] {self.failure.message}"


@dataclass(frozen=True, slots=True)
class RealisationResult:
    """Aggregate outcome of realising a manifest."""

    outcomes: tuple[tuple[PackageReference, EvaluationOutcome], ...]
    activation_script: str
    staged_scripts: tuple[Path, ...] = ()
    activation_script_path: Path | None = None
    failures: tuple[PackageFailure, ...] = field(init=False)
    store_paths: tuple[StorePath, ...] = field(init=False)

    def __post_init__(self) -> None:
        failures = tuple(
            PackageFailure(package=package, failure=outcome)
            for package, outcome in self.outcomes
            if isinstance(outcome, Failed)
        )
        store_paths: tuple[StorePath, ...] = ()
        if not failures:
            unique: dict[StorePath, None] = {}
            for _, outcome in self.outcomes:
                if isinstance(outcome, Realized):
                    unique.setdefault(outcome.store_path, None)
            store_paths = tuple(unique)
        object.__setattr__(self, "failures", failures)
        object.__setattr__(self, "store_paths", store_paths)

    @property
    def succeeded(self) -> bool:
        """Return whether every package realised."""

        return not self.failures


__all__ = [
    "EvalFailureKind",
    "EvaluationOutcome",
    "Failed",
    "HookScript",
    "InvocationMode",
    "PackageFailure",
    "PackageReference",
    "RealisationResult",
    "Realized",
]
