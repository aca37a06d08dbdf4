# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loaders for environment realisation."""

from __future__ import annotations

import math
import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .platform import native_system
from .store import DEFAULT_STORE_DIR

DEFAULT_CATALOG_REF: Final[str] = "github:flox/nixpkgs/stable"
CONFIG_SECTION_KEY: Final[str] = "realise"
ENV_OVERRIDES: Final[dict[str, str]] = {
    "FLOXENV_CATALOG": "catalog_ref",
    "FLOXENV_SYSTEM": "system",
    "FLOXENV_STORE_DIR": "store_dir",
    "FLOXENV_JOBS": "jobs",
    "FLOXENV_ALLOW_INSECURE": "allow_insecure",
    "FLOXENV_ALLOW_BROKEN": "allow_broken",
    "FLOXENV_ALLOW_UNSUPPORTED_SYSTEM": "allow_unsupported_system",
    "FLOXENV_EVAL_TIMEOUT": "eval_timeout",
    "FLOXENV_NIX": "nix_executable",
}

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def default_parallel_jobs() -> int:
    """Return 75% of available CPU cores (minimum of 1)."""
    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


class RealiseConfig(BaseModel):
    """Settings controlling catalog access and realisation concurrency."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    catalog_ref: str = DEFAULT_CATALOG_REF
    system: str = Field(default_factory=native_system)
    store_dir: PurePosixPath = DEFAULT_STORE_DIR
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    allow_insecure: bool = False
    allow_broken: bool = False
    allow_unsupported_system: bool = False
    eval_timeout: float | None = Field(default=None, gt=0)
    nix_executable: str = "nix"

    @field_validator("store_dir")
    @classmethod
    def _store_dir_absolute(cls, value: PurePosixPath) -> PurePosixPath:
        if not value.is_absolute():
            raise ValueError("store_dir must be an absolute path")
        return value

    @field_validator("catalog_ref", "system", "nix_executable")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value must not be empty")
        return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {
        key: _expand_env_string(value, env) if isinstance(value, str) else value
        for key, value in data.items()
    }


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration at {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    section = data.get(CONFIG_SECTION_KEY, data)
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION_KEY}] in {path} must be a table")
    return dict(section)


def load_config(
    path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> RealiseConfig:
    """Build a :class:`RealiseConfig` from layered sources.

    Layers, lowest precedence first: built-in defaults, the TOML file at
    ``path`` (top-level keys or a ``[realise]`` table, with ``$VAR``
    expansion), ``FLOXENV_*`` environment variables, then ``overrides``.

    Args:
        path: Optional TOML configuration file. Missing files are an error.
        env: Environment mapping; defaults to ``os.environ``.
        overrides: Explicit values, typically from CLI options. ``None``
            values are ignored.

    Returns:
        RealiseConfig: Validated configuration.

    Raises:
        ConfigError: Raised when a source cannot be read or fails validation.
    """

    environ = os.environ if env is None else env
    merged: dict[str, Any] = {}
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        merged.update(_expand_env(_load_toml(path), environ))
    for variable, key in ENV_OVERRIDES.items():
        if variable in environ:
            merged[key] = environ[variable]
    if overrides:
        merged.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return RealiseConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


__all__ = [
    "CONFIG_SECTION_KEY",
    "ConfigError",
    "DEFAULT_CATALOG_REF",
    "ENV_OVERRIDES",
    "RealiseConfig",
    "default_parallel_jobs",
    "load_config",
]
