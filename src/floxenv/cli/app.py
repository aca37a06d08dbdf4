# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from typing import Final

import typer

from ..catalog import CatalogLockError, NixCatalog
from ..config import ConfigError, RealiseConfig, load_config
from ..interfaces import Catalog, LogSink
from ..logging import build_log_sink
from ..realise import (
    CursorMismatchError,
    EnvironmentRealiser,
    PackageReference,
    RealisationResult,
    ScriptStagingError,
)
from ._realise_models import (
    ALLOW_INSECURE_OPTION,
    CATALOG_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    HOOK_OPTION,
    JOBS_OPTION,
    OUT_OPTION,
    PACKAGES_ARGUMENT,
    SYSTEM_OPTION,
    RealiseCLIOptions,
    parse_hook_spec,
)

EXIT_PACKAGE_FAILURE: Final[int] = 1
EXIT_ERROR: Final[int] = 2

app = typer.Typer(help="Realise package manifests into activatable environments.", no_args_is_help=True)


def build_catalog(config: RealiseConfig) -> Catalog:
    """Return the catalog used by the CLI; tests patch this to avoid ``nix``."""

    return NixCatalog.from_config(config)


@app.callback()
def main_callback() -> None:
    """Realise package manifests into activatable environments."""


@app.command("realise")
def realise_command(
    packages: PACKAGES_ARGUMENT,
    out: OUT_OPTION,
    hook: HOOK_OPTION = None,
    config: CONFIG_OPTION = None,
    system: SYSTEM_OPTION = None,
    catalog: CATALOG_OPTION = None,
    jobs: JOBS_OPTION = None,
    allow_insecure: ALLOW_INSECURE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Evaluate PACKAGES and write activation scripts under --out."""

    options = RealiseCLIOptions(
        packages=list(packages),
        out=out.resolve(),
        hooks=[parse_hook_spec(spec) for spec in hook or []],
        config_path=config,
        overrides={
            "system": system,
            "catalog_ref": catalog,
            "jobs": jobs,
            "allow_insecure": True if allow_insecure else None,
        },
        emoji=emoji,
        debug=debug,
    )
    logger = build_log_sink(emoji=options.emoji, debug=options.debug)
    raise typer.Exit(code=run_realise(options, logger=logger))


def run_realise(options: RealiseCLIOptions, *, logger: LogSink) -> int:
    """Realise the environment described by ``options`` and return an exit status.

    Args:
        options: Normalized CLI options.
        logger: Sink receiving progress and failure messages.

    Returns:
        int: ``0`` on success, ``1`` when packages fail, ``2`` on errors.
    """

    try:
        config = load_config(options.config_path, overrides=options.overrides)
    except ConfigError as exc:
        logger.fail(f"Invalid configuration: {exc}")
        return EXIT_ERROR

    references = [PackageReference(name=name, system=config.system) for name in options.packages]
    realiser = EnvironmentRealiser(build_catalog(config), config, logger=logger)
    try:
        result = realiser.realise(references, options.hooks, options.out)
    except (CatalogLockError, CursorMismatchError) as exc:
        logger.fail(str(exc))
        return EXIT_ERROR
    except ScriptStagingError:
        # Already reported by the realiser.
        return EXIT_ERROR

    report_result(result, logger=logger)
    return 0 if result.succeeded else EXIT_PACKAGE_FAILURE


def report_result(result: RealisationResult, *, logger: LogSink) -> None:
    """Emit store paths on success or every failure otherwise."""

    for failure in result.failures:
        logger.fail(failure.describe())
    for store_path in result.store_paths:
        logger.info(str(store_path))
    if result.activation_script_path is not None:
        logger.info(f"Activation script written to {result.activation_script_path}")


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "build_catalog", "main", "report_result", "run_realise"]
