# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from floxenv.catalog import StaticCatalog
from floxenv.config import RealiseConfig
from tests.helpers.realise import HOST_SYSTEM, RecordingLogSink, build_catalog


@pytest.fixture
def catalog() -> StaticCatalog:
    return build_catalog()


@pytest.fixture
def config() -> RealiseConfig:
    return RealiseConfig(system=HOST_SYSTEM, catalog_ref="github:example/nixpkgs", jobs=2)


@pytest.fixture
def log_sink() -> RecordingLogSink:
    return RecordingLogSink()
