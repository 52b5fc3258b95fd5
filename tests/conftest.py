"""Shared pytest fixtures for repoclient tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from repoclient.core.logger import UnifiedLogger

pytest_plugins = ["tests.fixtures.fedora"]


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Leave no handlers bound to streams captured by a previous test."""
    yield
    UnifiedLogger.reset()
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)
