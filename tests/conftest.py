"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any ``structlog.configure`` call made by a CLI test."""
    yield
    structlog.reset_defaults()
