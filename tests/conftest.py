"""Shared test fixtures for Seymour.

Provides common fixtures used across the unit tests.
"""

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from seymour.settings import Settings
from tests.helpers.settings import make_test_settings

# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return make_test_settings()


# =============================================================================
# TIME
# =============================================================================


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock advancing one millisecond per call."""
    base = datetime(2026, 1, 1, tzinfo=UTC)
    ticks = itertools.count()
    return lambda: base + timedelta(milliseconds=next(ticks))
