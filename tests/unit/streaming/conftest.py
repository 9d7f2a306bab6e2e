"""Shared fixtures for streaming module tests."""

import pytest

from seymour.streaming.store import ExchangeStateStore


@pytest.fixture()
def store(clock):
    """An empty store with a deterministic clock."""
    return ExchangeStateStore(clock=clock)
