"""Shared fixtures for indicator tests."""

import pytest


@pytest.fixture(scope="module")
def rising_closes() -> list[float]:
    """30 strictly increasing closes."""
    return [100.0 + i * 0.5 for i in range(30)]


@pytest.fixture(scope="module")
def falling_closes() -> list[float]:
    """30 strictly decreasing closes."""
    return [100.0 - i * 0.5 for i in range(30)]


@pytest.fixture(scope="module")
def ranging_closes() -> list[float]:
    """60 closes oscillating around 50 with a slight drift."""
    return [50.0 + (i % 5 - 2) * 0.7 + i * 0.05 for i in range(60)]
