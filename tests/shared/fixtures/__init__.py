"""Shared test helpers for all test domains."""

from tests.shared.fixtures.e2e import FakeHealth, FakeProcess

__all__ = [
    "FakeHealth",
    "FakeProcess",
]
