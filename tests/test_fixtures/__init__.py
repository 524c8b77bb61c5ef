"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .cache_factory import (
    CacheTestFactory,
    CountingFetch,
    FakeClock,
    InMemoryMedium,
    RecordingSleep,
    StubProbe,
)

__all__ = [
    "CacheTestFactory",
    "CountingFetch",
    "FakeClock",
    "InMemoryMedium",
    "RecordingSleep",
    "StubProbe",
]
