"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.cache_factory import (  # noqa: E402
    TEST_PREFIX,
    CacheTestFactory,
    FakeClock,
    InMemoryMedium,
    RecordingSleep,
    StubProbe,
)


# ============================================================================
# Mock Configuration Fixtures
# ============================================================================


@pytest.fixture
def mock_settings():
    """
    Mock application settings for testing.

    Returns a MagicMock with the sections the cache reads.
    """
    from tiered_cache.core.config.settings import Settings

    settings = MagicMock(spec=Settings)

    settings.cache.CACHE_KEY_PREFIX = TEST_PREFIX
    settings.cache.CACHE_DEFAULT_TTL = 600
    settings.cache.CACHE_MAX_ITEMS = 300
    settings.cache.CACHE_MEMORY_MAX_ITEMS = 300
    settings.cache.CACHE_EVICTION_PROBABILITY = 0.1
    settings.cache.CACHE_EVICTION_FRACTION = 0.2
    settings.cache.CACHE_EVICTION_READ_CONCURRENCY = 10
    settings.cache.CACHE_METRICS_KEY = "cache_performance"

    settings.retry.FETCH_MAX_ATTEMPTS = 3
    settings.retry.FETCH_RETRY_BASE_DELAY = 1.0

    settings.network.NETWORK_CHECK_TIMEOUT = 3.0
    settings.network.NETWORK_PROBE_URL = "https://probe.test/generate_204"
    settings.network.NETWORK_PROBE_TIMEOUT = 5.0

    settings.monitoring.SLOW_QUERY_THRESHOLD_MS = 3000

    settings.redis.REDIS_HOST = "localhost"
    settings.redis.REDIS_PORT = 6379

    settings.app.APP_NAME = "tiered-cache"
    settings.app.APP_VERSION = "1.0.0"
    settings.app.ENVIRONMENT = "development"

    return settings


# ============================================================================
# In-Memory Collaborators
# ============================================================================


@pytest.fixture
def medium():
    """Empty in-memory durable medium."""
    return InMemoryMedium()


@pytest.fixture
def clock():
    """Manual clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def recording_sleep():
    """Sleep replacement recording backoff delays."""
    return RecordingSleep()


@pytest.fixture
def online_probe():
    return StubProbe(online=True)


@pytest.fixture
def offline_probe():
    return StubProbe(online=False)


@pytest.fixture
def cache_manager(medium, clock, online_probe, recording_sleep):
    """
    CacheManager over in-memory tiers, online, with a recorded backoff.

    The durable size check runs on every write (probability 1.0).
    """
    return CacheTestFactory.cache_manager(
        medium=medium, clock=clock, probe=online_probe, sleep=recording_sleep
    )


@pytest.fixture
def offline_cache_manager(medium, clock, offline_probe, recording_sleep):
    """CacheManager whose reachability probe reports offline."""
    return CacheTestFactory.cache_manager(
        medium=medium, clock=clock, probe=offline_probe, sleep=recording_sleep
    )
