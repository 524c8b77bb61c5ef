"""
Unit Tests for FastStore

Tests the in-process tier: stamping, promotion, pattern removal and the
oldest-first overflow eviction.
"""

import pytest

from tests.test_fixtures.cache_factory import TEST_PREFIX, FakeClock
from tiered_cache.core.models import CacheEntry
from tiered_cache.infrastructure.cache.fast_store import FastStore


@pytest.fixture
def store(clock):
    return FastStore(key_prefix=TEST_PREFIX, max_items=10, eviction_fraction=0.2, clock=clock)


@pytest.mark.unit
class TestFastStoreBasics:
    """Test get/set/remove."""

    def test_set_stamps_with_clock(self, store, clock):
        entry = store.set("query_cache_a", {"v": 1})

        assert entry.stored_at == clock()
        assert store.get("query_cache_a") == entry

    def test_get_missing_returns_none(self, store):
        assert store.get("query_cache_missing") is None

    def test_get_ignores_age(self, store, clock):
        """Test that the fast store never expires entries on its own."""
        store.set("query_cache_a", 1)
        clock.advance(10 * 24 * 3600)
        assert store.get("query_cache_a").data == 1

    def test_overwrite_restamps(self, store, clock):
        store.set("query_cache_a", 1)
        clock.advance(5)
        entry = store.set("query_cache_a", 2)

        assert entry.data == 2
        assert store.get("query_cache_a").stored_at == clock()
        assert store.get_size() == 1

    def test_put_entry_keeps_stored_at(self, store):
        """Test that promoted entries keep their original timestamp."""
        entry = CacheEntry(key="query_cache_a", data=1, stored_at=123)
        store.put_entry(entry)
        assert store.get("query_cache_a").stored_at == 123

    def test_remove(self, store):
        store.set("query_cache_a", 1)

        assert store.remove("query_cache_a") is True
        assert store.remove("query_cache_a") is False
        assert store.get("query_cache_a") is None

    def test_clear(self, store):
        store.set("query_cache_a", 1)
        store.set("query_cache_b", 2)
        store.clear()
        assert store.get_size() == 0


@pytest.mark.unit
class TestFastStorePatternRemoval:
    """Test substring removal over logical names."""

    def test_remove_matching(self, store):
        store.set("query_cache_user:1", 1)
        store.set("query_cache_user:2", 2)
        store.set("query_cache_order:1", 3)

        removed = store.remove_matching("user:")

        assert removed == 2
        assert store.get_keys() == ["query_cache_order:1"]

    def test_pattern_does_not_match_prefix(self, store):
        """Test that the namespace prefix is not part of the matched text."""
        store.set("query_cache_order:1", 1)
        assert store.remove_matching("query_cache") == 0
        assert store.get_size() == 1


@pytest.mark.unit
class TestFastStoreEviction:
    """Test overflow eviction."""

    def test_overflow_evicts_oldest_fraction(self):
        clock = FakeClock()
        store = FastStore(key_prefix=TEST_PREFIX, max_items=10, eviction_fraction=0.2, clock=clock)

        for i in range(11):
            store.set(f"query_cache_{i}", i)
            clock.advance(1)

        # 11 entries over a cap of 10: ceil(11 * 0.2) = 3 oldest dropped
        assert store.get_size() == 8
        for i in range(3):
            assert store.get(f"query_cache_{i}") is None
        assert store.get("query_cache_10").data == 10

    def test_at_capacity_does_not_evict(self, store):
        for i in range(10):
            store.set(f"query_cache_{i}", i)
        assert store.get_size() == 10
        assert store.get_max_size() == 10

    def test_promoted_entry_survives_overflow_it_triggers(self):
        """Test that an old entry promoted into a full store is not evicted straight away."""
        clock = FakeClock()
        store = FastStore(key_prefix=TEST_PREFIX, max_items=5, eviction_fraction=0.2, clock=clock)
        old = CacheEntry(key="query_cache_old", data="old", stored_at=clock() - 60_000)

        for i in range(5):
            store.set(f"query_cache_hot{i}", i)
            clock.advance(1)

        store.put_entry(old)

        # ceil(6 * 0.2) = 2 evictions, taken from the hot entries
        assert store.get("query_cache_old") is old
        assert store.get_size() == 4
        assert store.get("query_cache_hot0") is None
        assert store.get("query_cache_hot1") is None
        assert store.get("query_cache_hot4").data == 4
