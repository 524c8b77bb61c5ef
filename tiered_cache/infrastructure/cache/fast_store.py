"""
Fast Store - in-process cache tier

Holds hot entries in memory for the lifetime of the process. Every operation
is synchronous and does no I/O, so lookups never suspend the event loop.

Entries are never expired here: freshness is decided by the caller comparing
``stored_at`` against its own TTL, which lets different callers read the same
entry with different TTL policies.
"""

import math
from collections.abc import Callable

from tiered_cache.core.config.constants import EVICTION_FRACTION, MEMORY_CACHE_MAX_ITEMS, Stage
from tiered_cache.core.logging.logger import get_logger, log_stage
from tiered_cache.core.models import CacheEntry, epoch_ms

logger = get_logger(__name__)


class FastStore:
    """
    In-memory cache tier.

    Capacity:
    - Bounded by ``max_items``; when a write pushes the count over the cap,
      the oldest ``eviction_fraction`` of entries (by ``stored_at``) is
      dropped in one batch.

    No lock is taken: operations never await, so on a single event loop
    they run to completion without interleaving.
    """

    def __init__(
        self,
        key_prefix: str = "",
        max_items: int = MEMORY_CACHE_MAX_ITEMS,
        eviction_fraction: float = EVICTION_FRACTION,
        clock: Callable[[], int] = epoch_ms,
    ):
        """
        Args:
            key_prefix: Namespace prefix stripped before pattern matching
            max_items: Maximum number of entries to hold
            eviction_fraction: Share of entries dropped on overflow
            clock: Source of ``stored_at`` timestamps (epoch ms)
        """
        self._prefix = key_prefix
        self._max_items = max_items
        self._eviction_fraction = eviction_fraction
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` regardless of age, or None."""
        return self._entries.get(key)

    def set(self, key: str, data) -> CacheEntry:
        """Store ``data`` under ``key``, stamping it with this tier's clock."""
        entry = CacheEntry(key=key, data=data, stored_at=self._clock())
        self._entries[key] = entry

        if len(self._entries) > self._max_items:
            self._evict_oldest(keep=key)

        return entry

    def put_entry(self, entry: CacheEntry) -> None:
        """
        Store an entry read from another tier, keeping its ``stored_at``.

        Used for promotion from the durable store so the promoted value does
        not look younger than it is. The promoted entry itself is exempt from
        the overflow eviction it triggers.
        """
        self._entries[entry.key] = entry

        if len(self._entries) > self._max_items:
            self._evict_oldest(keep=entry.key)

    def remove(self, key: str) -> bool:
        """Remove ``key``. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def remove_matching(self, pattern: str) -> int:
        """
        Remove every entry whose logical name contains ``pattern``.

        The namespace prefix is stripped before matching.

        Returns:
            Number of entries removed
        """
        matching = [key for key in self._entries if pattern in self._logical_name(key)]
        for key in matching:
            del self._entries[key]
        return len(matching)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def get_size(self) -> int:
        """Get current number of entries."""
        return len(self._entries)

    def get_max_size(self) -> int:
        """Get maximum capacity."""
        return self._max_items

    def get_keys(self) -> list[str]:
        return list(self._entries)

    def _logical_name(self, key: str) -> str:
        if self._prefix and key.startswith(self._prefix):
            return key[len(self._prefix):]
        return key

    def _evict_oldest(self, keep: str | None = None) -> None:
        count = math.ceil(len(self._entries) * self._eviction_fraction)
        candidates = [entry for key, entry in self._entries.items() if key != keep]
        oldest = sorted(candidates, key=lambda entry: entry.stored_at)[:count]
        for entry in oldest:
            del self._entries[entry.key]

        log_stage(
            logger,
            Stage.EVICTION,
            "Fast store over capacity, evicted oldest entries",
            level="debug",
            evicted=len(oldest),
            max_items=self._max_items,
        )
