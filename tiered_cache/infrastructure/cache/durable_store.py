"""
Durable Store Adapter

Persists timestamped cache entries to a durable string-keyed medium and reads
them back. The medium may be shared with unrelated data, so every cache key
carries the namespace prefix and bulk operations only touch prefixed keys.

Failure policy:
- Reads fail soft. I/O and decode errors are logged and reported as absent.
- Writes and removals are logged and swallowed; a broken durable tier
  degrades the cache to memory-only instead of failing reads.

On-medium format (JSON, via orjson):
    {"data": <payload>, "storedAt": <epoch ms>}
"""

import asyncio
import math
import random
from collections.abc import Callable
from typing import Any

import orjson

from tiered_cache.core.config.constants import (
    CACHE_KEY_PREFIX,
    CACHE_METRICS_KEY,
    EVICTION_FRACTION,
    EVICTION_PROBABILITY,
    EVICTION_READ_CONCURRENCY,
    Stage,
)
from tiered_cache.core.exceptions import CacheSerializationError, TierReadError, TierWriteError
from tiered_cache.core.interfaces.cache import DurableMedium
from tiered_cache.core.logging.logger import get_logger, log_stage
from tiered_cache.core.models import CacheEntry, epoch_ms

logger = get_logger(__name__)


# =============================================================================
# ENTRY SERIALIZATION
# =============================================================================


class EntrySerializer:
    """
    Encodes entries for the medium and decodes them back.

    Records written by older clients used ``timestamp`` instead of
    ``storedAt``; both are accepted on read.
    """

    @staticmethod
    def encode(data: Any, stored_at: int) -> str:
        try:
            return orjson.dumps(
                {"data": data, "storedAt": stored_at}, option=orjson.OPT_NON_STR_KEYS
            ).decode("utf-8")
        except TypeError as e:
            raise CacheSerializationError.from_exception(
                e, message="Cache payload is not JSON-serializable"
            )

    @staticmethod
    def decode(key: str, raw: str) -> CacheEntry:
        try:
            record = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise CacheSerializationError.from_exception(e, key=key)

        if not isinstance(record, dict) or "data" not in record:
            raise CacheSerializationError("Record is not a cache entry", key=key)

        stored_at = record.get("storedAt", record.get("timestamp"))
        if not isinstance(stored_at, int | float) or isinstance(stored_at, bool):
            raise CacheSerializationError("Record has no valid storedAt", key=key)

        return CacheEntry(key=key, data=record["data"], stored_at=int(stored_at))


# =============================================================================
# DURABLE STORE
# =============================================================================


class DurableStore:
    """
    Durable cache tier over an injected ``DurableMedium``.

    Size control is an approximate LRU: ``enforce_size_limit`` only scans
    on a fraction of invocations, and when it does it drops the oldest
    ``eviction_fraction`` of namespaced entries by ``storedAt``. Eviction is
    deferred and batched so the write path stays a single ``set``.
    """

    def __init__(
        self,
        medium: DurableMedium,
        key_prefix: str = CACHE_KEY_PREFIX,
        metrics_key: str = CACHE_METRICS_KEY,
        eviction_probability: float = EVICTION_PROBABILITY,
        eviction_fraction: float = EVICTION_FRACTION,
        clock: Callable[[], int] = epoch_ms,
        rng: random.Random | None = None,
        read_concurrency: int = EVICTION_READ_CONCURRENCY,
    ):
        """
        Args:
            medium: Persistent string-keyed store
            key_prefix: Namespace prefix of every cache key
            metrics_key: Key of the persisted metrics record
            eviction_probability: Chance that enforce_size_limit scans
            eviction_fraction: Share of entries removed when over the cap
            clock: Source of ``storedAt`` timestamps (epoch ms)
            rng: Random source for the eviction coin flip
            read_concurrency: Max entry reads in flight during a size check
        """
        self._medium = medium
        self._prefix = key_prefix
        self._metrics_key = metrics_key
        self._eviction_probability = eviction_probability
        self._eviction_fraction = eviction_fraction
        self._clock = clock
        self._rng = rng or random.Random()
        self._read_concurrency = max(1, read_concurrency)
        self._serializer = EntrySerializer()

    @property
    def medium(self) -> DurableMedium:
        return self._medium

    # -------------------------------------------------------------------------
    # Entry Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> CacheEntry | None:
        """
        Read the entry for ``key``.

        Returns None when the key is absent, the medium fails, or the stored
        value is not a readable cache entry.
        """
        try:
            raw = await self._medium.get(key)
        except Exception as e:
            error = TierReadError.from_exception(e, key=key, tier="durable")
            log_stage(logger, Stage.DURABLE_IO, "Durable store read failed", level="warning", error=error.to_dict())
            return None

        if raw is None:
            return None

        try:
            return self._serializer.decode(key, raw)
        except CacheSerializationError as e:
            log_stage(logger, Stage.DURABLE_IO, "Unreadable durable entry", level="warning", error=e.to_dict())
            return None

    async def set(self, key: str, data: Any) -> bool:
        """
        Write ``data`` under ``key`` stamped with this tier's clock.

        Returns:
            True if the entry was written
        """
        try:
            encoded = self._serializer.encode(data, self._clock())
            await self._medium.set(key, encoded)
            return True
        except CacheSerializationError as e:
            log_stage(logger, Stage.DURABLE_IO, "Durable store encode failed", level="warning", error=e.to_dict())
        except Exception as e:
            error = TierWriteError.from_exception(e, key=key, tier="durable")
            log_stage(logger, Stage.DURABLE_IO, "Durable store write failed", level="warning", error=error.to_dict())
        return False

    async def remove_key(self, key: str) -> None:
        try:
            await self._medium.remove(key)
        except Exception as e:
            log_stage(logger, Stage.DURABLE_IO, "Durable store remove failed", level="error", key=key, error=str(e))

    async def remove_matching(self, pattern: str) -> int:
        """
        Remove namespaced entries whose logical name contains ``pattern``.

        Returns:
            Number of keys removed
        """
        try:
            keys = await self._namespaced_keys()
            matching = [key for key in keys if pattern in key[len(self._prefix):]]
            if matching:
                await self._medium.remove_many(matching)
                log_stage(
                    logger,
                    Stage.INVALIDATION,
                    "Cleared durable entries matching pattern",
                    pattern=pattern,
                    removed=len(matching),
                )
            return len(matching)
        except Exception as e:
            log_stage(
                logger, Stage.DURABLE_IO, "Durable pattern removal failed", level="error", pattern=pattern, error=str(e)
            )
            return 0

    async def clear_all_namespaced(self) -> int:
        """Remove every key carrying the namespace prefix."""
        try:
            keys = await self._namespaced_keys()
            if keys:
                await self._medium.remove_many(keys)
                log_stage(logger, Stage.INVALIDATION, "Cleared all durable cache entries", removed=len(keys))
            return len(keys)
        except Exception as e:
            log_stage(logger, Stage.DURABLE_IO, "Durable clear failed", level="error", error=str(e))
            return 0

    # -------------------------------------------------------------------------
    # Size Control
    # -------------------------------------------------------------------------

    async def enforce_size_limit(self, max_items: int) -> int:
        """
        Trim the durable tier towards ``max_items`` (approximate LRU).

        Algorithm:
        1. Skip unless the coin flip lands under eviction_probability
        2. Enumerate namespaced keys; stop if count <= max_items
        3. Read every entry's storedAt, at most read_concurrency at a time
           (unreadable entries count as "now")
        4. Sort ascending and remove the oldest ceil(count * fraction)

        Returns:
            Number of entries removed
        """
        if self._rng.random() >= self._eviction_probability:
            return 0

        try:
            keys = await self._namespaced_keys()
            if len(keys) <= max_items:
                return 0

            now = self._clock()
            limiter = asyncio.Semaphore(self._read_concurrency)
            stamped = await asyncio.gather(*(self._stored_at_or(key, now, limiter) for key in keys))
            stamped.sort(key=lambda item: item[1])

            count = math.ceil(len(keys) * self._eviction_fraction)
            oldest = [key for key, _ in stamped[:count]]
            if oldest:
                await self._medium.remove_many(oldest)
                log_stage(
                    logger,
                    Stage.EVICTION,
                    "Removed old durable cache items",
                    removed=len(oldest),
                    total=len(keys),
                    max_items=max_items,
                )
            return len(oldest)
        except Exception as e:
            log_stage(logger, Stage.EVICTION, "Error enforcing cache limit", level="warning", error=str(e))
            return 0

    async def _stored_at_or(self, key: str, default: int, limiter: asyncio.Semaphore) -> tuple[str, int]:
        async with limiter:
            entry = await self.get(key)
        return key, entry.stored_at if entry is not None else default

    async def _namespaced_keys(self) -> list[str]:
        keys = await self._medium.list_all_keys()
        return [key for key in keys if key.startswith(self._prefix)]

    # -------------------------------------------------------------------------
    # Metrics Record
    # -------------------------------------------------------------------------

    async def save_metrics(self, snapshot: dict[str, Any]) -> bool:
        """Persist a metrics snapshot under the metrics key."""
        try:
            await self._medium.set(self._metrics_key, orjson.dumps(snapshot).decode("utf-8"))
            return True
        except Exception as e:
            log_stage(logger, Stage.METRICS, "Failed to persist cache metrics", level="warning", error=str(e))
            return False

    async def load_metrics(self) -> dict[str, Any] | None:
        try:
            raw = await self._medium.get(self._metrics_key)
            return orjson.loads(raw) if raw is not None else None
        except Exception as e:
            log_stage(logger, Stage.METRICS, "Failed to load cache metrics", level="warning", error=str(e))
            return None

    async def clear_metrics(self) -> None:
        try:
            await self._medium.remove(self._metrics_key)
        except Exception as e:
            log_stage(logger, Stage.METRICS, "Error resetting durable cache metrics", level="error", error=str(e))
