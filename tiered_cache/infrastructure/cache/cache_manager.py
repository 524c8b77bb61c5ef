#!/usr/bin/env python3
"""
Tiered Read-Through Cache Manager

Architecture:
    CacheManager (Public API)
        ├── FastStore (in-process tier)
        ├── DurableStore (persistent tier over a DurableMedium)
        ├── NetworkMonitor (bounded reachability check)
        ├── RemoteFetcher (retry with exponential backoff)
        └── CacheMetricsCollector (hit/miss/error counters)

Read-through, per call:
    1. Fast store, if fresh                      -> hit
    2. Durable store, if fresh (promote to fast) -> hit
    3. Reachability check
    4. Offline + critical: newest stale value    -> StaleDataWarning
    5. Offline otherwise                         -> NetworkUnavailableError
    6. Fetch, up to 3 attempts (1s, 2s backoff)  -> TransportError when exhausted
    7. Success: write back to both tiers         -> miss
    8. Fetch reported an error: no write-back    -> ApplicationError

Concurrent calls for the same key are not coalesced: each runs the full
sequence and the last write wins in both tiers.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from tiered_cache.core.config.constants import (
    DEFAULT_CACHE_TTL,
    FETCH_MAX_ATTEMPTS,
    FETCH_RETRY_BASE_DELAY,
    MAX_CACHE_ITEMS,
    MSG_FETCH_FAILED,
    MSG_NETWORK_UNAVAILABLE,
    MSG_STALE_DATA,
    CacheTier,
    Stage,
)
from tiered_cache.core.config.settings import Settings, get_settings
from tiered_cache.core.exceptions import (
    ApplicationError,
    NetworkUnavailableError,
    StaleDataWarning,
    TierReadError,
    TransportError,
)
from tiered_cache.core.interfaces.cache import DurableMedium, FetchFn, ReachabilityProbe
from tiered_cache.core.logging.logger import get_logger, log_stage, request_context
from tiered_cache.core.models import (
    CacheEntry,
    CacheOptions,
    CachePerformanceMetrics,
    CacheResult,
    FetchResult,
    epoch_ms,
)
from tiered_cache.infrastructure.cache.durable_store import DurableStore
from tiered_cache.infrastructure.cache.fast_store import FastStore
from tiered_cache.infrastructure.cache.redis_medium import RedisMedium
from tiered_cache.infrastructure.monitoring.metrics_collector import CacheMetricsCollector
from tiered_cache.infrastructure.network.reachability import HttpReachabilityProbe, NetworkMonitor

logger = get_logger(__name__)


# =============================================================================
# REMOTE FETCH WITH RETRY
# =============================================================================


class RemoteFetcher:
    """
    Invokes a fetch function with bounded retries.

    Retry Strategy (tenacity):
    - Only raised exceptions are retried; a returned error is a result
    - Up to ``max_attempts`` calls in total
    - Wait ``base_delay * 2^(attempt-1)`` between calls (1s, 2s by default)
    - After the last failure the exception is wrapped in TransportError

    ``sleep`` is injectable so tests can observe the backoff without waiting.
    """

    def __init__(
        self,
        max_attempts: int = FETCH_MAX_ATTEMPTS,
        base_delay: float = FETCH_RETRY_BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def fetch(self, fetch_fn: FetchFn, key: str | None = None) -> Any:
        """
        Call ``fetch_fn`` until it returns or attempts run out.

        Raises:
            TransportError: If every attempt raised
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._base_delay, min=0),
            retry=retry_if_exception_type(Exception),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return await self._invoke(fetch_fn)
        except Exception as e:
            raise TransportError.from_exception(e, message=MSG_FETCH_FAILED, key=key, attempts=attempts)

    @staticmethod
    async def _invoke(fetch_fn: FetchFn) -> Any:
        result = fetch_fn()
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log_stage(
            logger,
            Stage.REMOTE_FETCH,
            "Fetch failed, backing off",
            level="warning",
            attempt=retry_state.attempt_number,
            delay_s=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            error=str(error),
        )


# =============================================================================
# PUBLIC API
# =============================================================================


class CacheManager:
    """
    Read-through cache over a fast and a durable tier.

    Usage:
        cache = CacheManager.from_settings(medium=RedisMedium())
        result = await cache.read_through("user:42", fetch_user, CacheOptions(ttl=900))
        if result.ok:
            render(result.data)
        elif result.is_stale:
            render(result.data, banner="offline")

    All collaborators are injected; ``from_settings`` wires the defaults.
    """

    def __init__(
        self,
        fast_store: FastStore,
        durable_store: DurableStore,
        network_monitor: NetworkMonitor,
        metrics: CacheMetricsCollector,
        fetcher: RemoteFetcher | None = None,
        key_prefix: str = "",
        default_ttl: float = DEFAULT_CACHE_TTL,
        max_items: int = MAX_CACHE_ITEMS,
        clock: Callable[[], int] = epoch_ms,
        app_info: dict[str, str] | None = None,
    ):
        """
        Args:
            fast_store: In-process tier
            durable_store: Persistent tier
            network_monitor: Reachability check with its own timeout
            metrics: Collector receiving one outcome per call
            fetcher: Retry policy for remote fetches
            key_prefix: Namespace prefix prepended to logical names
            default_ttl: Freshness window (seconds) when options carry none
            max_items: Durable tier cap passed to enforce_size_limit
            clock: Time source for freshness checks (epoch ms)
            app_info: Service name, version and environment for health reports
        """
        self._fast = fast_store
        self._durable = durable_store
        self._network = network_monitor
        self._metrics = metrics
        self._fetcher = fetcher or RemoteFetcher()
        self._prefix = key_prefix
        self._default_ttl = default_ttl
        self._max_items = max_items
        self._clock = clock
        self._app_info = app_info
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        medium: DurableMedium,
        probe: ReachabilityProbe | None = None,
        metrics: CacheMetricsCollector | None = None,
        settings: Settings | None = None,
    ) -> "CacheManager":
        """Build a manager and its tiers from configuration."""
        settings = settings or get_settings()
        cache_settings = settings.cache
        retry_settings = settings.retry
        app_settings = settings.app

        prefix = cache_settings.CACHE_KEY_PREFIX
        manager = cls(
            fast_store=FastStore(
                key_prefix=prefix,
                max_items=cache_settings.CACHE_MEMORY_MAX_ITEMS,
                eviction_fraction=cache_settings.CACHE_EVICTION_FRACTION,
            ),
            durable_store=DurableStore(
                medium,
                key_prefix=prefix,
                metrics_key=cache_settings.CACHE_METRICS_KEY,
                eviction_probability=cache_settings.CACHE_EVICTION_PROBABILITY,
                eviction_fraction=cache_settings.CACHE_EVICTION_FRACTION,
                read_concurrency=cache_settings.CACHE_EVICTION_READ_CONCURRENCY,
            ),
            network_monitor=NetworkMonitor(
                probe or HttpReachabilityProbe.from_settings(settings),
                timeout=settings.network.NETWORK_CHECK_TIMEOUT,
            ),
            metrics=metrics or CacheMetricsCollector(settings.monitoring.SLOW_QUERY_THRESHOLD_MS),
            fetcher=RemoteFetcher(
                max_attempts=retry_settings.FETCH_MAX_ATTEMPTS,
                base_delay=retry_settings.FETCH_RETRY_BASE_DELAY,
            ),
            key_prefix=prefix,
            default_ttl=cache_settings.CACHE_DEFAULT_TTL,
            max_items=cache_settings.CACHE_MAX_ITEMS,
            app_info={
                "name": app_settings.APP_NAME,
                "version": app_settings.APP_VERSION,
                "environment": app_settings.ENVIRONMENT,
            },
        )

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Cache manager initialized",
            key_prefix=prefix,
            default_ttl_s=cache_settings.CACHE_DEFAULT_TTL,
            max_items=cache_settings.CACHE_MAX_ITEMS,
        )
        return manager

    # -------------------------------------------------------------------------
    # Read-Through
    # -------------------------------------------------------------------------

    async def read_through(
        self,
        key: str,
        fetch_fn: FetchFn,
        options: CacheOptions | None = None,
    ) -> CacheResult:
        """
        Return the value for ``key`` from cache or from ``fetch_fn``.

        Args:
            key: Logical name (the namespace prefix is added here)
            fetch_fn: Remote read; sync or async, may raise or return an error
            options: Per-call policy; defaults apply when omitted

        Returns:
            CacheResult. ``read_through`` itself does not raise for cache,
            network or fetch failures; they are reported in ``result.error``.
        """
        options = options or CacheOptions()
        ttl = options.ttl if options.ttl is not None else self._default_ttl
        cache_key = self.build_key(key)
        start = time.perf_counter()

        with request_context(), structlog.contextvars.bound_contextvars(cache_key=key):
            if not options.force_refresh:
                entry = self._read_fast(cache_key)
                if entry is not None and entry.is_fresh(ttl, self._clock()):
                    log_stage(logger, Stage.FAST_STORE_LOOKUP, "Fast store hit", level="debug")
                    self._record(start, is_hit=True)
                    return CacheResult(data=entry.data, from_cache=True, tier=CacheTier.FAST)

                if options.persist_to_storage:
                    entry = await self._durable.get(cache_key)
                    if entry is not None and entry.is_fresh(ttl, self._clock()):
                        self._fast.put_entry(entry)
                        log_stage(logger, Stage.DURABLE_STORE_LOOKUP, "Durable store hit, promoted", level="debug")
                        self._record(start, is_hit=True)
                        return CacheResult(data=entry.data, from_cache=True, tier=CacheTier.DURABLE)

            log_stage(logger, Stage.REACHABILITY_CHECK, "Cache miss, checking network", level="debug")
            if not await self._network.is_reachable():
                return await self._serve_offline(key, cache_key, options, start)

            try:
                raw = await self._fetcher.fetch(fetch_fn, key=key)
            except TransportError as e:
                log_stage(logger, Stage.REMOTE_FETCH, "Fetch failed after retries", level="error", error=e.to_dict())
                self._record(start, is_error=True)
                return CacheResult(error=e)

            result = FetchResult.coerce(raw)
            if result.error is not None:
                error = self._application_error(key, result.error)
                log_stage(logger, Stage.APPLICATION_ERROR, "Fetch returned an error", level="warning",
                          error=error.message)
                self._record(start, is_error=True)
                return CacheResult(error=error)

            if result.data is not None:
                await self._write_back(cache_key, result.data, options)

            self._record(start, is_hit=False)
            return CacheResult(data=result.data, from_cache=False, tier=CacheTier.REMOTE)

    async def _serve_offline(
        self, key: str, cache_key: str, options: CacheOptions, start: float
    ) -> CacheResult:
        if options.critical_data:
            entry, tier = self._read_fast(cache_key), CacheTier.FAST
            if entry is None and options.persist_to_storage:
                entry, tier = await self._durable.get(cache_key), CacheTier.DURABLE

            if entry is not None:
                age_ms = entry.age_ms(self._clock())
                log_stage(logger, Stage.STALE_FALLBACK, "Network unavailable, serving stale cache",
                          level="warning", tier=tier.value, age_ms=age_ms)
                self._record(start, is_hit=True)
                warning = StaleDataWarning(MSG_STALE_DATA, key=key, details={"tier": tier.value, "age_ms": age_ms})
                return CacheResult(data=entry.data, error=warning, from_cache=True, tier=tier)

        log_stage(logger, Stage.OFFLINE_FAILURE, "Network unavailable, no data served", level="warning")
        self._record(start, is_error=True)
        return CacheResult(error=NetworkUnavailableError(MSG_NETWORK_UNAVAILABLE, key=key))

    async def _write_back(self, cache_key: str, data: Any, options: CacheOptions) -> None:
        self._fast.set(cache_key, data)

        if options.persist_to_storage:
            await self._durable.set(cache_key, data)
            self._schedule_eviction()

        log_stage(logger, Stage.WRITE_BACK, "Cache populated", level="debug",
                  persisted=options.persist_to_storage)

    def _read_fast(self, cache_key: str) -> CacheEntry | None:
        try:
            return self._fast.get(cache_key)
        except Exception as e:
            error = TierReadError.from_exception(e, key=cache_key, tier="fast")
            log_stage(logger, Stage.FAST_STORE_LOOKUP, "Fast store read failed", level="warning",
                      error=error.to_dict())
            return None

    def _schedule_eviction(self) -> None:
        task = asyncio.create_task(self._durable.enforce_size_limit(self._max_items))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _record(self, start: float, is_hit: bool = False, is_error: bool = False) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        try:
            self._metrics.record_outcome(is_hit, elapsed_ms, is_error)
        except Exception as e:
            log_stage(logger, Stage.METRICS, "Failed to track cache metrics", level="warning", error=str(e))

    @staticmethod
    def _application_error(key: str, error: Any) -> ApplicationError:
        if isinstance(error, ApplicationError):
            return error
        if isinstance(error, Mapping) and error.get("message"):
            message = str(error["message"])
        else:
            message = str(error) or error.__class__.__name__
        return ApplicationError(message, key=key, details={"error": error})

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def build_key(self, name: str) -> str:
        """Namespace a logical name."""
        return f"{self._prefix}{name}"

    async def invalidate(self, key_or_pattern: str) -> int:
        """
        Remove a key, or every key matching a pattern, from both tiers.

        A pattern contains ``*``; the ``*`` characters are dropped and the
        remainder is matched as a substring of the un-prefixed logical name
        (``"user:*"`` removes ``user:1`` and ``user:2`` but not ``order:1``).

        Returns:
            Number of durable entries removed for patterns; for single keys,
            1 if the fast store held the key, else 0
        """
        if "*" in key_or_pattern:
            pattern = key_or_pattern.replace("*", "")
            removed_fast = self._fast.remove_matching(pattern)
            removed_durable = await self._durable.remove_matching(pattern)
            log_stage(logger, Stage.INVALIDATION, "Cache pattern invalidated", pattern=pattern,
                      fast_removed=removed_fast, durable_removed=removed_durable)
            return removed_durable

        cache_key = self.build_key(key_or_pattern)
        removed = self._fast.remove(cache_key)
        await self._durable.remove_key(cache_key)
        log_stage(logger, Stage.INVALIDATION, "Cache key invalidated", cache_key=key_or_pattern)
        return int(removed)

    async def clear_all(self) -> None:
        """Remove every namespaced entry from both tiers."""
        self._fast.clear()
        removed = await self._durable.clear_all_namespaced()
        log_stage(logger, Stage.INVALIDATION, "Cache cleared", durable_removed=removed)

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def get_metrics(self) -> CachePerformanceMetrics:
        return self._metrics.snapshot()

    async def reset_metrics(self) -> None:
        """Reset in-process counters and drop the persisted metrics record."""
        self._metrics.reset()
        await self._durable.clear_metrics()

    async def persist_metrics(self) -> bool:
        """Write the current snapshot to the durable medium."""
        snapshot = self._metrics.snapshot()
        payload = snapshot.model_dump(mode="json")
        payload["avg_response_time_ms"] = snapshot.avg_response_time_ms
        return await self._durable.save_metrics(payload)

    # -------------------------------------------------------------------------
    # Lifecycle & Health
    # -------------------------------------------------------------------------

    async def wait_for_background_tasks(self) -> None:
        """Wait for scheduled size-limit checks to finish."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def shutdown(self) -> None:
        """Drain background work and drop the fast tier."""
        await self.wait_for_background_tasks()
        self._fast.clear()
        log_stage(logger, Stage.SHUTDOWN, "Cache manager shutdown")

    async def health_check(self) -> dict[str, Any]:
        """
        Report tier and network status.

        Returns:
            Dict with overall status plus fast, durable and network sections,
            and a service section when app_info was given
        """
        fast_size = self._fast.get_size()
        fast_max = self._fast.get_max_size()
        health: dict[str, Any] = {
            "status": "healthy",
            "fast": {
                "status": "healthy",
                "size": fast_size,
                "max_size": fast_max,
                "capacity_utilization": round(fast_size / fast_max * 100, 2) if fast_max else 0.0,
            },
            "durable": {"status": "unknown"},
            "network": {"reachable": await self._network.is_reachable()},
        }
        if self._app_info:
            health["service"] = dict(self._app_info)

        medium = self._durable.medium
        health_fn = getattr(medium, "health_check", None)
        ping_fn = getattr(medium, "ping", None)
        try:
            if health_fn is not None:
                health["durable"] = await health_fn()
            elif ping_fn is not None:
                health["durable"] = {"status": "healthy" if await ping_fn() else "unhealthy"}
        except Exception as e:
            health["durable"] = {"status": "error", "error": str(e)}

        if health["durable"].get("status") not in ("healthy", "unknown"):
            health["status"] = "degraded"
        if not health["network"]["reachable"]:
            health["status"] = "degraded"

        return health


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache_manager: CacheManager | None = None
_redis_medium: RedisMedium | None = None


def get_cache_manager() -> CacheManager:
    """
    Get the application-wide cache manager backed by Redis.

    Tests should construct ``CacheManager`` directly with their own
    collaborators instead.
    """
    global _cache_manager, _redis_medium

    if _cache_manager is None:
        _redis_medium = RedisMedium()
        _cache_manager = CacheManager.from_settings(medium=_redis_medium)

    return _cache_manager


async def init_cache() -> CacheManager:
    """Build the global manager and connect its Redis medium."""
    manager = get_cache_manager()
    if _redis_medium is not None:
        await _redis_medium.connect()
    return manager


async def close_cache() -> None:
    """Shutdown the global cache manager and disconnect Redis."""
    global _cache_manager, _redis_medium

    if _cache_manager:
        await _cache_manager.shutdown()
    if _redis_medium:
        await _redis_medium.disconnect()

    _cache_manager = None
    _redis_medium = None
