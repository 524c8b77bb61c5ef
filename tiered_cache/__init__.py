"""
Tiered Read-Through Cache

Serves values from an in-process fast tier, then a durable tier, then the
remote source, with TTL freshness, bounded retries and an offline stale-data
fallback for critical reads.

Usage:
    from tiered_cache import CacheManager, CacheOptions, RedisMedium

    medium = RedisMedium()
    await medium.connect()
    cache = CacheManager.from_settings(medium=medium)

    result = await cache.read_through("user:42", fetch_user, CacheOptions(critical_data=True))
"""

from tiered_cache.core.exceptions import (
    ApplicationError,
    NetworkUnavailableError,
    StaleDataWarning,
    TieredCacheError,
    TransportError,
)
from tiered_cache.core.models import CacheOptions, CachePerformanceMetrics, CacheResult, FetchResult
from tiered_cache.infrastructure.cache import (
    CacheManager,
    DurableStore,
    FastStore,
    RedisMedium,
    close_cache,
    get_cache_manager,
    init_cache,
)
from tiered_cache.infrastructure.monitoring import CacheMetricsCollector, MetricsResetScheduler
from tiered_cache.infrastructure.network import HttpReachabilityProbe, NetworkMonitor

__version__ = "1.0.0"

__all__ = [
    "CacheManager",
    "CacheOptions",
    "CacheResult",
    "FetchResult",
    "CachePerformanceMetrics",
    "FastStore",
    "DurableStore",
    "RedisMedium",
    "NetworkMonitor",
    "HttpReachabilityProbe",
    "CacheMetricsCollector",
    "MetricsResetScheduler",
    "TieredCacheError",
    "TransportError",
    "ApplicationError",
    "NetworkUnavailableError",
    "StaleDataWarning",
    "get_cache_manager",
    "init_cache",
    "close_cache",
]
