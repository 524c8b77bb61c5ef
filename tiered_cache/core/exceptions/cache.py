"""
Cache-Related Exceptions

Errors raised by the fast and durable tiers, plus the stale-data annotation
returned when a cached value is served without a freshness guarantee.
"""

from tiered_cache.core.exceptions.base import TieredCacheError


class CacheError(TieredCacheError):
    """Base exception for cache-tier errors."""
    pass


class TierReadError(CacheError):
    """
    Raised when a cache tier cannot be read.

    Always recovered locally: the read-through path treats it as a miss on
    that tier and never surfaces it to the caller.
    """
    pass


class TierWriteError(CacheError):
    """Raised when a cache tier cannot be written. Logged, never surfaced."""
    pass


class CacheSerializationError(CacheError):
    """
    Raised when a durable entry cannot be encoded or decoded.

    Common causes:
    - Payload is not JSON-serializable
    - Stored value was written by another application sharing the medium
    - Truncated or corrupt record
    """
    pass


class StaleDataWarning(CacheError):
    """
    Annotation for data served past its TTL while the network is unavailable.

    Not a failure: the accompanying data is usable but may be outdated.
    """
    pass


class CacheConnectionError(CacheError):
    """
    Raised when the durable medium cannot be reached at startup.

    Common causes:
    - Redis server is down
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass
