"""
System Constants and Enumerations

This module defines the constants and enumerations shared by every tier of
the read-through cache.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage and outcome labels
- Settings fall back to these values when no environment override exists
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Read-through stages used as the ``stage`` field of every log entry.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    The numeric stages follow the order of a single ``read_through`` call.
    Alphabetic prefixes mark cross-cutting work (durable store maintenance,
    metrics, network probing).
    """

    # Read-through lifecycle (strictly ordered within one call)
    INITIALIZATION = "0.0_INITIALIZATION"
    FAST_STORE_LOOKUP = "1.0_FAST_STORE_LOOKUP"
    DURABLE_STORE_LOOKUP = "2.0_DURABLE_STORE_LOOKUP"
    REACHABILITY_CHECK = "3.0_REACHABILITY_CHECK"
    STALE_FALLBACK = "4.0_STALE_FALLBACK"
    OFFLINE_FAILURE = "5.0_OFFLINE_FAILURE"
    REMOTE_FETCH = "6.0_REMOTE_FETCH"
    WRITE_BACK = "7.0_WRITE_BACK"
    APPLICATION_ERROR = "8.0_APPLICATION_ERROR"

    # Cross-cutting concerns
    INVALIDATION = "I_INVALIDATION"
    EVICTION = "E_EVICTION"
    DURABLE_IO = "D_DURABLE_IO"
    NETWORK = "N_NETWORK_PROBE"
    METRICS = "M_METRICS_COLLECTION"
    SHUTDOWN = "S_SHUTDOWN"


class CacheTier(str, Enum):
    """Tier that produced a value."""

    FAST = "fast"
    DURABLE = "durable"
    REMOTE = "remote"


class CacheOutcome(str, Enum):
    """Terminal outcome of a read-through call, as recorded in metrics."""

    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


# ============================================================================
# Cache Defaults
# ============================================================================

# Prefix carried by every key this package manages in the durable medium
CACHE_KEY_PREFIX = "query_cache_"

# Key of the persisted metrics record (deliberately outside the namespace)
CACHE_METRICS_KEY = "cache_performance"

# Entries are fresh while now - stored_at < ttl
DEFAULT_CACHE_TTL = 10 * 60  # seconds

# Durable store item cap enforced by approximate LRU
MAX_CACHE_ITEMS = 300

# Fast store item cap (oldest fraction dropped on overflow)
MEMORY_CACHE_MAX_ITEMS = 300

# enforce_size_limit only scans on roughly 1 in 10 invocations
EVICTION_PROBABILITY = 0.1

# Share of entries removed when the cap is exceeded
EVICTION_FRACTION = 0.2

# Durable reads in flight during a size check; must stay below the medium's
# connection pool size (REDIS_MAX_CONNECTIONS)
EVICTION_READ_CONCURRENCY = 10


# ============================================================================
# Fetch Retry
# ============================================================================

FETCH_MAX_ATTEMPTS = 3
FETCH_RETRY_BASE_DELAY = 1.0  # seconds; waits are base * 2^(attempt-1)


# ============================================================================
# Network Reachability
# ============================================================================

NETWORK_CHECK_TIMEOUT = 3.0  # seconds; expiry counts as reachable
NETWORK_PROBE_URL = "https://clients3.google.com/generate_204"
NETWORK_PROBE_TIMEOUT = 5.0


# ============================================================================
# Monitoring
# ============================================================================

SLOW_QUERY_THRESHOLD_MS = 3000
METRICS_RESET_INTERVAL_HOURS = 24


# ============================================================================
# Error Messages
# ============================================================================

MSG_STALE_DATA = "Using stale data due to network being unavailable"
MSG_NETWORK_UNAVAILABLE = "Network connection unavailable"
MSG_FETCH_FAILED = "Failed to fetch data after retries"
