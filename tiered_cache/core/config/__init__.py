"""
Configuration Module

Centralized, type-safe configuration for the tiered read-through cache.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage identifiers, enums and default values

Usage:
------
```python
from tiered_cache.core.config import get_settings, Stage

settings = get_settings()
prefix = settings.cache.CACHE_KEY_PREFIX
```

Environment Variables:
---------------------
```bash
CACHE_KEY_PREFIX=query_cache_
CACHE_DEFAULT_TTL=600
CACHE_MAX_ITEMS=300
FETCH_MAX_ATTEMPTS=3
NETWORK_CHECK_TIMEOUT=3
REDIS_HOST=localhost
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from tiered_cache.core.config.constants import (
    CACHE_KEY_PREFIX,
    CACHE_METRICS_KEY,
    DEFAULT_CACHE_TTL,
    EVICTION_FRACTION,
    EVICTION_PROBABILITY,
    FETCH_MAX_ATTEMPTS,
    FETCH_RETRY_BASE_DELAY,
    MAX_CACHE_ITEMS,
    MEMORY_CACHE_MAX_ITEMS,
    NETWORK_CHECK_TIMEOUT,
    SLOW_QUERY_THRESHOLD_MS,
    CacheOutcome,
    CacheTier,
    Stage,
)
from tiered_cache.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "CacheTier",
    "CacheOutcome",
    # Defaults
    "CACHE_KEY_PREFIX",
    "CACHE_METRICS_KEY",
    "DEFAULT_CACHE_TTL",
    "MAX_CACHE_ITEMS",
    "MEMORY_CACHE_MAX_ITEMS",
    "EVICTION_PROBABILITY",
    "EVICTION_FRACTION",
    "FETCH_MAX_ATTEMPTS",
    "FETCH_RETRY_BASE_DELAY",
    "NETWORK_CHECK_TIMEOUT",
    "SLOW_QUERY_THRESHOLD_MS",
]
