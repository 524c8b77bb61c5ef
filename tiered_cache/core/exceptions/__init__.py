"""
Exception Module

Structured exception hierarchy for the tiered read-through cache.

Module Structure:
-----------------
- **base.py**: TieredCacheError base class + ConfigurationError
- **cache.py**: Tier read/write/serialization errors and StaleDataWarning
- **fetch.py**: Remote fetch failures (transport vs. application)
- **network.py**: Connectivity errors
- **monitoring.py**: Metrics recording errors

Only TransportError, ApplicationError and NetworkUnavailableError reach
callers as failures; they arrive inside ``CacheResult.error`` rather than
being raised, alongside StaleDataWarning for degraded successes.

Usage:
------
```python
from tiered_cache.core.exceptions import ApplicationError, NetworkUnavailableError

result = await cache.read_through("user:42", fetch_user)
if isinstance(result.error, NetworkUnavailableError):
    ...
```
"""

# Base exception
from tiered_cache.core.exceptions.base import ConfigurationError, TieredCacheError

# Cache exceptions
from tiered_cache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    StaleDataWarning,
    TierReadError,
    TierWriteError,
)

# Fetch exceptions
from tiered_cache.core.exceptions.fetch import ApplicationError, FetchError, TransportError

# Monitoring exceptions
from tiered_cache.core.exceptions.monitoring import MetricsRecordingError

# Network exceptions
from tiered_cache.core.exceptions.network import NetworkError, NetworkUnavailableError

__all__ = [
    # Base
    "TieredCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "TierReadError",
    "TierWriteError",
    "CacheSerializationError",
    "StaleDataWarning",
    # Fetch
    "FetchError",
    "TransportError",
    "ApplicationError",
    # Network
    "NetworkError",
    "NetworkUnavailableError",
    # Monitoring
    "MetricsRecordingError",
]
