"""
Core Module

Foundational components: configuration, logging, exceptions, models and
collaborator protocols.
"""

from .exceptions import (
    ApplicationError,
    CacheError,
    ConfigurationError,
    MetricsRecordingError,
    NetworkUnavailableError,
    StaleDataWarning,
    TieredCacheError,
    TierReadError,
    TransportError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)
from .models import (
    CacheEntry,
    CacheOptions,
    CachePerformanceMetrics,
    CacheResult,
    FetchResult,
)

__all__ = [
    # Exceptions
    "TieredCacheError",
    "ConfigurationError",
    "CacheError",
    "TierReadError",
    "StaleDataWarning",
    "TransportError",
    "ApplicationError",
    "NetworkUnavailableError",
    "MetricsRecordingError",
    # Logging
    "get_logger",
    "setup_logging",
    "log_stage",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    # Models
    "CacheEntry",
    "CacheOptions",
    "CacheResult",
    "CachePerformanceMetrics",
    "FetchResult",
]
