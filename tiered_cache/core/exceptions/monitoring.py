"""
Monitoring Exceptions
"""

from tiered_cache.core.exceptions.base import TieredCacheError


class MetricsRecordingError(TieredCacheError):
    """
    Raised when a metrics update fails.

    Always swallowed by the collector; a metrics failure never changes the
    result already determined for the caller.
    """
    pass
