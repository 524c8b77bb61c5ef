"""
Network Exceptions
"""

from tiered_cache.core.exceptions.base import TieredCacheError


class NetworkError(TieredCacheError):
    """Base exception for connectivity problems."""
    pass


class NetworkUnavailableError(NetworkError):
    """
    Returned when the network is unreachable and no stale value may be served.

    The fetch function is not invoked on this path.
    """
    pass
