"""
Remote Fetch Exceptions

Failures of the caller-supplied fetch function. Transport failures are
retried; application failures are deterministic and returned immediately.
"""

from tiered_cache.core.exceptions.base import TieredCacheError


class FetchError(TieredCacheError):
    """Base exception for remote fetch failures."""
    pass


class TransportError(FetchError):
    """
    Raised when the fetch function kept raising until retries ran out.

    ``details`` carries ``attempts`` and the wrapped exception's type/message.
    """
    pass


class ApplicationError(FetchError):
    """
    The fetch function completed but reported a logical error
    (not found, forbidden, a remote 4xx/5xx). Never retried, never cached.

    ``details["error"]`` holds the error object the fetch function returned.
    """
    pass
