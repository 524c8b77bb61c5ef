"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions
inherit from. Specialized exceptions live in their themed modules.
"""

from typing import Any


class TieredCacheError(Exception):
    """
    Base exception for all tiered cache errors.

    Instances are raised internally and also returned to callers inside a
    ``CacheResult``; the read-through API never raises them itself.

    Attributes:
        message: Error message
        key: Cache key the error concerns (if any)
        details: Additional error details (dict)

    Example:
        TransportError(
            "Failed to fetch data after retries",
            key="query_cache_user:42",
            details={"attempts": 3, "original_error": "ConnectError"},
        )
    """

    def __init__(
        self, message: str, key: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.key = key
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, key, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "key": self.key,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "TieredCacheError":
        """Add a suggestion to help users fix the error."""
        self.details["suggestion"] = suggestion
        return self

    def with_context(self, **context) -> "TieredCacheError":
        """Add additional context to the error details."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        """
        Return detailed string representation for debugging.

        Example:
            >>> repr(NetworkUnavailableError("offline", key="query_cache_a"))
            "NetworkUnavailableError(message='offline', key='query_cache_a')"
        """
        details_str = f", details={self.details}" if self.details else ""
        key_str = f", key='{self.key}'" if self.key else ""
        return f"{self.__class__.__name__}(message='{self.message}'{key_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        key: str | None = None,
        **details
    ) -> "TieredCacheError":
        """
        Create an error of this class from another exception.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            key: Cache key for correlation
            **details: Additional context to include

        Example:
            >>> try:
            ...     await medium.get(key)
            ... except OSError as e:
            ...     raise TierReadError.from_exception(e, key=key, tier="durable")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, key=key, details=error_details)


class ConfigurationError(TieredCacheError):
    """Raised when configuration is invalid or missing."""
    pass
