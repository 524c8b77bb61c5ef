"""
Cache Data Models

Pydantic models shared by the tiers and the read-through orchestrator.
Payloads are opaque: the cache stores whatever JSON-serializable value the
fetch function produced and never inspects it.
"""

import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tiered_cache.core.config.constants import CacheTier
from tiered_cache.core.exceptions import StaleDataWarning, TieredCacheError


def epoch_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class CacheEntry(BaseModel):
    """
    A value held by one of the cache tiers.

    ``stored_at`` is stamped once, by the tier that wrote the entry, using
    that tier's clock.
    """
    model_config = ConfigDict(frozen=True)

    key: str
    data: Any
    stored_at: int = Field(..., description="Write time in epoch milliseconds")

    def age_ms(self, now: int) -> int:
        return now - self.stored_at

    def is_fresh(self, ttl: float, now: int) -> bool:
        """True while ``now - stored_at`` is below ``ttl`` seconds."""
        return self.age_ms(now) < ttl * 1000


class CacheOptions(BaseModel):
    """
    Per-call read-through options.

    ``ttl`` of None means the manager's configured default.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    ttl: float | None = Field(default=None, gt=0, description="Freshness window in seconds")
    force_refresh: bool = Field(default=False, description="Skip both read tiers")
    critical_data: bool = Field(default=False, description="Serve stale data when offline")
    persist_to_storage: bool = Field(default=True, description="Use the durable tier")


class FetchResult(BaseModel):
    """
    What a fetch function returns: data, or a logical error, never both used.

    A non-None ``error`` marks an application failure that is returned to
    the caller without retrying.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Any = None
    error: Any = None

    @classmethod
    def coerce(cls, value: Any) -> "FetchResult":
        """
        Normalize a fetch function's return value.

        Accepts a FetchResult, an envelope, or a bare payload (treated as data).

        Envelopes are mappings that carry an ``"error"`` key, or whose keys
        are a subset of ``{"data", "error"}``, and objects exposing both
        ``data`` and ``error`` attributes. Extra envelope keys such as a
        status code are ignored.
        """
        if isinstance(value, FetchResult):
            return value
        if isinstance(value, Mapping):
            if "error" in value or (value and set(value) <= {"data", "error"}):
                return cls(data=value.get("data"), error=value.get("error"))
            return cls(data=value)
        if hasattr(value, "data") and hasattr(value, "error"):
            return cls(data=value.data, error=value.error)
        return cls(data=value)


class CacheResult(BaseModel):
    """
    Outcome of ``read_through``.

    Failures and the stale-data annotation are carried in ``error`` so the
    caller can tell "wrong" (ApplicationError), "offline"
    (NetworkUnavailableError), "gave up" (TransportError) and "possibly
    outdated" (StaleDataWarning) apart.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Any = None
    error: TieredCacheError | None = None
    from_cache: bool = False
    tier: CacheTier | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_stale(self) -> bool:
        return isinstance(self.error, StaleDataWarning)


class CachePerformanceMetrics(BaseModel):
    """Point-in-time copy of the collector's counters."""
    model_config = ConfigDict(frozen=True)

    hit_count: int = 0
    miss_count: int = 0
    error_count: int = 0
    total_requests: int = 0
    total_response_time_ms: float = 0.0
    last_reset_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def avg_response_time_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_response_time_ms / self.total_requests

    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.hit_count / self.total_requests
