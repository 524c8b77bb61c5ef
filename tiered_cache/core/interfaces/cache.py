"""
Collaborator Protocols

Interfaces the cache consumes. Implementations are injected, which keeps the
tiers testable with in-memory doubles.

Architectural Decision: Protocol-based abstraction
- Any string-keyed store can back the durable tier (Redis, files, a
  platform key-value API)
- The reachability probe is a bare async callable so platform checks plug in
  without subclassing
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DurableMedium(Protocol):
    """
    String-keyed persistent store shared across process restarts.

    The medium may hold data other than cache entries; the durable store
    adapter only touches keys carrying its namespace prefix (plus the
    metrics record).

    Implementations:
    - RedisMedium: redis.asyncio backed medium
    - In-memory doubles in tests
    """

    async def get(self, key: str) -> str | None:
        """Return the stored string, or None if absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, overwriting any previous value."""
        ...

    async def remove(self, key: str) -> None:
        """Remove ``key``; removing an absent key is not an error."""
        ...

    async def list_all_keys(self) -> list[str]:
        """Return every key in the medium (not only cache keys)."""
        ...

    async def remove_many(self, keys: list[str]) -> None:
        """Remove all ``keys`` in one operation where the medium allows it."""
        ...


# Platform "am I online" check; latency is unbounded.
ReachabilityProbe = Callable[[], Awaitable[bool]]

# Caller-supplied remote read. Sync or async; returns a FetchResult, a
# {"data", "error"} mapping or a bare payload. Raising means transport failure.
FetchFn = Callable[[], Any]
