"""
Redis Durable Medium

Backs the durable cache tier with Redis through a pooled ``redis.asyncio``
client. Values are plain strings (``decode_responses=True``); the durable
store adapter owns encoding.

Architecture:
    RedisMedium (DurableMedium implementation)
        ├── connect / disconnect (pool lifecycle)
        ├── get / set / remove / list_all_keys / remove_many
        └── ping / health_check
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from tiered_cache.core.config.constants import Stage
from tiered_cache.core.config.settings import Settings, get_settings
from tiered_cache.core.exceptions import CacheConnectionError
from tiered_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

# Keys fetched per SCAN round-trip
SCAN_BATCH_SIZE = 500


class RedisMedium:
    """
    Durable medium over Redis.

    Entries carry no Redis TTL: freshness is decided by the cache from the
    entry's own ``storedAt``, and stale entries must stay readable for the
    offline fallback. Size is bounded by the durable store's eviction.

    Usage:
        medium = RedisMedium()
        await medium.connect()
        store = DurableStore(medium, key_prefix="query_cache_")
    """

    def __init__(self, settings: Settings | None = None, client: redis.Redis | None = None):
        """
        Args:
            settings: Application settings (defaults to the global instance)
            client: Pre-built client; skips pool creation in ``connect``
        """
        self._settings = settings or get_settings()
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = client
        self._is_connected = client is not None

    async def connect(self) -> None:
        """
        Create the connection pool and verify it with PING.

        Raises:
            CacheConnectionError: If Redis cannot be reached
        """
        if self._is_connected and self._client:
            return

        redis_settings = self._settings.redis
        try:
            self._pool = ConnectionPool(
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
                db=redis_settings.REDIS_DB,
                password=redis_settings.REDIS_PASSWORD,
                max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            await self._client.ping()
            self._is_connected = True

            log_stage(
                logger,
                Stage.INITIALIZATION,
                "Redis medium connected",
                host=redis_settings.REDIS_HOST,
                port=redis_settings.REDIS_PORT,
            )
        except (ConnectionError, TimeoutError) as e:
            log_stage(logger, Stage.INITIALIZATION, "Failed to connect to Redis", level="error", error=str(e))
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": redis_settings.REDIS_HOST, "port": redis_settings.REDIS_PORT},
            )

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        if self._client:
            await self._client.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._is_connected = False

        log_stage(logger, Stage.SHUTDOWN, "Redis medium disconnected")

    def is_connected(self) -> bool:
        return self._is_connected

    # -------------------------------------------------------------------------
    # DurableMedium contract
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await self._require_client().get(key)

    async def set(self, key: str, value: str) -> None:
        await self._require_client().set(key, value)

    async def remove(self, key: str) -> None:
        await self._require_client().delete(key)

    async def list_all_keys(self) -> list[str]:
        """
        Enumerate every key with SCAN.

        SCAN is incremental, so a large keyspace does not block Redis the
        way KEYS would.
        """
        return [key async for key in self._require_client().scan_iter(count=SCAN_BATCH_SIZE)]

    async def remove_many(self, keys: list[str]) -> None:
        if keys:
            await self._require_client().delete(*keys)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def ping(self) -> bool:
        try:
            if self._client and self._is_connected:
                await self._client.ping()
                return True
        except RedisError:
            pass
        return False

    async def health_check(self) -> dict[str, Any]:
        """
        Check Redis health.

        Returns:
            Dict with status, connection flag and ping latency
        """
        health: dict[str, Any] = {
            "status": "healthy",
            "connected": self._is_connected,
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "ping_latency_ms": None,
        }

        if not self._client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await self._client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)

        return health

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise CacheConnectionError("Redis medium is not connected; call connect() first")
        return self._client
