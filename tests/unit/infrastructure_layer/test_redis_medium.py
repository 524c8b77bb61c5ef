"""
Unit Tests for RedisMedium

Tests the DurableMedium contract over a mocked redis.asyncio client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tiered_cache.core.exceptions import CacheConnectionError
from tiered_cache.core.interfaces.cache import DurableMedium
from tiered_cache.infrastructure.cache.redis_medium import SCAN_BATCH_SIZE, RedisMedium
from tiered_cache.core.config.settings import Settings


@pytest.fixture
def redis_client():
    """Mock redis.asyncio client."""
    client = AsyncMock()

    async def scan_iter(count=None):
        for key in ["query_cache_a", "other", "query_cache_b"]:
            yield key

    client.scan_iter = MagicMock(side_effect=scan_iter)
    return client


@pytest.fixture
def redis_medium(redis_client):
    return RedisMedium(settings=Settings(), client=redis_client)


@pytest.mark.unit
class TestRedisMediumContract:
    """Test the medium operations."""

    def test_satisfies_durable_medium_protocol(self, redis_medium):
        assert isinstance(redis_medium, DurableMedium)

    @pytest.mark.asyncio
    async def test_get_and_set(self, redis_medium, redis_client):
        redis_client.get.return_value = '{"data": 1, "storedAt": 1}'

        await redis_medium.set("query_cache_a", "value")
        value = await redis_medium.get("query_cache_a")

        redis_client.set.assert_awaited_once_with("query_cache_a", "value")
        assert value == '{"data": 1, "storedAt": 1}'

    @pytest.mark.asyncio
    async def test_set_has_no_expiry(self, redis_medium, redis_client):
        """Test that entries stay readable past TTL for the offline fallback."""
        await redis_medium.set("query_cache_a", "value")
        assert redis_client.set.await_args.kwargs == {}

    @pytest.mark.asyncio
    async def test_remove(self, redis_medium, redis_client):
        await redis_medium.remove("query_cache_a")
        redis_client.delete.assert_awaited_once_with("query_cache_a")

    @pytest.mark.asyncio
    async def test_list_all_keys_uses_scan(self, redis_medium, redis_client):
        keys = await redis_medium.list_all_keys()

        assert keys == ["query_cache_a", "other", "query_cache_b"]
        redis_client.scan_iter.assert_called_once_with(count=SCAN_BATCH_SIZE)

    @pytest.mark.asyncio
    async def test_remove_many_single_delete(self, redis_medium, redis_client):
        await redis_medium.remove_many(["a", "b", "c"])
        redis_client.delete.assert_awaited_once_with("a", "b", "c")

    @pytest.mark.asyncio
    async def test_remove_many_empty_is_noop(self, redis_medium, redis_client):
        await redis_medium.remove_many([])
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_operations_require_connection(self):
        medium = RedisMedium(settings=Settings())
        with pytest.raises(CacheConnectionError):
            await medium.get("query_cache_a")


@pytest.mark.unit
class TestRedisMediumLifecycle:
    """Test connect/disconnect and health."""

    @pytest.mark.asyncio
    async def test_connect_failure_raises_cache_connection_error(self):
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("refused")

        with patch("tiered_cache.infrastructure.cache.redis_medium.redis.Redis", return_value=client):
            medium = RedisMedium(settings=Settings())
            with pytest.raises(CacheConnectionError) as exc_info:
                await medium.connect()

        assert exc_info.value.details["port"] == 6379
        assert medium.is_connected() is False

    @pytest.mark.asyncio
    async def test_connect_success(self):
        client = AsyncMock()

        with patch("tiered_cache.infrastructure.cache.redis_medium.redis.Redis", return_value=client):
            medium = RedisMedium(settings=Settings())
            await medium.connect()

        client.ping.assert_awaited_once()
        assert medium.is_connected() is True

    @pytest.mark.asyncio
    async def test_disconnect(self, redis_medium, redis_client):
        await redis_medium.disconnect()

        redis_client.aclose.assert_awaited_once()
        assert redis_medium.is_connected() is False

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, redis_medium):
        health = await redis_medium.health_check()

        assert health["status"] == "healthy"
        assert health["ping_latency_ms"] is not None

    @pytest.mark.asyncio
    async def test_health_check_ping_failure(self, redis_medium, redis_client):
        redis_client.ping.side_effect = RedisConnectionError("gone")

        health = await redis_medium.health_check()

        assert health["status"] == "unhealthy"
        assert "gone" in health["error"]
        assert await redis_medium.ping() is False

    @pytest.mark.asyncio
    async def test_health_check_without_client(self):
        health = await RedisMedium(settings=Settings()).health_check()
        assert health["status"] == "unhealthy"
