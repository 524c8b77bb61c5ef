"""
Unit Tests for Network Reachability

Tests the bounded-time monitor policy and the HTTP probe.
"""

import asyncio
import time
from unittest.mock import AsyncMock

import httpx
import pytest

from tests.test_fixtures.cache_factory import StubProbe
from tiered_cache.infrastructure.network.reachability import HttpReachabilityProbe, NetworkMonitor


@pytest.mark.unit
class TestNetworkMonitor:
    """Test the timeout and failure policy."""

    @pytest.mark.asyncio
    async def test_returns_probe_answer(self):
        assert await NetworkMonitor(StubProbe(online=True), timeout=1).is_reachable() is True
        assert await NetworkMonitor(StubProbe(online=False), timeout=1).is_reachable() is False

    @pytest.mark.asyncio
    async def test_slow_probe_counts_as_reachable(self):
        """Test that timeout expiry answers True within the budget."""

        async def hanging_probe():
            await asyncio.sleep(10)
            return False

        monitor = NetworkMonitor(hanging_probe, timeout=0.05)
        start = time.perf_counter()

        assert await monitor.is_reachable() is True
        assert time.perf_counter() - start < 1.0

    @pytest.mark.asyncio
    async def test_failing_probe_counts_as_reachable(self):
        async def broken_probe():
            raise RuntimeError("platform API unavailable")

        assert await NetworkMonitor(broken_probe, timeout=1).is_reachable() is True

    def test_timeout_property(self):
        assert NetworkMonitor(StubProbe(), timeout=2.5).timeout == 2.5


@pytest.mark.unit
class TestHttpReachabilityProbe:
    """Test the default HTTP probe."""

    @pytest.mark.asyncio
    async def test_any_response_is_online(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.head.return_value = httpx.Response(503)

        probe = HttpReachabilityProbe("https://probe.test", timeout=1, client=client)

        assert await probe() is True
        client.head.assert_awaited_once_with("https://probe.test", timeout=1)

    @pytest.mark.asyncio
    async def test_connect_error_is_offline(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.head.side_effect = httpx.ConnectError("no route")

        assert await HttpReachabilityProbe("https://probe.test", timeout=1, client=client)() is False

    @pytest.mark.asyncio
    async def test_timeout_is_offline(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        client.head.side_effect = httpx.ReadTimeout("slow")

        assert await HttpReachabilityProbe("https://probe.test", timeout=1, client=client)() is False

    @pytest.mark.asyncio
    async def test_mock_transport_without_injected_client(self, monkeypatch):
        """Test the self-managed client path through httpx's mock transport."""
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        original_client = httpx.AsyncClient

        def client_factory(*args, **kwargs):
            return original_client(*args, transport=transport, **kwargs)

        monkeypatch.setattr("tiered_cache.infrastructure.network.reachability.httpx.AsyncClient", client_factory)

        assert await HttpReachabilityProbe("https://probe.test", timeout=1)() is True

    def test_from_settings(self, mock_settings):
        probe = HttpReachabilityProbe.from_settings(mock_settings)
        assert probe._url == "https://probe.test/generate_204"
        assert probe._timeout == 5.0
