"""
Network Reachability Monitor

Answers "is the network usable right now?" within a bounded time budget.

Policy:
- The platform probe is raced against NETWORK_CHECK_TIMEOUT
- Timeout expiry counts as reachable
- A probe that raises counts as reachable

An undecided check must not hold up a read. Assuming connectivity lets the
fetch that follows fail fast on its own if the network really is down.
"""

import asyncio

import httpx

from tiered_cache.core.config.constants import NETWORK_CHECK_TIMEOUT, Stage
from tiered_cache.core.config.settings import Settings, get_settings
from tiered_cache.core.interfaces.cache import ReachabilityProbe
from tiered_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


class HttpReachabilityProbe:
    """
    Default probe: HEAD request to a well-known endpoint.

    Any HTTP response, whatever its status, proves the network path works.
    Only connect failures and timeouts report offline; other errors
    propagate so the monitor can apply its own policy.
    """

    def __init__(self, url: str, timeout: float, client: httpx.AsyncClient | None = None):
        self._url = url
        self._timeout = timeout
        self._client = client

    async def __call__(self) -> bool:
        try:
            if self._client is not None:
                await self._client.head(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                    await client.head(self._url)
            return True
        except (httpx.NetworkError, httpx.TimeoutException):
            return False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "HttpReachabilityProbe":
        settings = settings or get_settings()
        return cls(settings.network.NETWORK_PROBE_URL, settings.network.NETWORK_PROBE_TIMEOUT)


class NetworkMonitor:
    """
    Wraps a reachability probe with a hard timeout.

    Usage:
        monitor = NetworkMonitor(HttpReachabilityProbe.from_settings())
        if await monitor.is_reachable():
            ...
    """

    def __init__(self, probe: ReachabilityProbe, timeout: float = NETWORK_CHECK_TIMEOUT):
        """
        Args:
            probe: Async callable returning True when online
            timeout: Seconds to wait before assuming reachable
        """
        self._probe = probe
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def is_reachable(self) -> bool:
        """
        Return the probe's answer, or True if it is late or fails.

        Never raises (except on cancellation of the calling task).
        """
        try:
            return bool(await asyncio.wait_for(self._probe(), timeout=self._timeout))
        except asyncio.TimeoutError:
            log_stage(
                logger,
                Stage.NETWORK,
                "Network check timed out, assuming reachable",
                level="debug",
                timeout_s=self._timeout,
            )
            return True
        except Exception as e:
            log_stage(logger, Stage.NETWORK, "Error checking network", level="warning", error=str(e))
            return True
