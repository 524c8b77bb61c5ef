"""
Scheduled Metrics Reset

Runs a reset callback on a fixed cadence (daily by default) so cache
metrics describe a recent window instead of the whole process lifetime.
"""

import asyncio
from collections.abc import Awaitable, Callable

from tiered_cache.core.config.constants import METRICS_RESET_INTERVAL_HOURS, Stage
from tiered_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


class MetricsResetScheduler:
    """
    Background asyncio task that calls ``reset_fn`` every ``interval`` seconds.

    Usage:
        scheduler = MetricsResetScheduler(cache.reset_metrics)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        reset_fn: Callable[[], Awaitable[None]],
        interval: float = METRICS_RESET_INTERVAL_HOURS * 3600,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._reset_fn = reset_fn
        self._interval = interval
        self._task: asyncio.Task | None = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop on the running event loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="metrics-reset-scheduler")
        log_stage(logger, Stage.METRICS, "Metrics reset scheduler started", interval_s=self._interval)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log_stage(logger, Stage.METRICS, "Metrics reset scheduler stopped", runs=self.runs)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._reset_fn()
                self.runs += 1
            except Exception as e:
                log_stage(logger, Stage.METRICS, "Scheduled metrics reset failed", level="error", error=str(e))
