"""
Unit Tests for Monitoring Infrastructure

Tests the metrics collector and the scheduled reset.
"""

import asyncio

import pytest

from tiered_cache.infrastructure.monitoring.metrics_collector import CACHE_SLOW_READS, CacheMetricsCollector
from tiered_cache.infrastructure.monitoring.reset_scheduler import MetricsResetScheduler


@pytest.mark.unit
class TestCacheMetricsCollector:
    """Test suite for CacheMetricsCollector."""

    @pytest.fixture
    def collector(self):
        return CacheMetricsCollector(slow_query_threshold_ms=3000)

    def test_starts_empty(self, collector):
        snapshot = collector.snapshot()

        assert snapshot.total_requests == 0
        assert snapshot.hit_count == snapshot.miss_count == snapshot.error_count == 0

    def test_exactly_one_counter_per_outcome(self, collector):
        collector.record_outcome(is_hit=True, response_time_ms=1.0)
        collector.record_outcome(is_hit=False, response_time_ms=2.0)
        collector.record_outcome(is_hit=False, response_time_ms=3.0, is_error=True)

        snapshot = collector.snapshot()
        assert snapshot.hit_count == 1
        assert snapshot.miss_count == 1
        assert snapshot.error_count == 1
        assert snapshot.total_requests == 3
        assert snapshot.total_response_time_ms == 6.0
        assert snapshot.avg_response_time_ms == 2.0

    def test_error_takes_precedence_over_hit(self, collector):
        collector.record_outcome(is_hit=True, response_time_ms=1.0, is_error=True)

        snapshot = collector.snapshot()
        assert snapshot.error_count == 1
        assert snapshot.hit_count == 0

    def test_invalid_time_is_swallowed(self, collector):
        """Test that a bad sample never raises and is not counted."""
        collector.record_outcome(is_hit=True, response_time_ms=-5)
        collector.record_outcome(is_hit=True, response_time_ms="fast")

        assert collector.snapshot().total_requests == 0

    def test_slow_read_counted(self, collector):
        before = CACHE_SLOW_READS._value.get()
        collector.record_outcome(is_hit=False, response_time_ms=3500)
        assert CACHE_SLOW_READS._value.get() == before + 1

    def test_reset(self, collector):
        collector.record_outcome(is_hit=True, response_time_ms=1.0)
        first_reset = collector.snapshot().last_reset_at

        collector.reset()

        snapshot = collector.snapshot()
        assert snapshot.total_requests == 0
        assert snapshot.total_response_time_ms == 0.0
        assert snapshot.last_reset_at >= first_reset

    def test_snapshot_is_a_copy(self, collector):
        snapshot = collector.snapshot()
        collector.record_outcome(is_hit=True, response_time_ms=1.0)
        assert snapshot.total_requests == 0


@pytest.mark.unit
class TestMetricsResetScheduler:
    """Test suite for MetricsResetScheduler."""

    def test_rejects_non_positive_interval(self):
        async def reset():
            pass

        with pytest.raises(ValueError):
            MetricsResetScheduler(reset, interval=0)

    @pytest.mark.asyncio
    async def test_runs_reset_on_interval(self):
        calls = []

        async def reset():
            calls.append(1)

        scheduler = MetricsResetScheduler(reset, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert len(calls) >= 2
        assert scheduler.runs == len(calls)
        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_failing_reset_keeps_running(self):
        attempts = []

        async def reset():
            attempts.append(1)
            raise RuntimeError("medium down")

        scheduler = MetricsResetScheduler(reset, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.08)

        assert scheduler.is_running is True
        await scheduler.stop()
        assert len(attempts) >= 2
        assert scheduler.runs == 0

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        async def reset():
            pass

        scheduler = MetricsResetScheduler(reset, interval=60)
        scheduler.start()
        task = scheduler._task
        scheduler.start()

        assert scheduler._task is task
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        async def reset():
            pass

        await MetricsResetScheduler(reset, interval=60).stop()
