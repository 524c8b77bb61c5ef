#!/usr/bin/env python3
"""
Cache Metrics Collector with Prometheus Integration

Accumulates hit/miss/error counts and response-time totals for the
read-through cache. Counters live in the collector instance (resettable,
snapshot-able) and are mirrored to Prometheus metrics for scraping.

Architectural Decision: explicit, injectable collector
- The orchestrator receives its collector at construction
- Tests build a fresh collector per case
- Prometheus series are process-wide and monotonic; ``reset()`` only
  zeroes the in-instance counters

Recording never raises: a metrics failure must not alter the outcome
already decided for the caller.
"""

import threading
from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from tiered_cache.core.config.constants import SLOW_QUERY_THRESHOLD_MS, CacheOutcome, Stage
from tiered_cache.core.exceptions import MetricsRecordingError
from tiered_cache.core.logging.logger import get_logger, log_stage
from tiered_cache.core.models import CachePerformanceMetrics

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

CACHE_REQUESTS = Counter(
    'tiered_cache_requests_total',
    'Read-through calls by terminal outcome',
    ['outcome']  # hit, miss, error
)

CACHE_RESPONSE_TIME = Histogram(
    'tiered_cache_response_time_seconds',
    'Read-through call duration in seconds',
    ['outcome'],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

CACHE_SLOW_READS = Counter(
    'tiered_cache_slow_reads_total',
    'Read-through calls slower than the slow query threshold'
)


class CacheMetricsCollector:
    """
    Thread-safe cache performance counters.

    Outcome classification (exactly one counter per call):
    - error: the call ended in a failure returned to the caller
    - hit: served from a cache tier
    - miss: required a live fetch

    Usage:
        metrics = CacheMetricsCollector()
        metrics.record_outcome(is_hit=True, response_time_ms=0.4)
        snapshot = metrics.snapshot()
    """

    def __init__(self, slow_query_threshold_ms: float = SLOW_QUERY_THRESHOLD_MS):
        self._lock = threading.Lock()
        self._slow_query_threshold_ms = slow_query_threshold_ms
        self._hits = 0
        self._misses = 0
        self._errors = 0
        self._total_requests = 0
        self._total_response_time_ms = 0.0
        self._last_reset_at = datetime.now(timezone.utc)

    def record_outcome(self, is_hit: bool, response_time_ms: float, is_error: bool = False) -> None:
        """
        Record one terminal read-through outcome.

        Never raises.
        """
        try:
            outcome = self._classify(is_hit, is_error)
            elapsed = float(response_time_ms)
            if elapsed < 0:
                raise MetricsRecordingError(
                    "Negative response time", details={"response_time_ms": response_time_ms}
                )

            with self._lock:
                if outcome is CacheOutcome.ERROR:
                    self._errors += 1
                elif outcome is CacheOutcome.HIT:
                    self._hits += 1
                else:
                    self._misses += 1
                self._total_requests += 1
                self._total_response_time_ms += elapsed

            CACHE_REQUESTS.labels(outcome=outcome.value).inc()
            CACHE_RESPONSE_TIME.labels(outcome=outcome.value).observe(elapsed / 1000)

            if elapsed > self._slow_query_threshold_ms:
                CACHE_SLOW_READS.inc()
                log_stage(
                    logger,
                    Stage.METRICS,
                    "Slow cache read",
                    level="warning",
                    outcome=outcome.value,
                    response_time_ms=round(elapsed, 1),
                    threshold_ms=self._slow_query_threshold_ms,
                )
        except Exception as e:
            log_stage(logger, Stage.METRICS, "Failed to track cache metrics", level="warning", error=str(e))

    def snapshot(self) -> CachePerformanceMetrics:
        """Return a consistent copy of the counters."""
        with self._lock:
            return CachePerformanceMetrics(
                hit_count=self._hits,
                miss_count=self._misses,
                error_count=self._errors,
                total_requests=self._total_requests,
                total_response_time_ms=self._total_response_time_ms,
                last_reset_at=self._last_reset_at,
            )

    def reset(self) -> None:
        """Zero all counters and stamp ``last_reset_at``."""
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._errors = 0
            self._total_requests = 0
            self._total_response_time_ms = 0.0
            self._last_reset_at = datetime.now(timezone.utc)

        log_stage(logger, Stage.METRICS, "Cache metrics reset")

    @staticmethod
    def _classify(is_hit: bool, is_error: bool) -> CacheOutcome:
        if is_error:
            return CacheOutcome.ERROR
        if is_hit:
            return CacheOutcome.HIT
        return CacheOutcome.MISS
