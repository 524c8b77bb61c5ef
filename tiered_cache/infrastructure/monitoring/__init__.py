"""
Monitoring Module

Cache performance counters (mirrored to Prometheus) and their scheduled reset.
"""

from .metrics_collector import CacheMetricsCollector
from .reset_scheduler import MetricsResetScheduler

__all__ = ["CacheMetricsCollector", "MetricsResetScheduler"]
