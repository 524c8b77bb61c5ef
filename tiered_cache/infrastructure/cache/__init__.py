"""
Cache Module

Provides the tiered read-through cache (in-process fast tier + durable tier).
"""

from .cache_manager import (
    CacheManager,
    RemoteFetcher,
    close_cache,
    get_cache_manager,
    init_cache,
)
from .durable_store import DurableStore, EntrySerializer
from .fast_store import FastStore
from .redis_medium import RedisMedium

__all__ = [
    "CacheManager",
    "RemoteFetcher",
    "FastStore",
    "DurableStore",
    "EntrySerializer",
    "RedisMedium",
    "get_cache_manager",
    "init_cache",
    "close_cache",
]
