"""Cache providers.

MemoryCacheProvider is a dict-based cache -- fast but not shared across
processes.  For multi-worker deployments, swap in a Redis adapter
implementing ICacheProvider without changing any business logic.
"""

from backpackbuddy.providers.cache.memory_cache import CacheEntry, MemoryCacheProvider

__all__ = ["CacheEntry", "MemoryCacheProvider"]
