"""In-memory cache provider using cachetools.TLRUCache.

Each entry carries its own absolute expiry, so the geo service can keep
countries for a day while the weather service keeps current conditions for
ten minutes in the same instance.  Expired entries are evicted lazily on
read; an optional background sweep removes them proactively.  There is no
size bound.
"""

from __future__ import annotations

import asyncio
import contextlib
import math
import time
from collections.abc import Callable
from typing import Any, NamedTuple

import structlog
from cachetools import TLRUCache

from backpackbuddy.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class CacheEntry(NamedTuple):
    value: Any
    expires_at: float


def _time_to_use(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at


class MemoryCacheProvider(ICacheProvider):
    """Process-local TTL cache backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    timer:
        Clock returning seconds as a float.  Defaults to
        ``time.monotonic``; tests inject a fake clock to advance time.
    """

    def __init__(self, timer: Callable[[], float] = time.monotonic) -> None:
        self._timer = timer
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=math.inf, ttu=_time_to_use, timer=timer
        )
        self._sweeper: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the value for *key*, or ``None`` if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            # TLRUCache hides expired items but keeps them until expire().
            self._cache.expire()
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store *value* under *key* until ``now + ttl``."""
        if ttl <= 0:
            self._cache.pop(key, None)
            return
        self._cache[key] = CacheEntry(value=value, expires_at=self._timer() + ttl)
        logger.debug("cache_set", key=key, ttl=ttl)

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def clear(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def cleanup(self) -> int:
        """Evict every expired entry and return how many were removed."""
        removed = len(self._cache.expire())
        if removed:
            logger.debug("cache_cleanup", removed=removed, remaining=len(self._cache))
        return removed

    def start_sweeper(self, interval: float = 60.0) -> None:
        """Run :meth:`cleanup` every *interval* seconds on the running loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep(interval))
        logger.info("cache_sweeper_started", interval=interval)

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None
        logger.info("cache_sweeper_stopped")

    async def _sweep(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.cleanup()

    def __len__(self) -> int:
        """Number of live entries.  Expired entries are evicted by the count."""
        return len(self._cache)
