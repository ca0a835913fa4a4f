"""Abstract base class for cache service providers.

Defines the key-value contract used by the geo and weather services to
avoid redundant upstream calls.  Implementations may use an in-memory map,
Redis, or any other backend; the services only depend on this interface,
and receive one instance constructed at startup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value caches with per-entry expiry.

    All operations are async so a network-backed store could be dropped in
    without blocking the event loop.  Reads and writes never raise.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
            An expired entry is evicted by the read.
        """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store *value* under *key* for *ttl* seconds.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.  ``None`` cannot be told apart from a miss.
        ttl:
            Time-to-live in seconds, measured from now.
        """

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Return ``True`` if *key* is present in the cache and not expired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key* (no-op if absent)."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""
