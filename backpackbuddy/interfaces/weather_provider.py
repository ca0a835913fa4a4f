"""Abstract base class for weather API providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IWeatherProvider(ABC):
    """Contract for raw weather lookups.

    Both calls return the provider's JSON payload; the weather service
    normalizes and caches it.
    """

    @abstractmethod
    async def get_current(self, lat: float, lng: float, units: str, lang: str) -> dict[str, Any]:
        """Return current conditions at (*lat*, *lng*).

        Raises
        ------
        backpackbuddy.utils.errors.UpstreamError
            On a non-2xx response or transport failure.
        """

    @abstractmethod
    async def get_forecast(self, lat: float, lng: float, units: str, lang: str) -> dict[str, Any]:
        """Return the 5-day / 3-hour forecast at (*lat*, *lng*)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider has the credentials it needs."""
