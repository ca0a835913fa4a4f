"""Abstract base classes for country-data and city-search providers.

Providers return the upstream JSON record (a plain ``dict``) or ``None``
when nothing matches; the geo service owns the normalization into
:class:`~backpackbuddy.models.geo.CountryInfo` / ``CityInfo``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICountryDataProvider(ABC):
    """Contract for country lookups (e.g. RestCountries)."""

    @abstractmethod
    async def get_by_code(self, code: str) -> dict[str, Any] | None:
        """Look up a country by ISO 3166 alpha-2 or alpha-3 *code*.

        Returns ``None`` for unknown codes.

        Raises
        ------
        backpackbuddy.utils.errors.UpstreamError
            If the request cannot be completed.
        """

    @abstractmethod
    async def get_by_name(self, name: str) -> dict[str, Any] | None:
        """Look up a country by its full common or official *name*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier reported in ``meta.provider``."""


class ICitySearchProvider(ABC):
    """Contract for city lookups (e.g. GeoNames)."""

    @abstractmethod
    async def search_city(
        self,
        q: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
        country_code: str | None = None,
    ) -> dict[str, Any] | None:
        """Find the best city for a coordinate pair or a free-text name.

        Coordinates take precedence over *q*.  Returns ``None`` when the
        provider is not configured or nothing matches.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider identifier reported in ``meta.provider``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider has the credentials it needs."""
