"""GeoNames city-search provider.

GeoNames requires a registered username on every call; without one the
provider stays available to the service but returns ``None``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.geo_provider import ICitySearchProvider
from backpackbuddy.providers.http_utils import fetch, parse_json

logger = structlog.get_logger(logger_name=__name__)


class GeoNamesProvider(ICitySearchProvider):
    """Finds the nearest populated place or the best name match."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._base_url = settings.geonames_base_url.rstrip("/")
        self._username = settings.geonames_username
        self._client = http_client

    def get_provider_name(self) -> str:
        return "geonames"

    def is_available(self) -> bool:
        return bool(self._username)

    async def search_city(
        self,
        q: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
        country_code: str | None = None,
    ) -> dict[str, Any] | None:
        if not self.is_available():
            logger.warning("geonames_username_not_configured")
            return None

        if lat is not None and lng is not None:
            url = f"{self._base_url}/findNearbyPlaceNameJSON"
            endpoint = "/findNearbyPlaceName"
            params: dict[str, Any] = {"lat": lat, "lng": lng}
        elif q:
            url = f"{self._base_url}/searchJSON"
            endpoint = "/search"
            params = {"q": q, "maxRows": 1}
            if country_code:
                params["country"] = country_code
        else:
            return None
        params["username"] = self._username

        response = await fetch(
            self._client,
            url,
            provider_name=self.get_provider_name(),
            endpoint=endpoint,
            params=params,
        )
        if not response.is_success:
            return None

        data = parse_json(response, provider_name=self.get_provider_name()) or {}
        geonames = data.get("geonames") or []
        return geonames[0] if geonames else None
