"""OpenWeather 2.5 provider for current conditions and the 5-day forecast."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.weather_provider import IWeatherProvider
from backpackbuddy.providers.http_utils import ensure_success, fetch, parse_json
from backpackbuddy.utils.errors import UpstreamError

logger = structlog.get_logger(logger_name=__name__)


class OpenWeatherProvider(IWeatherProvider):
    """Raw OpenWeather ``/weather`` and ``/forecast`` lookups."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.openweather_api_key
        self._base_url = settings.openweather_base_url.rstrip("/")
        self._client = http_client

    def get_provider_name(self) -> str:
        return "openweather"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def get_current(self, lat: float, lng: float, units: str, lang: str) -> dict[str, Any]:
        return await self._get("/weather", lat, lng, units, lang)

    async def get_forecast(self, lat: float, lng: float, units: str, lang: str) -> dict[str, Any]:
        return await self._get("/forecast", lat, lng, units, lang)

    async def _get(
        self, endpoint: str, lat: float, lng: float, units: str, lang: str
    ) -> dict[str, Any]:
        response = await fetch(
            self._client,
            f"{self._base_url}{endpoint}",
            provider_name=self.get_provider_name(),
            endpoint=endpoint,
            params={
                "lat": lat,
                "lon": lng,
                "appid": self._api_key,
                "units": units,
                "lang": lang,
            },
        )
        if response.status_code == 503:
            logger.error("openweather_unavailable", endpoint=endpoint)
            raise UpstreamError(
                "Weather service temporarily unavailable",
                provider_name=self.get_provider_name(),
                status_code=503,
            )
        ensure_success(response, provider_name=self.get_provider_name())
        return parse_json(response, provider_name=self.get_provider_name())
