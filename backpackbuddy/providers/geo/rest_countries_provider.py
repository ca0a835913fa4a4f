"""RestCountries v3.1 country-data provider.

Unknown countries come back as 404 from the API; both lookups turn any
non-2xx status into ``None`` so the geo service can answer "not found"
without an exception.  Transport failures still raise ``UpstreamError``.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.geo_provider import ICountryDataProvider
from backpackbuddy.providers.http_utils import fetch, parse_json

logger = structlog.get_logger(logger_name=__name__)


class RestCountriesProvider(ICountryDataProvider):
    """Looks countries up by ISO code or by full name."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._base_url = settings.restcountries_base_url.rstrip("/")
        self._client = http_client

    def get_provider_name(self) -> str:
        return "restcountries"

    async def get_by_code(self, code: str) -> dict[str, Any] | None:
        return await self._lookup(
            f"{self._base_url}/alpha/{quote(code, safe='')}", endpoint=f"/alpha/{code}"
        )

    async def get_by_name(self, name: str) -> dict[str, Any] | None:
        return await self._lookup(
            f"{self._base_url}/name/{quote(name, safe='')}",
            endpoint=f"/name/{name}",
            params={"fullText": "true"},
        )

    async def _lookup(
        self, url: str, *, endpoint: str, params: dict[str, str] | None = None
    ) -> dict[str, Any] | None:
        response = await fetch(
            self._client,
            url,
            provider_name=self.get_provider_name(),
            endpoint=endpoint,
            params=params,
        )
        if not response.is_success:
            logger.debug("restcountries_no_match", endpoint=endpoint, status=response.status_code)
            return None

        data = parse_json(response, provider_name=self.get_provider_name())
        if isinstance(data, list):
            return data[0] if data else None
        return data
