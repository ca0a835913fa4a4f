"""Pexels media provider, the last fallback in the media chain."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.models.media import AttributionInfo, ImageRequest, ImageResult, MediaTTL
from backpackbuddy.providers.http_utils import build_http_client, download_image, get_json
from backpackbuddy.utils.errors import NotEnabledError, NotFoundError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_API_URL = "https://api.pexels.com/v1"


class PexelsProvider(IMediaProvider):
    """Fetches photos from Pexels by id or by search query."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.pexels_api_key
        self._client = http_client or build_http_client()

    def get_provider_name(self) -> str:
        return "pexels"

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    async def fetch_image(self, request: ImageRequest) -> ImageResult:
        if not self.is_enabled():
            raise NotEnabledError("Pexels is not enabled", provider_name=self.get_provider_name())

        headers = {"Authorization": self._api_key}
        if request.id:
            photo = await get_json(
                self._client,
                f"{_API_URL}/photos/{quote(request.id, safe='')}",
                provider_name=self.get_provider_name(),
                endpoint="/photos/{id}",
                headers=headers,
            )
        elif request.query:
            data = await get_json(
                self._client,
                f"{_API_URL}/search",
                provider_name=self.get_provider_name(),
                endpoint="/search",
                headers=headers,
                params={"query": request.query, "per_page": 1},
            )
            photos = (data or {}).get("photos") or []
            if not photos:
                raise NotFoundError(
                    f"No Pexels photos found for '{request.query}'",
                    provider_name=self.get_provider_name(),
                )
            photo = photos[0]
        else:
            raise ValueError("Either id or query must be provided")

        try:
            src = photo["src"]
            image_url = (
                f"{src['original']}?auto=compress&cs=tinysrgb&w={request.width}"
                if request.width
                else src["large"]
            )
        except (KeyError, TypeError) as exc:
            raise UpstreamError(
                f"Malformed Pexels photo payload: missing {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content, content_type = await download_image(
            self._client, image_url, provider_name=self.get_provider_name()
        )
        logger.info("pexels_photo_fetched", photo_id=photo.get("id"), bytes=len(content))
        return ImageResult(
            content=content,
            content_type=content_type,
            ttl=MediaTTL.LONG,
            details={
                "photo_id": photo.get("id"),
                "photographer": photo.get("photographer"),
                "photographer_url": photo.get("photographer_url"),
            },
        )

    def get_attribution(self, details: Mapping[str, Any]) -> AttributionInfo:
        photographer = details.get("photographer")
        return AttributionInfo(
            provider="Pexels",
            attribution_text=f"Photo by {photographer} on Pexels" if photographer else "Pexels",
            attribution_url=details.get("photographer_url") or "https://www.pexels.com",
            license="Pexels License",
        )
