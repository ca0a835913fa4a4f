"""Wikimedia Commons media provider.

Free and unmetered, but switched on explicitly with
``ENABLE_MEDIA_WIKIMEDIA=true``.  Three lookup modes, tried in this order:
a direct image URL, a free-text search over the File namespace, or a file
title.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.models.media import AttributionInfo, ImageRequest, ImageResult, MediaTTL
from backpackbuddy.providers.http_utils import build_http_client, download_image, get_json
from backpackbuddy.utils.errors import NotEnabledError, NotFoundError, UpstreamError
from backpackbuddy.utils.text_normalizer import commons_file_name

logger = structlog.get_logger(logger_name=__name__)

_COMMONS_API_URL = "https://commons.wikimedia.org/w/api.php"
_COMMONS_WIKI_URL = "https://commons.wikimedia.org/wiki"
_FILE_NAMESPACE = 6
_THUMB_WIDTH_RE = re.compile(r"/\d+px-")


def _rewrite_width(url: str, width: int | None) -> str:
    """Swap the ``/<n>px-`` thumbnail segment for *width*, if any."""
    if not width:
        return url
    return _THUMB_WIDTH_RE.sub(f"/{width}px-", url, count=1)


class WikimediaProvider(IMediaProvider):
    """Fetches images from Wikimedia Commons."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._enabled = settings.enable_media_wikimedia
        self._client = http_client or build_http_client()

    async def _search_file(self, query: str) -> str:
        data = await get_json(
            self._client,
            _COMMONS_API_URL,
            provider_name=self.get_provider_name(),
            endpoint="list=search",
            params={
                "action": "query",
                "list": "search",
                "srsearch": query,
                "srnamespace": _FILE_NAMESPACE,
                "srlimit": 1,
                "format": "json",
            },
        )
        results = ((data or {}).get("query") or {}).get("search") or []
        if not results:
            raise NotFoundError(
                f"No images found on Wikimedia Commons for '{query}'",
                provider_name=self.get_provider_name(),
            )
        return results[0]["title"]

    async def _resolve_file_url(self, title: str) -> str:
        data = await get_json(
            self._client,
            _COMMONS_API_URL,
            provider_name=self.get_provider_name(),
            endpoint="prop=imageinfo",
            params={
                "action": "query",
                "titles": title,
                "prop": "imageinfo",
                "iiprop": "url",
                "format": "json",
            },
        )
        try:
            pages = data["query"]["pages"]
            page = next(iter(pages.values()))
        except (KeyError, TypeError, StopIteration) as exc:
            raise UpstreamError(
                f"Malformed imageinfo response for {title}",
                provider_name=self.get_provider_name(),
            ) from exc

        image_info = page.get("imageinfo")
        if not image_info:
            raise NotFoundError(
                f"File not found on Wikimedia Commons: {title}",
                provider_name=self.get_provider_name(),
            )
        return image_info[0]["url"]

    # ------------------------------------------------------------------
    # IMediaProvider implementation
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return "wikimedia"

    def is_enabled(self) -> bool:
        return self._enabled

    async def fetch_image(self, request: ImageRequest) -> ImageResult:
        if not self.is_enabled():
            raise NotEnabledError("Wikimedia is not enabled", provider_name=self.get_provider_name())

        title: str | None = None
        if request.url:
            image_url = request.url
        elif request.query:
            title = await self._search_file(request.query)
            image_url = _rewrite_width(await self._resolve_file_url(title), request.width)
        elif request.file:
            title = f"File:{commons_file_name(request.file)}"
            image_url = _rewrite_width(await self._resolve_file_url(title), request.width)
        else:
            raise ValueError("Either file, url, or query must be provided")

        content, content_type = await download_image(
            self._client, image_url, provider_name=self.get_provider_name()
        )
        logger.info("wikimedia_image_fetched", title=title, bytes=len(content))
        return ImageResult(
            content=content,
            content_type=content_type,
            ttl=MediaTTL.LONG,
            details={
                "file": title.removeprefix("File:") if title else None,
                "url": image_url,
            },
        )

    def get_attribution(self, details: Mapping[str, Any]) -> AttributionInfo:
        file_name = details.get("file")
        return AttributionInfo(
            provider="Wikimedia Commons",
            attribution_text=file_name or "Wikimedia Commons",
            attribution_url=(
                f"{_COMMONS_WIKI_URL}/File:{commons_file_name(file_name)}"
                if file_name
                else "https://commons.wikimedia.org"
            ),
            license="Various CC licenses",
        )
