"""Google Places photo provider.

Supports two lookup modes: a known ``photo_reference``, or a free-text
query resolved to a photo reference through the Find Place API.  The
``html_attributions`` Google returns alongside each resolved photo are kept
in a small in-memory mapping so the attribution can be produced later.
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
from backpackbuddy.providers.http_utils import build_http_client, ensure_success, fetch, parse_json
from backpackbuddy.utils.errors import NotEnabledError, NotFoundError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_PLACES_URL = "https://maps.googleapis.com/maps/api/place"
_DEFAULT_MAX_WIDTH = 1200
_HREF_RE = re.compile(r'href="([^"]+)"')
_TEXT_RE = re.compile(r">([^<]+)<")


class GooglePlacesProvider(IMediaProvider):
    """Fetches place photos from the Google Places Photo API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.google_maps_api_key
        self._client = http_client or build_http_client()
        self._attributions: dict[str, list[str]] = {}

    # ------------------------------------------------------------------
    # html_attributions bookkeeping
    # ------------------------------------------------------------------

    def set_html_attributions(self, ref: str, attributions: list[str]) -> None:
        self._attributions[ref] = list(attributions)

    def get_html_attributions(self, ref: str) -> list[str] | None:
        return self._attributions.get(ref)

    async def _search_place_photo(self, query: str) -> str | None:
        """Resolve *query* to the first candidate's first photo reference."""
        try:
            response = await fetch(
                self._client,
                f"{_PLACES_URL}/findplacefromtext/json",
                provider_name=self.get_provider_name(),
                endpoint="/findplacefromtext",
                params={
                    "input": query,
                    "inputtype": "textquery",
                    "fields": "photos,place_id,name",
                    "key": self._api_key,
                },
            )
            ensure_success(response, provider_name=self.get_provider_name())
            data = parse_json(response, provider_name=self.get_provider_name())
        except UpstreamError as exc:
            logger.warning("google_places_search_failed", query=query, error=str(exc))
            return None

        if data.get("status") != "OK":
            logger.info("google_places_no_candidates", query=query, status=data.get("status"))
            return None
        candidates = data.get("candidates") or []
        photos = (candidates[0].get("photos") or []) if candidates else []
        if not photos:
            return None

        ref = photos[0].get("photo_reference")
        if ref and photos[0].get("html_attributions"):
            self.set_html_attributions(ref, photos[0]["html_attributions"])
        return ref

    # ------------------------------------------------------------------
    # IMediaProvider implementation
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return "googleplaces"

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    def can_handle(self, request: ImageRequest) -> bool:
        """Only tried by the orchestrator when a photo reference is known."""
        return bool(request.ref)

    async def fetch_image(self, request: ImageRequest) -> ImageResult:
        if not self.is_enabled():
            raise NotEnabledError(
                "Google Places Photos is not enabled", provider_name=self.get_provider_name()
            )

        photo_reference = request.ref
        if not photo_reference and request.query:
            photo_reference = await self._search_place_photo(request.query)
            if not photo_reference:
                raise NotFoundError(
                    f"No photo found for place: {request.query}",
                    provider_name=self.get_provider_name(),
                )
        if not photo_reference:
            raise ValueError("Either ref or query must be provided")

        params: dict[str, Any] = {
            "photo_reference": photo_reference,
            "key": self._api_key,
            "maxwidth": request.width or _DEFAULT_MAX_WIDTH,
        }
        if request.height:
            params["maxheight"] = request.height

        response = await fetch(
            self._client,
            f"{_PLACES_URL}/photo",
            provider_name=self.get_provider_name(),
            endpoint="/photo",
            params=params,
        )
        ensure_success(
            response,
            provider_name=self.get_provider_name(),
            message=f"Google Places API error: {response.status_code}",
        )
        return ImageResult(
            content=response.content,
            content_type=response.headers.get("content-type") or "image/jpeg",
            ttl=MediaTTL.LONG,
            details={
                "ref": photo_reference,
                "html_attributions": self.get_html_attributions(photo_reference) or [],
            },
        )

    def get_attribution(self, details: Mapping[str, Any]) -> AttributionInfo:
        """Parse the first html attribution (``<a href="url">text</a>``)."""
        ref = details.get("ref")
        html_attributions = details.get("html_attributions") or (
            self.get_html_attributions(ref) if ref else None
        )

        attribution_text = "Google"
        attribution_url = ""
        if html_attributions:
            first = html_attributions[0]
            text_match = _TEXT_RE.search(first)
            url_match = _HREF_RE.search(first)
            if text_match:
                attribution_text = text_match.group(1)
            if url_match:
                attribution_url = url_match.group(1)

        return AttributionInfo(
            provider="Google Places",
            attribution_text=attribution_text,
            attribution_url=attribution_url,
            license="Google Maps Platform Terms",
        )
