"""Unsplash media provider with a sliding-window request quota.

The Unsplash demo tier allows 50 API requests per hour.  The provider keeps
the timestamps of its successful API calls, prunes those older than the
window before every fetch, and refuses to call out once the window is full.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.models.media import (
    AttributionInfo,
    ImageRequest,
    ImageResult,
    MediaTTL,
    RateLimitStatus,
)
from backpackbuddy.providers.http_utils import build_http_client, download_image, get_json
from backpackbuddy.utils.errors import (
    NotEnabledError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
)

logger = structlog.get_logger(logger_name=__name__)

_API_URL = "https://api.unsplash.com"


class UnsplashProvider(IMediaProvider):
    """Fetches photos from Unsplash by id or by search query.

    Parameters
    ----------
    settings:
        Supplies the access key and the quota (``unsplash_max_requests`` per
        ``unsplash_window_seconds``).
    http_client:
        Shared ``httpx.AsyncClient``; one is created when omitted.
    clock:
        Wall-clock in seconds, injectable for tests.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._access_key = settings.unsplash_access_key
        self._max_requests = settings.unsplash_max_requests
        self._window_seconds = float(settings.unsplash_window_seconds)
        self._client = http_client or build_http_client()
        self._clock = clock
        self._requests: deque[float] = deque()

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self._window_seconds:
            self._requests.popleft()

    def get_rate_limit_status(self) -> RateLimitStatus:
        """Return remaining quota and when the oldest tracked request expires."""
        now = self._clock()
        self._prune(now)
        reset_ts = self._requests[0] + self._window_seconds if self._requests else now
        return RateLimitStatus(
            remaining=max(0, self._max_requests - len(self._requests)),
            total=self._max_requests,
            reset_at=datetime.fromtimestamp(reset_ts, tz=timezone.utc),
        )

    # ------------------------------------------------------------------
    # IMediaProvider implementation
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return "unsplash"

    def is_enabled(self) -> bool:
        return bool(self._access_key)

    async def fetch_image(self, request: ImageRequest) -> ImageResult:
        """Resolve a photo via the Unsplash API, then download its bytes."""
        if not self.is_enabled():
            raise NotEnabledError("Unsplash is not enabled", provider_name=self.get_provider_name())

        self._prune(self._clock())
        if len(self._requests) >= self._max_requests:
            status = self.get_rate_limit_status()
            logger.warning(
                "unsplash_rate_limited",
                total=status.total,
                reset_at=status.reset_at.isoformat(),
            )
            raise RateLimitError(
                message=f"Unsplash rate limit exceeded. Resets at {status.reset_at.isoformat()}",
                provider_name=self.get_provider_name(),
                reset_at=status.reset_at,
            )

        headers = {"Authorization": f"Client-ID {self._access_key}", "Accept-Version": "v1"}
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
                f"{_API_URL}/search/photos",
                provider_name=self.get_provider_name(),
                endpoint="/search/photos",
                headers=headers,
                params={"query": request.query, "per_page": 1},
            )
            results = (data or {}).get("results") or []
            if not results:
                raise NotFoundError(
                    f"No Unsplash photos found for '{request.query}'",
                    provider_name=self.get_provider_name(),
                )
            photo = results[0]
        else:
            raise ValueError("Either id or query must be provided")

        # Only successful API calls count against the quota.
        self._requests.append(self._clock())

        try:
            urls = photo["urls"]
            photo_url = f"{urls['raw']}&w={request.width}" if request.width else urls["regular"]
        except (KeyError, TypeError) as exc:
            raise UpstreamError(
                f"Malformed Unsplash photo payload: missing {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content, content_type = await download_image(
            self._client, photo_url, provider_name=self.get_provider_name()
        )
        user = photo.get("user") or {}
        logger.info(
            "unsplash_photo_fetched",
            photo_id=photo.get("id"),
            bytes=len(content),
            remaining=self._max_requests - len(self._requests),
        )
        return ImageResult(
            content=content,
            content_type=content_type,
            ttl=MediaTTL.LONG,
            details={
                "photo_id": photo.get("id"),
                "user": user.get("name"),
                "user_url": (user.get("links") or {}).get("html"),
            },
        )

    def get_attribution(self, details: Mapping[str, Any]) -> AttributionInfo:
        user = details.get("user")
        return AttributionInfo(
            provider="Unsplash",
            attribution_text=f"Photo by {user}" if user else "Unsplash",
            attribution_url=details.get("user_url") or "https://unsplash.com",
            license="Unsplash License",
        )
