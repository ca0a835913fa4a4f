"""Abstract base class for image media providers.

Every provider (Unsplash, Google Places, Wikimedia Commons, Pexels) exposes
the same capability: report whether it is enabled, fetch one image for an
:class:`ImageRequest`, and derive the attribution its license requires.
The media orchestrator iterates a fixed, ordered list of these providers
without knowing which concrete service sits behind each one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from backpackbuddy.models.media import AttributionInfo, ImageRequest, ImageResult


class IMediaProvider(ABC):
    """Contract for image providers used by the media orchestrator."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the identifier stored as the photo ``source`` (e.g. ``"unsplash"``)."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Return ``True`` when the required credential or feature flag is set."""

    def can_handle(self, request: ImageRequest) -> bool:
        """Return ``True`` if the orchestrator should try this provider for *request*."""
        return True

    @abstractmethod
    async def fetch_image(self, request: ImageRequest) -> ImageResult:
        """Fetch a single image matching *request*.

        Raises
        ------
        backpackbuddy.utils.errors.NotEnabledError
            If the provider is disabled.  Raised before any network call.
        backpackbuddy.utils.errors.NotFoundError
            If no image matches the request.
        backpackbuddy.utils.errors.UpstreamError
            On a non-2xx response, transport failure or malformed payload.
        ValueError
            If *request* has none of the fields this provider needs.
        """

    @abstractmethod
    def get_attribution(self, details: Mapping[str, Any]) -> AttributionInfo:
        """Build the attribution for an image from its ``ImageResult.details``.

        Pure and synchronous; an empty mapping yields the provider's generic
        credit.
        """
