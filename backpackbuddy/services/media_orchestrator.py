"""Location-photo orchestration across media providers.

Serves a destination or attraction photo from the persisted photo store
when one exists; otherwise walks the media providers in priority order
(Google Places, Unsplash, Wikimedia Commons, Pexels), uploads the first
image obtained to object storage and records it as the entity's primary
photo together with its attribution.

Provider failures are never fatal on their own: each provider gets exactly
one attempt and any application error moves the lookup on to the next.
Only when every provider has failed does the caller see ``NotFoundError``.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

import structlog

from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.interfaces.photo_store import ILocationPhotoStore, IObjectStore
from backpackbuddy.models.media import (
    ImageRequest,
    ImageResult,
    LocationPhoto,
    PhotoLookupOptions,
    PhotoLookupResult,
    PopulateReport,
    RateLimitStatus,
)
from backpackbuddy.providers.media.unsplash_provider import UnsplashProvider
from backpackbuddy.utils.errors import BackpackBuddyError, NotFoundError
from backpackbuddy.utils.logging import get_logger

_REQUEST_WIDTH = 1920
_DEFAULT_BUCKET = "location-photos"


def _extension_for(content_type: str) -> str:
    mime = content_type.split(";", 1)[0].strip().lower()
    _, _, subtype = mime.partition("/")
    if not subtype or subtype in ("jpeg", "pjpeg"):
        return "jpg"
    return subtype.split("+", 1)[0]


class MediaOrchestrator:
    """Resolves and persists location photos.

    Parameters
    ----------
    photo_store:
        Record of fetched photos; consulted first unless ``force_refresh``.
    object_store:
        Destination for the image bytes.
    providers:
        Media providers in fallback order.
    bucket:
        Object-store bucket holding location photos.
    request_width:
        Width hint sent to every provider.
    """

    def __init__(
        self,
        photo_store: ILocationPhotoStore,
        object_store: IObjectStore,
        providers: Sequence[IMediaProvider],
        bucket: str = _DEFAULT_BUCKET,
        request_width: int = _REQUEST_WIDTH,
    ) -> None:
        self._photo_store = photo_store
        self._object_store = object_store
        self._providers = list(providers)
        self._bucket = bucket
        self._request_width = request_width
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def providers(self) -> list[IMediaProvider]:
        return list(self._providers)

    async def initialize(self) -> None:
        """Make sure the photo bucket exists.  Failures are only logged."""
        try:
            await self._object_store.ensure_bucket(self._bucket)
        except BackpackBuddyError as exc:
            self._logger.error("media_bucket_unavailable", bucket=self._bucket, error=str(exc))

    # -- Public API -----------------------------------------------------------

    async def get_location_photo(self, options: PhotoLookupOptions) -> PhotoLookupResult:
        """Return a stored or freshly fetched photo for the entity in *options*.

        Raises
        ------
        NotFoundError
            When there is no stored photo and every provider failed or was
            skipped.
        """
        if not options.force_refresh:
            stored = await self._stored_photo(options)
            if stored is not None and stored.cached_url:
                self._logger.debug(
                    "location_photo_cache_hit",
                    entity_type=options.entity_type,
                    entity_id=options.entity_id,
                    source=stored.source,
                )
                return PhotoLookupResult(
                    url=stored.cached_url,
                    source=stored.source,
                    attribution=stored.attribution,
                    cached=True,
                )

        request = ImageRequest(
            ref=options.photo_reference,
            query=options.search_query,
            width=self._request_width,
        )

        for provider in self._providers:
            name = provider.get_provider_name()
            if not provider.is_enabled() or not provider.can_handle(request):
                self._logger.debug("media_provider_skipped", provider=name)
                continue
            try:
                result = await provider.fetch_image(request)
                public_url = await self._upload(result, name, options)
            except BackpackBuddyError as exc:
                self._logger.warning(
                    "media_provider_failed",
                    provider=name,
                    entity_id=options.entity_id,
                    error=str(exc),
                )
                continue

            attribution = provider.get_attribution(result.details)
            await self._record(
                LocationPhoto(
                    entity_type=options.entity_type,
                    entity_id=options.entity_id,
                    url=public_url,
                    source=name,
                    external_id=self._external_id(result),
                    source_ref=request.ref or request.query,
                    cached_url=public_url,
                    attribution=attribution.attribution_text,
                    license=attribution.license or None,
                    is_primary=True,
                )
            )
            self._logger.info(
                "location_photo_fetched",
                provider=name,
                entity_type=options.entity_type,
                entity_id=options.entity_id,
            )
            return PhotoLookupResult(
                url=public_url,
                source=name,
                attribution=attribution.attribution_text,
                cached=False,
            )

        raise NotFoundError(f"No image source available for {options.entity_name}")

    async def populate(self, entries: Iterable[PhotoLookupOptions]) -> PopulateReport:
        """Fetch photos for every entity in *entries* that has none yet."""
        report = PopulateReport()
        for options in entries:
            existing = await self._stored_photo(options)
            if existing is not None and not options.force_refresh:
                report.skipped += 1
                continue
            try:
                result = await self.get_location_photo(options)
            except BackpackBuddyError as exc:
                report.failed += 1
                report.failures[options.entity_id] = str(exc)
                self._logger.warning(
                    "populate_entity_failed", entity_id=options.entity_id, error=str(exc)
                )
                continue
            report.success += 1
            self._logger.info(
                "populate_entity_done", entity_id=options.entity_id, source=result.source
            )
        self._logger.info(
            "populate_complete",
            success=report.success,
            skipped=report.skipped,
            failed=report.failed,
            total=report.total,
        )
        return report

    def get_unsplash_rate_limit(self) -> RateLimitStatus | None:
        for provider in self._providers:
            if isinstance(provider, UnsplashProvider):
                return provider.get_rate_limit_status()
        return None

    # -- Internals --------------------------------------------------------------

    async def _upload(self, result: ImageResult, source: str, options: PhotoLookupOptions) -> str:
        path = (
            f"{options.entity_type}/{options.entity_id}/"
            f"{source}-{uuid.uuid4().hex}.{_extension_for(result.content_type)}"
        )
        return await self._object_store.upload_file(
            self._bucket, path, result.content, result.content_type
        )

    @staticmethod
    def _external_id(result: ImageResult) -> str:
        for key in ("photo_id", "ref", "file"):
            value = result.details.get(key)
            if value:
                return str(value)
        return uuid.uuid4().hex

    async def _stored_photo(self, options: PhotoLookupOptions) -> LocationPhoto | None:
        try:
            return await self._photo_store.get_primary_location_photo(
                options.entity_type, options.entity_id
            )
        except BackpackBuddyError as exc:
            self._logger.error(
                "location_photo_read_failed",
                entity_type=options.entity_type,
                entity_id=options.entity_id,
                error=str(exc),
            )
            return None

    async def _record(self, photo: LocationPhoto) -> None:
        try:
            await self._photo_store.upsert_location_photo(photo)
        except BackpackBuddyError as exc:
            self._logger.error(
                "location_photo_persist_failed",
                entity_type=photo.entity_type,
                entity_id=photo.entity_id,
                error=str(exc),
            )
