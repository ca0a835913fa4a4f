"""Media models: image lookups, fetched images, attribution and photo records.

``ImageRequest`` is the uniform parameter object every media adapter
accepts; each adapter reads only the fields its lookup modes need.
``ImageResult`` is transient: it travels from the adapter to the
orchestrator, which uploads the bytes and persists a ``LocationPhoto``.
"""

from __future__ import annotations

import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MediaTTL(IntEnum):
    """Suggested cache lifetimes (seconds) attached to fetched images."""

    SHORT = 60 * 60
    MEDIUM = 24 * 60 * 60
    LONG = 7 * 24 * 60 * 60


class ImageRequest(BaseModel):
    """Lookup parameters shared by all media adapters.

    Unsplash and Pexels read ``id`` / ``query``; Google Places reads
    ``ref`` / ``query``; Wikimedia reads ``url`` / ``query`` / ``file``.
    ``width`` and ``height`` are size hints in pixels.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    query: str | None = None
    ref: str | None = None
    file: str | None = None
    url: str | None = None
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)


class ImageResult(BaseModel):
    """Raw image bytes returned by an adapter.

    ``details`` carries provider metadata (author, file title, photo
    reference...) that the adapter's ``get_attribution`` turns into an
    :class:`AttributionInfo`.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes
    content_type: str = "image/jpeg"
    ttl: int = MediaTTL.LONG
    details: dict[str, Any] = Field(default_factory=dict)


class AttributionInfo(BaseModel):
    """Citation required by the provider's license terms."""

    model_config = ConfigDict(frozen=True)

    provider: str
    attribution_text: str
    attribution_url: str = ""
    license: str = ""


class RateLimitStatus(BaseModel):
    """Snapshot of a sliding-window request quota."""

    model_config = ConfigDict(frozen=True)

    remaining: int = Field(ge=0)
    total: int = Field(ge=0)
    reset_at: datetime.datetime


class LocationPhoto(BaseModel):
    """A persisted photo for a destination, attraction or other entity."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_id: str
    url: str
    source: str
    external_id: str
    source_ref: str | None = None
    cached_url: str | None = None
    attribution: str | None = None
    license: str | None = None
    is_primary: bool = True
    created_at: datetime.datetime | None = None


class PhotoLookupOptions(BaseModel):
    """Input to :meth:`MediaOrchestrator.get_location_photo`."""

    model_config = ConfigDict(frozen=True)

    entity_type: str = Field(min_length=1, description="destination, attraction, restaurant...")
    entity_id: str = Field(min_length=1)
    entity_name: str = Field(min_length=1, description="Used to build search queries")
    country: str | None = None
    photo_reference: str | None = Field(
        default=None, description="Google Places photo_reference when already known"
    )
    force_refresh: bool = False

    @property
    def search_query(self) -> str:
        return f"{self.entity_name} {self.country}" if self.country else self.entity_name


class PhotoLookupResult(BaseModel):
    """Where the photo now lives and how it must be credited."""

    model_config = ConfigDict(frozen=True)

    url: str
    source: str
    attribution: str | None = None
    cached: bool = False


class PopulateReport(BaseModel):
    """Counts from a bulk photo-population run."""

    success: int = 0
    skipped: int = 0
    failed: int = 0
    failures: dict[str, str] = Field(default_factory=dict, description="entity_id -> error")

    @property
    def total(self) -> int:
        return self.success + self.skipped + self.failed
