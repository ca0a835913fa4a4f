"""Abstract base classes for photo persistence.

Two collaborators sit behind the media orchestrator:

- :class:`ILocationPhotoStore` keeps one row per fetched photo and answers
  "what is the primary photo of this entity?".
- :class:`IObjectStore` holds the image bytes and hands back a public URL.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from backpackbuddy.models.media import LocationPhoto


class ILocationPhotoStore(ABC):
    """Contract for location-photo records."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables if needed."""

    @abstractmethod
    async def get_primary_location_photo(
        self, entity_type: str, entity_id: str
    ) -> LocationPhoto | None:
        """Return the primary photo for the entity, or ``None``.

        Raises
        ------
        backpackbuddy.utils.errors.StorageError
            If the read fails.
        """

    @abstractmethod
    async def upsert_location_photo(self, photo: LocationPhoto) -> LocationPhoto:
        """Insert or update *photo*.

        When ``photo.is_primary`` is set, every other photo of the same
        entity stops being primary.

        Raises
        ------
        backpackbuddy.utils.errors.StorageError
            If the write fails.
        """


class IObjectStore(ABC):
    """Contract for binary object storage (Supabase Storage, local disk...)."""

    @abstractmethod
    async def ensure_bucket(self, bucket: str) -> None:
        """Create *bucket* if it does not exist yet."""

    @abstractmethod
    async def upload_file(
        self, bucket: str, path: str, data: bytes, content_type: str
    ) -> str:
        """Store *data* at *path* inside *bucket* and return its public URL.

        Raises
        ------
        backpackbuddy.utils.errors.StorageError
            If the upload fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the storage backend identifier."""
