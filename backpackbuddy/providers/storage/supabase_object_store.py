"""Supabase Storage object store.

Uploads image bytes through the Supabase Storage REST API using the
service-role key and returns the object's public URL.
"""

from __future__ import annotations

import httpx
import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.photo_store import IObjectStore
from backpackbuddy.utils.errors import ConfigurationError, StorageError

logger = structlog.get_logger(logger_name=__name__)


class SupabaseObjectStore(IObjectStore):
    """Object storage backed by a public Supabase Storage bucket."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        if not settings.supabase_storage_configured:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required",
                provider_name=self.get_provider_name(),
            )
        self._base_url = settings.supabase_url.rstrip("/") + "/storage/v1"
        self._service_key = settings.supabase_service_role_key
        self._client = http_client

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
        }

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/object/public/{bucket}/{path}"

    def get_provider_name(self) -> str:
        return "supabase"

    async def ensure_bucket(self, bucket: str) -> None:
        """Create a public *bucket* unless it already exists."""
        try:
            response = await self._client.get(
                f"{self._base_url}/bucket/{bucket}", headers=self._headers
            )
            if response.is_success:
                return
            response = await self._client.post(
                f"{self._base_url}/bucket",
                headers=self._headers,
                json={"id": bucket, "name": bucket, "public": True},
            )
        except httpx.HTTPError as exc:
            raise StorageError(
                f"Could not reach Supabase Storage: {exc}", provider_name=self.get_provider_name()
            ) from exc

        if not response.is_success:
            raise StorageError(
                f"Failed to create bucket {bucket}: HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )
        logger.info("storage_bucket_created", bucket=bucket)

    async def upload_file(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            response = await self._client.post(
                f"{self._base_url}/object/{bucket}/{path}",
                headers={
                    **self._headers,
                    "Content-Type": content_type,
                    "x-upsert": "true",
                },
                content=data,
            )
        except httpx.HTTPError as exc:
            raise StorageError(
                f"Upload of {path} failed: {exc}", provider_name=self.get_provider_name()
            ) from exc

        if not response.is_success:
            raise StorageError(
                f"Upload of {path} failed: HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )
        logger.info("storage_object_uploaded", bucket=bucket, path=path, bytes=len(data))
        return self.get_public_url(bucket, path)
