"""Local-disk object store for development.

Writes objects under ``<root>/<bucket>/<path>`` and returns URLs below
``public_prefix``; ``backpackbuddy.main`` serves that prefix with
``StaticFiles``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from backpackbuddy.interfaces.photo_store import IObjectStore
from backpackbuddy.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)


class LocalObjectStore(IObjectStore):
    """Object storage on the local filesystem."""

    def __init__(self, root: str | Path, public_prefix: str = "/media") -> None:
        self._root = Path(root)
        self._public_prefix = public_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def get_provider_name(self) -> str:
        return "local"

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self._root / bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir not in target.parents:
            raise StorageError(f"Refusing to write outside bucket: {path}", provider_name="local")
        return target

    async def ensure_bucket(self, bucket: str) -> None:
        await asyncio.to_thread((self._root / bucket).mkdir, parents=True, exist_ok=True)

    async def upload_file(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(bucket, path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}", provider_name="local") from exc

        logger.info("storage_object_written", bucket=bucket, path=path, bytes=len(data))
        return f"{self._public_prefix}/{bucket}/{path}"
