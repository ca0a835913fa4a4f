"""SQLite-backed location-photo store.

Persists one row per fetched photo in ``location_photos`` and answers
primary-photo lookups for the media orchestrator.  Uses ``aiosqlite`` for
async I/O.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

import aiosqlite
import structlog

from backpackbuddy.interfaces.photo_store import ILocationPhotoStore
from backpackbuddy.models.media import LocationPhoto
from backpackbuddy.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/location_photos.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS location_photos (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_type  TEXT    NOT NULL,
    entity_id    TEXT    NOT NULL,
    url          TEXT    NOT NULL,
    source       TEXT    NOT NULL,
    external_id  TEXT    NOT NULL,
    source_ref   TEXT,
    cached_url   TEXT,
    attribution  TEXT,
    license      TEXT,
    is_primary   INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at   TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE(entity_type, entity_id, source, external_id)
);
"""

_CREATE_INDEX_SQL = (
    "CREATE INDEX IF NOT EXISTS idx_location_photos_entity "
    "ON location_photos(entity_type, entity_id, is_primary);"
)

_DEMOTE_SQL = """\
UPDATE location_photos SET is_primary = 0
WHERE entity_type = ? AND entity_id = ? AND is_primary = 1;
"""

_UPSERT_SQL = """\
INSERT INTO location_photos
    (entity_type, entity_id, url, source, external_id, source_ref,
     cached_url, attribution, license, is_primary)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(entity_type, entity_id, source, external_id)
DO UPDATE SET url         = excluded.url,
              source_ref  = excluded.source_ref,
              cached_url  = excluded.cached_url,
              attribution = excluded.attribution,
              license     = excluded.license,
              is_primary  = excluded.is_primary,
              updated_at  = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_COLUMNS = (
    "entity_type, entity_id, url, source, external_id, source_ref, "
    "cached_url, attribution, license, is_primary, created_at"
)

_SELECT_PRIMARY_SQL = f"""\
SELECT {_SELECT_COLUMNS}
FROM location_photos
WHERE entity_type = ? AND entity_id = ? AND is_primary = 1
ORDER BY updated_at DESC, id DESC
LIMIT 1;
"""

_SELECT_ONE_SQL = f"""\
SELECT {_SELECT_COLUMNS}
FROM location_photos
WHERE entity_type = ? AND entity_id = ? AND source = ? AND external_id = ?;
"""


def _row_to_photo(row: aiosqlite.Row) -> LocationPhoto:
    data = dict(row)
    data["is_primary"] = bool(data["is_primary"])
    data["created_at"] = datetime.fromisoformat(data["created_at"].replace("Z", "+00:00"))
    return LocationPhoto(**data)


class SQLiteLocationPhotoStore(ILocationPhotoStore):
    """SQLite persistence for location photos."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the location_photos table and index if they don't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.execute(_CREATE_INDEX_SQL)
                await db.commit()
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(
                f"Failed to initialize location photo store at {self._db_path}: {exc}",
                provider_name="sqlite",
            ) from exc
        logger.info("location_photos_db_initialized", path=str(self._db_path))

    async def get_primary_location_photo(
        self, entity_type: str, entity_id: str
    ) -> LocationPhoto | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_PRIMARY_SQL, (entity_type, entity_id))
                row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to read location photo for {entity_type}/{entity_id}: {exc}",
                provider_name="sqlite",
            ) from exc
        return _row_to_photo(row) if row else None

    async def upsert_location_photo(self, photo: LocationPhoto) -> LocationPhoto:
        """Insert or update *photo*, demoting the entity's other primaries first."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                if photo.is_primary:
                    await db.execute(_DEMOTE_SQL, (photo.entity_type, photo.entity_id))
                await db.execute(
                    _UPSERT_SQL,
                    (
                        photo.entity_type,
                        photo.entity_id,
                        photo.url,
                        photo.source,
                        photo.external_id,
                        photo.source_ref,
                        photo.cached_url,
                        photo.attribution,
                        photo.license,
                        int(photo.is_primary),
                    ),
                )
                await db.commit()
                cursor = await db.execute(
                    _SELECT_ONE_SQL,
                    (photo.entity_type, photo.entity_id, photo.source, photo.external_id),
                )
                row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to upsert location photo for {photo.entity_type}/{photo.entity_id}: {exc}",
                provider_name="sqlite",
            ) from exc

        logger.info(
            "location_photo_upserted",
            entity_type=photo.entity_type,
            entity_id=photo.entity_id,
            source=photo.source,
        )
        return _row_to_photo(row)
