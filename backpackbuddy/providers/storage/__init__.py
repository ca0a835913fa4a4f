"""Photo persistence: location-photo records and image object storage."""

from backpackbuddy.providers.storage.local_object_store import LocalObjectStore
from backpackbuddy.providers.storage.sqlite_location_photo_store import SQLiteLocationPhotoStore
from backpackbuddy.providers.storage.supabase_object_store import SupabaseObjectStore

__all__ = ["LocalObjectStore", "SQLiteLocationPhotoStore", "SupabaseObjectStore"]
