"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables, e.g. ``UNSPLASH_ACCESS_KEY=abc123``
  2. The ``.env`` file in the project root (local development)

Field ``unsplash_access_key`` maps to ``UNSPLASH_ACCESS_KEY``.  Defaults
apply when neither source defines a value.  An empty credential means the
integration is disabled.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """BackpackBuddy application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Media providers ===
    unsplash_access_key: str = ""
    unsplash_max_requests: int = 50  # Unsplash demo tier: 50 requests/hour
    unsplash_window_seconds: int = 3600
    google_maps_api_key: str = ""
    enable_media_wikimedia: bool = False
    pexels_api_key: str = ""

    # === Weather ===
    openweather_api_key: str = ""
    enable_openweather: bool = False
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"

    # === Geo ===
    restcountries_base_url: str = "https://restcountries.com/v3.1"
    geonames_base_url: str = "http://api.geonames.org"
    geonames_username: str = ""

    # === Photo storage ===
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    location_photos_bucket: str = "location-photos"
    location_photos_db_path: str = "data/location_photos.db"
    local_media_dir: str = "data/media"

    # === Cache ===
    cache_sweep_interval: int = 60

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def openweather_enabled(self) -> bool:
        """Both the feature flag and the API key are required."""
        return self.enable_openweather and bool(self.openweather_api_key)

    @property
    def supabase_storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def get_enabled_media_providers(self) -> list[str]:
        """Return media provider names whose credentials or flags are set, in fallback order."""
        providers: list[str] = []
        if self.google_maps_api_key:
            providers.append("googleplaces")
        if self.unsplash_access_key:
            providers.append("unsplash")
        if self.enable_media_wikimedia:
            providers.append("wikimedia")
        if self.pexels_api_key:
            providers.append("pexels")
        return providers
