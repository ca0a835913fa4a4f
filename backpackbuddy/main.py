"""BackpackBuddy FastAPI application entry point.

Wires together the cache, providers, and services via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and serves locally stored photos under ``/media`` when
Supabase Storage is not configured.

``build_services`` is shared with the CLI so both front ends assemble the
same component graph.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from backpackbuddy import __version__
from backpackbuddy.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from backpackbuddy.api.routes import router as api_router
from backpackbuddy.config.loader import load_config
from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.interfaces.photo_store import IObjectStore
from backpackbuddy.providers.cache.memory_cache import MemoryCacheProvider
from backpackbuddy.providers.geo.geonames_provider import GeoNamesProvider
from backpackbuddy.providers.geo.rest_countries_provider import RestCountriesProvider
from backpackbuddy.providers.http_utils import build_http_client
from backpackbuddy.providers.media.google_places_provider import GooglePlacesProvider
from backpackbuddy.providers.media.pexels_provider import PexelsProvider
from backpackbuddy.providers.media.unsplash_provider import UnsplashProvider
from backpackbuddy.providers.media.wikimedia_provider import WikimediaProvider
from backpackbuddy.providers.storage.local_object_store import LocalObjectStore
from backpackbuddy.providers.storage.sqlite_location_photo_store import SQLiteLocationPhotoStore
from backpackbuddy.providers.storage.supabase_object_store import SupabaseObjectStore
from backpackbuddy.providers.weather.openweather_provider import OpenWeatherProvider
from backpackbuddy.services.geo_service import GeoService
from backpackbuddy.services.media_orchestrator import MediaOrchestrator
from backpackbuddy.services.weather_service import WeatherService
from backpackbuddy.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)

_MEDIA_URL_PREFIX = "/media"


def _build_media_providers(
    app_settings: Settings, http_client: httpx.AsyncClient, priority: list[str]
) -> list[IMediaProvider]:
    """Instantiate every media provider, ordered by *priority*.

    Disabled providers are kept in the list; the orchestrator skips them.
    """
    available: dict[str, IMediaProvider] = {
        "googleplaces": GooglePlacesProvider(app_settings, http_client=http_client),
        "unsplash": UnsplashProvider(app_settings, http_client=http_client),
        "wikimedia": WikimediaProvider(app_settings, http_client=http_client),
        "pexels": PexelsProvider(app_settings, http_client=http_client),
    }
    return [available[name] for name in priority if name in available]


def _build_object_store(app_settings: Settings, http_client: httpx.AsyncClient) -> IObjectStore:
    if app_settings.supabase_storage_configured:
        return SupabaseObjectStore(app_settings, http_client=http_client)
    return LocalObjectStore(app_settings.local_media_dir, public_prefix=_MEDIA_URL_PREFIX)


def build_services(
    app_settings: Settings, app_config: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config or {}
    media_cfg = app_config.get("media", {})
    geo_cfg = app_config.get("geo", {})
    weather_cfg = app_config.get("weather", {})

    # -- Shared resources --
    http_client = build_http_client()
    cache = MemoryCacheProvider()

    # -- Media --
    priority = media_cfg.get(
        "provider_priority", ["googleplaces", "unsplash", "wikimedia", "pexels"]
    )
    media_providers = _build_media_providers(app_settings, http_client, priority)
    photo_store = SQLiteLocationPhotoStore(db_path=app_settings.location_photos_db_path)
    object_store = _build_object_store(app_settings, http_client)
    media_orchestrator = MediaOrchestrator(
        photo_store=photo_store,
        object_store=object_store,
        providers=media_providers,
        bucket=app_settings.location_photos_bucket,
        request_width=media_cfg.get("request_width", 1920),
    )

    # -- Geo --
    city_provider = GeoNamesProvider(app_settings, http_client=http_client)
    geo_service = GeoService(
        cache=cache,
        country_provider=RestCountriesProvider(app_settings, http_client=http_client),
        city_provider=city_provider,
        country_ttl=geo_cfg.get("country_ttl_seconds", 24 * 60 * 60),
        city_ttl=geo_cfg.get("city_ttl_seconds", 6 * 60 * 60),
    )

    # -- Weather --
    weather_service = WeatherService(
        settings=app_settings,
        cache=cache,
        provider=OpenWeatherProvider(app_settings, http_client=http_client),
        current_ttl=weather_cfg.get("current_ttl_seconds", 10 * 60),
        forecast_ttl=weather_cfg.get("forecast_ttl_seconds", 60 * 60),
        forecast_days=weather_cfg.get("forecast_days", 5),
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, bool] = {
        p.get_provider_name(): p.is_enabled() for p in media_providers
    }
    provider_registry["restcountries"] = True
    provider_registry["geonames"] = city_provider.is_available()
    provider_registry["openweather"] = app_settings.openweather_enabled
    provider_registry[object_store.get_provider_name()] = True

    return {
        "http_client": http_client,
        "cache": cache,
        "photo_store": photo_store,
        "object_store": object_store,
        "media_orchestrator": media_orchestrator,
        "geo_service": geo_service,
        "weather_service": weather_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_services(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    cache: MemoryCacheProvider = components["cache"]
    cache.start_sweeper(config.get("cache", {}).get("sweep_interval_seconds", 60))
    await components["photo_store"].initialize()
    await components["media_orchestrator"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    await cache.stop_sweeper()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="BackpackBuddy API",
        version=__version__,
        description=(
            "Destination basics, weather and attributed location photos "
            "for the BackpackBuddy travel planner."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    # -- Locally stored photos --
    if not settings.supabase_storage_configured:
        application.mount(
            _MEDIA_URL_PREFIX,
            StaticFiles(directory=settings.local_media_dir, check_dir=False),
            name="media",
        )

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "backpackbuddy.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
