"""FastAPI routes for destination basics, weather and location photos.

Endpoint                          Method  Description
/api/v1/destinations/geo          GET     Country (+ city) basics
/api/v1/destinations/weather      GET     Current weather + 5-day forecast
/api/v1/media/location-photo      POST    Stored or freshly fetched photo
/api/v1/media/unsplash/rate-limit GET     Unsplash quota status
/api/v1/health                    GET     Integration status

Services are read from ``app.state`` (populated by ``main.build_services``)
through ``Depends`` helpers so tests can swap in mocks.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from backpackbuddy import __version__
from backpackbuddy.api.schemas import ErrorResponse, HealthResponse
from backpackbuddy.models.geo import GeoBasicsQuery, GeoBasicsResponse
from backpackbuddy.models.media import PhotoLookupOptions, PhotoLookupResult, RateLimitStatus
from backpackbuddy.models.weather import Units, WeatherResponse
from backpackbuddy.services.geo_service import GeoService
from backpackbuddy.services.media_orchestrator import MediaOrchestrator
from backpackbuddy.services.weather_service import WeatherService

router = APIRouter(prefix="/api/v1")


def _get_geo_service(request: Request) -> GeoService:
    return request.app.state.geo_service


def _get_weather_service(request: Request) -> WeatherService:
    return request.app.state.weather_service


def _get_media_orchestrator(request: Request) -> MediaOrchestrator:
    return request.app.state.media_orchestrator


GeoServiceDep = Annotated[GeoService, Depends(_get_geo_service)]
WeatherServiceDep = Annotated[WeatherService, Depends(_get_weather_service)]
OrchestratorDep = Annotated[MediaOrchestrator, Depends(_get_media_orchestrator)]

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "/destinations/geo",
    response_model=GeoBasicsResponse,
    responses=_ERROR_RESPONSES,
    summary="Country and city basics",
)
async def get_geo_basics(
    geo_service: GeoServiceDep,
    country_code: str | None = None,
    country_name: str | None = None,
    city_name: str | None = None,
    lat: Annotated[float | None, Query(ge=-90, le=90)] = None,
    lng: Annotated[float | None, Query(ge=-180, le=180)] = None,
    lang: str = "en",
) -> GeoBasicsResponse:
    """Return country basics and, when a city or coordinates are given, city basics."""
    try:
        query = GeoBasicsQuery(
            country_code=country_code,
            country_name=country_name,
            city_name=city_name,
            lat=lat,
            lng=lng,
            lang=lang,
        )
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise HTTPException(status_code=422, detail=messages) from exc

    result = await geo_service.get_basics(query)
    if result is None:
        raise HTTPException(status_code=404, detail="Country not found")
    return result


@router.get(
    "/destinations/weather",
    response_model=WeatherResponse,
    responses=_ERROR_RESPONSES,
    summary="Current weather and 5-day forecast",
)
async def get_weather(
    weather_service: WeatherServiceDep,
    lat: Annotated[float, Query(ge=-90, le=90)],
    lng: Annotated[float, Query(ge=-180, le=180)],
    units: Units = "metric",
    lang: str = "en",
) -> WeatherResponse:
    return await weather_service.get_by_lat_lng(lat, lng, units=units, lang=lang)


@router.post(
    "/media/location-photo",
    response_model=PhotoLookupResult,
    responses=_ERROR_RESPONSES,
    summary="Get or fetch a location photo",
)
async def get_location_photo(
    options: PhotoLookupOptions, orchestrator: OrchestratorDep
) -> PhotoLookupResult:
    """Return the entity's stored photo, or fetch one through the provider fallback chain."""
    return await orchestrator.get_location_photo(options)


@router.get(
    "/media/unsplash/rate-limit",
    response_model=RateLimitStatus,
    responses={404: {"model": ErrorResponse}},
    summary="Unsplash request quota",
)
async def get_unsplash_rate_limit(orchestrator: OrchestratorDep) -> RateLimitStatus:
    status = orchestrator.get_unsplash_rate_limit()
    if status is None:
        raise HTTPException(status_code=404, detail="Unsplash is not configured")
    return status


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application version and which integrations are enabled."""
    providers = dict(getattr(request.app.state, "provider_registry", {}))
    return HealthResponse(status="healthy", version=__version__, providers=providers)
