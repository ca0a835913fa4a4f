"""Integration tests for FastAPI API endpoints using TestClient."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backpackbuddy import __version__
from backpackbuddy.api.middleware import ErrorHandlingMiddleware, status_for_error
from backpackbuddy.api.routes import router as api_router
from backpackbuddy.models.geo import CityInfo, CountryInfo, GeoBasicsResponse, GeoMeta
from backpackbuddy.models.media import PhotoLookupResult, RateLimitStatus
from backpackbuddy.models.weather import (
    WeatherCurrent,
    WeatherForecastDay,
    WeatherMeta,
    WeatherResponse,
)
from backpackbuddy.utils.errors import (
    BackpackBuddyError,
    NotEnabledError,
    NotFoundError,
    RateLimitError,
    StorageError,
    UpstreamError,
)

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _geo_response() -> GeoBasicsResponse:
    return GeoBasicsResponse(
        country=CountryInfo(name="Peru", code="PE", calling_code="+51"),
        city=CityInfo(name="Lima", lat=-12.04, lng=-77.03, timezone="America/Lima"),
        meta=GeoMeta(provider=["restcountries", "geonames"], fetched_at=_NOW),
    )


def _weather_response() -> WeatherResponse:
    return WeatherResponse(
        current=WeatherCurrent(
            temp=22,
            feels_like=21,
            description="clear sky",
            icon="01d",
            humidity=40,
            wind_speed=3.1,
            pressure=1013,
            sunrise=1,
            sunset=2,
        ),
        forecast=[
            WeatherForecastDay(
                dt=1704067200,
                temp_min=12,
                temp_max=23,
                pop=20,
                description="few clouds",
                icon="02d",
                wind_speed=3,
            )
        ],
        meta=WeatherMeta(units="metric", fetched_at=_NOW),
    )


@pytest.fixture()
def services() -> dict:
    orchestrator = MagicMock()
    orchestrator.get_location_photo = AsyncMock()
    return {
        "geo_service": AsyncMock(),
        "weather_service": AsyncMock(),
        "media_orchestrator": orchestrator,
    }


@pytest.fixture()
def client(services) -> TestClient:
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.include_router(api_router)
    for key, value in services.items():
        setattr(app.state, key, value)
    app.state.provider_registry = {"unsplash": True, "openweather": False}
    return TestClient(app)


# ---------------------------------------------------------------------------
# Geo
# ---------------------------------------------------------------------------


class TestGeoEndpoint:
    def test_returns_country_and_city(self, client, services) -> None:
        services["geo_service"].get_basics.return_value = _geo_response()

        resp = client.get(
            "/api/v1/destinations/geo",
            params={"country_code": "PE", "lat": -12.04, "lng": -77.03, "lang": "es"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["country"]["calling_code"] == "+51"
        assert body["city"]["name"] == "Lima"
        assert body["meta"]["provider"] == ["restcountries", "geonames"]
        query = services["geo_service"].get_basics.await_args.args[0]
        assert query.lang == "es"
        assert query.has_coordinates

    def test_requires_a_country(self, client, services) -> None:
        resp = client.get("/api/v1/destinations/geo", params={"city_name": "Lima"})

        assert resp.status_code == 422
        assert "country_code or country_name" in resp.json()["detail"]
        services["geo_service"].get_basics.assert_not_awaited()

    def test_rejects_out_of_range_latitude(self, client) -> None:
        resp = client.get(
            "/api/v1/destinations/geo", params={"country_code": "PE", "lat": 91, "lng": 0}
        )
        assert resp.status_code == 422

    def test_unknown_country_is_404(self, client, services) -> None:
        services["geo_service"].get_basics.return_value = None

        resp = client.get("/api/v1/destinations/geo", params={"country_code": "ZZ"})

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Country not found"

    def test_upstream_failure_is_502(self, client, services) -> None:
        services["geo_service"].get_basics.side_effect = UpstreamError(
            "RestCountries returned 500", provider_name="restcountries", status_code=500
        )

        resp = client.get("/api/v1/destinations/geo", params={"country_code": "PE"})

        assert resp.status_code == 502
        assert resp.json() == {"error": "UpstreamError", "detail": "RestCountries returned 500"}


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------


class TestWeatherEndpoint:
    def test_returns_weather(self, client, services) -> None:
        services["weather_service"].get_by_lat_lng.return_value = _weather_response()

        resp = client.get(
            "/api/v1/destinations/weather",
            params={"lat": 48.8566, "lng": 2.3522, "units": "imperial", "lang": "fr"},
        )

        assert resp.status_code == 200
        assert resp.json()["current"]["temp"] == 22
        services["weather_service"].get_by_lat_lng.assert_awaited_once_with(
            48.8566, 2.3522, units="imperial", lang="fr"
        )

    def test_missing_coordinates(self, client) -> None:
        resp = client.get("/api/v1/destinations/weather", params={"lat": 1})
        assert resp.status_code == 422

    def test_invalid_units(self, client) -> None:
        resp = client.get(
            "/api/v1/destinations/weather", params={"lat": 1, "lng": 2, "units": "kelvin"}
        )
        assert resp.status_code == 422

    def test_disabled_is_503(self, client, services) -> None:
        services["weather_service"].get_by_lat_lng.side_effect = NotEnabledError(
            "OpenWeather API is not enabled", provider_name="openweather"
        )

        resp = client.get("/api/v1/destinations/weather", params={"lat": 1, "lng": 2})

        assert resp.status_code == 503
        assert resp.json() == {
            "error": "NotEnabledError",
            "detail": "OpenWeather API is not enabled",
        }


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


class TestMediaEndpoints:
    _BODY = {
        "entity_type": "destination",
        "entity_id": "42",
        "entity_name": "Machu Picchu",
        "country": "Peru",
    }

    def test_location_photo(self, client, services) -> None:
        services["media_orchestrator"].get_location_photo.return_value = PhotoLookupResult(
            url="https://cdn.test/a.jpg", source="unsplash", attribution="Photo by A on Unsplash"
        )

        resp = client.post("/api/v1/media/location-photo", json=self._BODY)

        assert resp.status_code == 200
        assert resp.json() == {
            "url": "https://cdn.test/a.jpg",
            "source": "unsplash",
            "attribution": "Photo by A on Unsplash",
            "cached": False,
        }
        options = services["media_orchestrator"].get_location_photo.await_args.args[0]
        assert options.entity_id == "42"
        assert options.force_refresh is False

    def test_location_photo_validation(self, client) -> None:
        resp = client.post("/api/v1/media/location-photo", json={"entity_type": "destination"})
        assert resp.status_code == 422

    def test_no_source_available_is_404(self, client, services) -> None:
        services["media_orchestrator"].get_location_photo.side_effect = NotFoundError(
            "No image source available for Machu Picchu"
        )

        resp = client.post("/api/v1/media/location-photo", json=self._BODY)

        assert resp.status_code == 404
        assert resp.json()["detail"] == "No image source available for Machu Picchu"

    def test_storage_failure_is_500_json(self, client, services) -> None:
        services["media_orchestrator"].get_location_photo.side_effect = StorageError(
            "Failed to read location photo", provider_name="sqlite"
        )

        resp = client.post("/api/v1/media/location-photo", json=self._BODY)

        assert resp.status_code == 500
        assert resp.json() == {"error": "StorageError", "detail": "Failed to read location photo"}

    def test_rate_limit_error_sets_retry_after(self, client, services) -> None:
        services["media_orchestrator"].get_location_photo.side_effect = RateLimitError(
            "Unsplash rate limit reached", provider_name="unsplash", reset_at=_NOW
        )

        resp = client.post("/api/v1/media/location-photo", json=self._BODY)

        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "Sun, 01 Mar 2026 12:00:00 GMT"

    def test_unsplash_rate_limit(self, client, services) -> None:
        services["media_orchestrator"].get_unsplash_rate_limit.return_value = RateLimitStatus(
            remaining=12, total=50, reset_at=_NOW
        )

        resp = client.get("/api/v1/media/unsplash/rate-limit")

        assert resp.status_code == 200
        assert resp.json()["remaining"] == 12
        assert resp.json()["total"] == 50

    def test_unsplash_not_configured(self, client, services) -> None:
        services["media_orchestrator"].get_unsplash_rate_limit.return_value = None

        resp = client.get("/api/v1/media/unsplash/rate-limit")

        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Health and error mapping
# ---------------------------------------------------------------------------


class TestHealthAndErrors:
    def test_health(self, client) -> None:
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.json() == {
            "status": "healthy",
            "version": __version__,
            "providers": {"unsplash": True, "openweather": False},
        }

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (NotEnabledError(), 503),
            (NotFoundError(), 404),
            (RateLimitError(), 429),
            (UpstreamError(), 502),
            (StorageError(), 500),
            (BackpackBuddyError(), 500),
        ],
    )
    def test_status_for_error(self, error: BackpackBuddyError, status: int) -> None:
        assert status_for_error(error) == status
