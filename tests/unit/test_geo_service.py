"""Unit tests for GeoService caching, mapping and city fallbacks."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from backpackbuddy.interfaces.geo_provider import ICitySearchProvider, ICountryDataProvider
from backpackbuddy.models.geo import GeoBasicsQuery
from backpackbuddy.providers.cache.memory_cache import MemoryCacheProvider
from backpackbuddy.services.geo_service import (
    GeoService,
    city_cache_key,
    country_cache_key,
    map_city,
    map_country,
)
from backpackbuddy.utils.errors import UpstreamError

PERU = {
    "name": {"common": "Peru", "official": "Republic of Peru"},
    "cca2": "PE",
    "flags": {"png": "https://flagcdn.com/w320/pe.png", "svg": "https://flagcdn.com/pe.svg"},
    "currencies": {"PEN": {"name": "Peruvian sol", "symbol": "S/ "}},
    "languages": {"aym": "Aymara", "que": "Quechua", "spa": "Spanish"},
    "timezones": ["UTC-05:00"],
    "idd": {"root": "+5", "suffixes": ["1"]},
}

LIMA = {
    "name": "Lima",
    "lat": "-12.04318",
    "lng": "-77.02824",
    "population": 7737002,
    "timezone": {"timeZoneId": "America/Lima"},
}


def _country_provider(record=PERU) -> MagicMock:
    provider = MagicMock(spec=ICountryDataProvider)
    provider.get_provider_name.return_value = "restcountries"
    provider.get_by_code = AsyncMock(return_value=record)
    provider.get_by_name = AsyncMock(return_value=record)
    return provider


def _city_provider(record=LIMA, error: Exception | None = None) -> MagicMock:
    provider = MagicMock(spec=ICitySearchProvider)
    provider.get_provider_name.return_value = "geonames"
    provider.is_available.return_value = True
    provider.search_city = AsyncMock(return_value=record, side_effect=error)
    return provider


class TestCacheKeys:
    def test_country_key_prefers_code(self) -> None:
        query = GeoBasicsQuery(country_code="PE", country_name="Peru", lang="es")
        assert country_cache_key(query) == "geo:country:PE:es"

    def test_country_key_by_name(self) -> None:
        assert country_cache_key(GeoBasicsQuery(country_name="Peru")) == "geo:country:Peru:en"

    def test_city_key_rounds_coordinates_to_four_decimals(self) -> None:
        query = GeoBasicsQuery(country_code="PE", lat=-12.04637, lng=-77.04279)
        assert city_cache_key(query) == "geo:city:-12.0464:-77.0428:en"

    def test_city_key_slugifies_name(self) -> None:
        query = GeoBasicsQuery(country_code="US", city_name="New York")
        assert city_cache_key(query) == "geo:city:new-york:en"

    def test_coordinates_take_precedence_over_name(self) -> None:
        query = GeoBasicsQuery(country_code="PE", city_name="Lima", lat=1.0, lng=2.0)
        assert city_cache_key(query) == "geo:city:1.0000:2.0000:en"


class TestMapping:
    def test_map_country(self) -> None:
        country = map_country(PERU)
        assert country.name == "Peru"
        assert country.code == "PE"
        assert country.flag_url == "https://flagcdn.com/pe.svg"
        assert country.calling_code == "+51"
        assert country.languages == ["Aymara", "Quechua", "Spanish"]
        assert country.currencies[0].code == "PEN"
        assert country.currencies[0].symbol == "S/ "

    def test_map_country_fallbacks(self) -> None:
        record = {
            "name": {"common": "Nowhere"},
            "cca2": "NW",
            "flags": {"png": "https://flags.test/nw.png"},
            "currencies": {"NWD": {"name": "Nowhere dollar"}},
            "idd": {"root": "+9", "suffixes": []},
        }
        country = map_country(record)
        assert country.flag_url == "https://flags.test/nw.png"
        assert country.currencies[0].symbol == "NWD"
        assert country.calling_code == "+9"
        assert country.timezones == []

    def test_map_country_without_idd(self) -> None:
        country = map_country({"name": {"common": "X"}, "cca2": "XX"})
        assert country.calling_code == ""
        assert country.flag_url == ""

    def test_map_city_parses_string_coordinates(self) -> None:
        city = map_city(LIMA)
        assert city.lat == pytest.approx(-12.04318)
        assert city.lng == pytest.approx(-77.02824)
        assert city.population == 7737002
        assert city.timezone == "America/Lima"


class TestGeoService:
    @pytest.fixture()
    def cache(self, fake_clock) -> MemoryCacheProvider:
        return MemoryCacheProvider(timer=fake_clock)

    @pytest.mark.asyncio
    async def test_country_only(self, cache) -> None:
        countries = _country_provider()
        cities = _city_provider()
        service = GeoService(cache, countries, cities)

        response = await service.get_basics(GeoBasicsQuery(country_code="PE"))

        assert response is not None
        assert response.country.name == "Peru"
        assert response.city is None
        assert response.meta.provider == ["restcountries"]
        assert response.meta.cache_hit is False
        countries.get_by_code.assert_awaited_once_with("PE")
        cities.search_city.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, cache) -> None:
        countries = _country_provider()
        service = GeoService(cache, countries, _city_provider())
        query = GeoBasicsQuery(country_code="PE")

        await service.get_basics(query)
        response = await service.get_basics(query)

        assert response is not None
        assert response.meta.cache_hit is True
        assert response.meta.provider == []
        countries.get_by_code.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lookup_by_name(self, cache) -> None:
        countries = _country_provider()
        service = GeoService(cache, countries, _city_provider())

        await service.get_basics(GeoBasicsQuery(country_name="Peru"))

        countries.get_by_name.assert_awaited_once_with("Peru")
        countries.get_by_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_country_and_city(self, cache) -> None:
        cities = _city_provider()
        service = GeoService(cache, _country_provider(), cities)

        response = await service.get_basics(
            GeoBasicsQuery(country_code="PE", lat=-12.04637, lng=-77.04279)
        )

        assert response is not None
        assert response.city is not None
        assert response.city.name == "Lima"
        assert response.meta.provider == ["restcountries", "geonames"]
        cities.search_city.assert_awaited_once_with(
            q=None, lat=-12.04637, lng=-77.04279, country_code="PE"
        )
        assert await cache.has("geo:city:-12.0464:-77.0428:en")

    @pytest.mark.asyncio
    async def test_cache_hit_requires_city_from_cache_too(self, cache) -> None:
        service = GeoService(cache, _country_provider(), _city_provider())
        await service.get_basics(GeoBasicsQuery(country_code="PE"))

        response = await service.get_basics(GeoBasicsQuery(country_code="PE", city_name="Lima"))
        assert response is not None
        assert response.meta.cache_hit is False
        assert response.meta.provider == ["geonames"]

        response = await service.get_basics(GeoBasicsQuery(country_code="PE", city_name="Lima"))
        assert response is not None
        assert response.meta.cache_hit is True

    @pytest.mark.asyncio
    async def test_city_failure_is_not_fatal(self, cache) -> None:
        cities = _city_provider(error=UpstreamError("down", provider_name="geonames"))
        service = GeoService(cache, _country_provider(), cities)

        response = await service.get_basics(GeoBasicsQuery(country_code="PE", city_name="Lima"))

        assert response is not None
        assert response.city is None
        assert response.meta.cache_hit is False
        assert response.meta.provider == ["restcountries"]

    @pytest.mark.asyncio
    async def test_missing_city_result(self, cache) -> None:
        service = GeoService(cache, _country_provider(), _city_provider(record=None))
        response = await service.get_basics(GeoBasicsQuery(country_code="PE", city_name="Atlantis"))
        assert response is not None
        assert response.city is None

    @pytest.mark.asyncio
    async def test_unknown_country_returns_none(self, cache) -> None:
        service = GeoService(cache, _country_provider(record=None), _city_provider())
        assert await service.get_basics(GeoBasicsQuery(country_code="ZZ")) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_malformed_country_raises_upstream_error(self, cache) -> None:
        service = GeoService(cache, _country_provider(record={"cca2": "PE"}), _city_provider())
        with pytest.raises(UpstreamError):
            await service.get_basics(GeoBasicsQuery(country_code="PE"))

    @pytest.mark.asyncio
    async def test_language_partitions_cache(self, cache) -> None:
        countries = _country_provider()
        service = GeoService(cache, countries, _city_provider())

        await service.get_basics(GeoBasicsQuery(country_code="PE", lang="en"))
        await service.get_basics(GeoBasicsQuery(country_code="PE", lang="es"))

        assert countries.get_by_code.await_count == 2

    @pytest.mark.asyncio
    async def test_country_entry_expires(self, cache, fake_clock) -> None:
        countries = _country_provider()
        service = GeoService(cache, countries, _city_provider(), country_ttl=60)
        query = GeoBasicsQuery(country_code="PE")

        await service.get_basics(query)
        fake_clock.advance(61)
        response = await service.get_basics(query)

        assert response is not None
        assert response.meta.cache_hit is False
        assert countries.get_by_code.await_count == 2
