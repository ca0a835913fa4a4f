"""Country and city basics for a destination.

Combines a country-data provider (RestCountries) with a city-search
provider (GeoNames) behind the shared TTL cache.  Countries are cached for
a day and cities for six hours; both entries are keyed by the requested
language so localized responses never mix.

The country lookup is mandatory: when it fails the whole call answers
``None``.  The city lookup is best effort and any application error from
it only drops the ``city`` field.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from backpackbuddy.interfaces.cache_provider import ICacheProvider
from backpackbuddy.interfaces.geo_provider import ICitySearchProvider, ICountryDataProvider
from backpackbuddy.models.geo import (
    CityInfo,
    CountryInfo,
    Currency,
    GeoBasicsQuery,
    GeoBasicsResponse,
    GeoMeta,
)
from backpackbuddy.utils.errors import BackpackBuddyError, UpstreamError
from backpackbuddy.utils.logging import get_logger
from backpackbuddy.utils.text_normalizer import slugify_place_name

COUNTRY_TTL_SECONDS = 24 * 60 * 60
CITY_TTL_SECONDS = 6 * 60 * 60


def country_cache_key(query: GeoBasicsQuery) -> str:
    identifier = query.country_code or query.country_name or ""
    return f"geo:country:{identifier}:{query.lang}"


def city_cache_key(query: GeoBasicsQuery) -> str:
    if query.has_coordinates:
        identifier = f"{query.lat:.4f}:{query.lng:.4f}"
    else:
        identifier = slugify_place_name(query.city_name or "")
    return f"geo:city:{identifier}:{query.lang}"


def map_country(record: dict[str, Any]) -> CountryInfo:
    """Normalize a RestCountries v3.1 record."""
    currencies = [
        Currency(code=code, name=data.get("name", code), symbol=data.get("symbol") or code)
        for code, data in (record.get("currencies") or {}).items()
    ]
    idd = record.get("idd") or {}
    root = idd.get("root")
    suffixes = idd.get("suffixes")
    calling_code = ""
    if root and suffixes is not None:
        calling_code = f"{root}{suffixes[0] if suffixes else ''}"
    flags = record.get("flags") or {}
    return CountryInfo(
        name=record["name"]["common"],
        code=record["cca2"],
        flag_url=flags.get("svg") or flags.get("png") or "",
        currencies=currencies,
        languages=list((record.get("languages") or {}).values()),
        timezones=list(record.get("timezones") or []),
        calling_code=calling_code,
    )


def map_city(record: dict[str, Any]) -> CityInfo:
    """Normalize a GeoNames geoname.  GeoNames sends coordinates as strings."""
    timezone_info = record.get("timezone") or {}
    population = record.get("population")
    return CityInfo(
        name=record["name"],
        lat=float(record["lat"]),
        lng=float(record["lng"]),
        population=int(population) if population is not None else None,
        timezone=timezone_info.get("timeZoneId"),
    )


class GeoService:
    """Country and optional city basics, cached per language."""

    def __init__(
        self,
        cache: ICacheProvider,
        country_provider: ICountryDataProvider,
        city_provider: ICitySearchProvider,
        country_ttl: int = COUNTRY_TTL_SECONDS,
        city_ttl: int = CITY_TTL_SECONDS,
    ) -> None:
        self._cache = cache
        self._country_provider = country_provider
        self._city_provider = city_provider
        self._country_ttl = country_ttl
        self._city_ttl = city_ttl
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def get_basics(self, query: GeoBasicsQuery) -> GeoBasicsResponse | None:
        """Return country (and city, when requested) basics for *query*.

        ``meta.cache_hit`` is true only when every lookup this call needed
        was answered from the cache.  Returns ``None`` when the country
        cannot be resolved.

        Raises
        ------
        backpackbuddy.utils.errors.UpstreamError
            When the country provider cannot be reached.
        """
        providers: list[str] = []

        country_key = country_cache_key(query)
        cached_country = await self._cache.get(country_key)
        country_cached = cached_country is not None
        if country_cached:
            country = CountryInfo.model_validate(cached_country)
        else:
            if query.country_code:
                record = await self._country_provider.get_by_code(query.country_code)
            else:
                record = await self._country_provider.get_by_name(query.country_name or "")
            if not record:
                self._logger.info(
                    "geo_country_not_found",
                    country_code=query.country_code,
                    country_name=query.country_name,
                )
                return None
            providers.append(self._country_provider.get_provider_name())
            try:
                country = map_country(record)
            except (KeyError, TypeError) as exc:
                raise UpstreamError(
                    f"Malformed country record: missing {exc}",
                    provider_name=self._country_provider.get_provider_name(),
                ) from exc
            await self._cache.set(country_key, country, self._country_ttl)

        city: CityInfo | None = None
        city_cached = True
        if query.wants_city:
            city, city_cached = await self._resolve_city(query, providers)

        cache_hit = country_cached and city_cached
        self._logger.info(
            "geo_basics_resolved",
            country=country.code,
            city=city.name if city else None,
            providers=providers,
            cache_hit=cache_hit,
        )
        return GeoBasicsResponse(
            country=country,
            city=city,
            meta=GeoMeta(
                provider=providers,
                cache_hit=cache_hit,
                fetched_at=datetime.now(timezone.utc),
            ),
        )

    async def _resolve_city(
        self, query: GeoBasicsQuery, providers: list[str]
    ) -> tuple[CityInfo | None, bool]:
        city_key = city_cache_key(query)
        cached_city = await self._cache.get(city_key)
        if cached_city is not None:
            return CityInfo.model_validate(cached_city), True

        try:
            record = await self._city_provider.search_city(
                q=query.city_name,
                lat=query.lat,
                lng=query.lng,
                country_code=query.country_code,
            )
        except BackpackBuddyError as exc:
            self._logger.warning("geo_city_lookup_failed", key=city_key, error=str(exc))
            return None, False

        if not record:
            return None, False

        try:
            city = map_city(record)
        except (KeyError, TypeError, ValueError) as exc:
            self._logger.warning("geo_city_malformed", key=city_key, error=str(exc))
            return None, False

        providers.append(self._city_provider.get_provider_name())
        await self._cache.set(city_key, city, self._city_ttl)
        return city, False
