"""Country and city models assembled by the geo service."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    symbol: str


class CountryInfo(BaseModel):
    """Country basics normalized from a RestCountries record."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: str
    flag_url: str = ""
    currencies: list[Currency] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    timezones: list[str] = Field(default_factory=list)
    calling_code: str = ""


class CityInfo(BaseModel):
    """City basics normalized from a GeoNames record."""

    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float
    population: int | None = None
    timezone: str | None = None


class GeoMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: list[str] = Field(default_factory=list)
    cache_hit: bool = False
    fetched_at: datetime.datetime


class GeoBasicsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: CountryInfo
    city: CityInfo | None = None
    meta: GeoMeta


class GeoBasicsQuery(BaseModel):
    """Parameters for :meth:`GeoService.get_basics`.

    The country is looked up by ``country_code`` when given, else by
    ``country_name``.  A city is looked up when ``city_name`` or both
    ``lat`` and ``lng`` are supplied; coordinates take precedence.
    """

    model_config = ConfigDict(frozen=True)

    country_code: str | None = None
    country_name: str | None = None
    city_name: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    lang: str = "en"

    @model_validator(mode="after")
    def _require_country(self) -> GeoBasicsQuery:
        if not (self.country_code or self.country_name):
            raise ValueError("Either country_code or country_name is required")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def wants_city(self) -> bool:
        return bool(self.city_name) or self.has_coordinates
