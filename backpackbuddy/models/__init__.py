"""Pydantic models for media, geo and weather data."""

from backpackbuddy.models.geo import (
    CityInfo,
    CountryInfo,
    Currency,
    GeoBasicsQuery,
    GeoBasicsResponse,
    GeoMeta,
)
from backpackbuddy.models.media import (
    AttributionInfo,
    ImageRequest,
    ImageResult,
    LocationPhoto,
    MediaTTL,
    PhotoLookupOptions,
    PhotoLookupResult,
    PopulateReport,
    RateLimitStatus,
)
from backpackbuddy.models.weather import (
    WeatherCurrent,
    WeatherForecastDay,
    WeatherMeta,
    WeatherResponse,
)

__all__ = [
    "AttributionInfo",
    "CityInfo",
    "CountryInfo",
    "Currency",
    "GeoBasicsQuery",
    "GeoBasicsResponse",
    "GeoMeta",
    "ImageRequest",
    "ImageResult",
    "LocationPhoto",
    "MediaTTL",
    "PhotoLookupOptions",
    "PhotoLookupResult",
    "PopulateReport",
    "RateLimitStatus",
    "WeatherCurrent",
    "WeatherForecastDay",
    "WeatherMeta",
    "WeatherResponse",
]
