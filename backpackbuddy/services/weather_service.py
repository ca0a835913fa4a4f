"""Current weather plus a 5-day outlook for a coordinate pair.

Current conditions are cached for ten minutes and the forecast for an
hour.  A response counts as a cache hit only when both halves are cached;
if either is missing, both are fetched again concurrently and both are
re-cached.

The upstream forecast is a list of 3-hour samples.  :func:`group_forecast`
folds them into at most five calendar days, using per-day extremes for the
temperature range and the wettest sample for the precipitation chance.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Iterable
from datetime import datetime, timezone, tzinfo
from typing import Any

import structlog

from backpackbuddy.config.settings import Settings
from backpackbuddy.interfaces.cache_provider import ICacheProvider
from backpackbuddy.interfaces.weather_provider import IWeatherProvider
from backpackbuddy.models.weather import (
    Units,
    WeatherCurrent,
    WeatherForecastDay,
    WeatherMeta,
    WeatherResponse,
)
from backpackbuddy.utils.errors import NotEnabledError, UpstreamError
from backpackbuddy.utils.logging import get_logger

CURRENT_TTL_SECONDS = 10 * 60
FORECAST_TTL_SECONDS = 60 * 60
MAX_FORECAST_DAYS = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going towards +infinity."""
    return math.floor(value + 0.5)


def _format_coordinate(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def weather_cache_key(kind: str, lat: float, lng: float, units: str, lang: str) -> str:
    return f"weather:{kind}:{_format_coordinate(lat)}:{_format_coordinate(lng)}:{units}:{lang}"


def normalize_current(data: dict[str, Any]) -> WeatherCurrent:
    main = data["main"]
    weather = data["weather"][0]
    wind = data.get("wind") or {}
    sys_info = data.get("sys") or {}
    return WeatherCurrent(
        temp=round_half_up(main["temp"]),
        feels_like=round_half_up(main["feels_like"]),
        description=weather["description"],
        icon=weather["icon"],
        humidity=main["humidity"],
        wind_speed=wind.get("speed", 0.0),
        wind_deg=wind.get("deg"),
        pressure=main["pressure"],
        visibility=data.get("visibility"),
        sunrise=sys_info.get("sunrise", 0),
        sunset=sys_info.get("sunset", 0),
    )


def group_forecast(
    samples: Iterable[dict[str, Any]],
    tz: tzinfo | None = None,
    max_days: int = MAX_FORECAST_DAYS,
) -> list[WeatherForecastDay]:
    """Fold 3-hour forecast samples into daily summaries.

    Samples are grouped by calendar date in *tz* (the server's local zone
    when ``None``), keeping the order in which dates first appear.
    """
    days: dict[Any, list[dict[str, Any]]] = {}
    for sample in samples:
        day = datetime.fromtimestamp(sample["dt"], tz=tz).date()
        days.setdefault(day, []).append(sample)

    forecast: list[WeatherForecastDay] = []
    for group in list(days.values())[:max_days]:
        temps = [s["main"]["temp"] for s in group]
        pops = [s.get("pop") or 0 for s in group]
        winds = [(s.get("wind") or {}).get("speed", 0) for s in group]
        first = group[0]
        forecast.append(
            WeatherForecastDay(
                dt=first["dt"],
                temp_min=round_half_up(min(temps)),
                temp_max=round_half_up(max(temps)),
                pop=round_half_up(max(pops) * 100),
                description=first["weather"][0]["description"],
                icon=first["weather"][0]["icon"],
                wind_speed=round_half_up(sum(winds) / len(winds)),
            )
        )
    return forecast


class WeatherService:
    """Cached OpenWeather lookups."""

    def __init__(
        self,
        settings: Settings,
        cache: ICacheProvider,
        provider: IWeatherProvider,
        current_ttl: int = CURRENT_TTL_SECONDS,
        forecast_ttl: int = FORECAST_TTL_SECONDS,
        tz: tzinfo | None = None,
        forecast_days: int = MAX_FORECAST_DAYS,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._provider = provider
        self._current_ttl = current_ttl
        self._forecast_ttl = forecast_ttl
        self._tz = tz
        self._forecast_days = max(1, min(forecast_days, MAX_FORECAST_DAYS))
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def is_enabled(self) -> bool:
        return self._settings.openweather_enabled

    async def get_by_lat_lng(
        self, lat: float, lng: float, units: Units = "metric", lang: str = "en"
    ) -> WeatherResponse:
        """Return current conditions and up to five daily forecasts.

        Raises
        ------
        NotEnabledError
            Unless both ``ENABLE_OPENWEATHER`` and ``OPENWEATHER_API_KEY``
            are set.
        UpstreamError
            When OpenWeather fails or answers with an unexpected payload.
        """
        if not self.is_enabled():
            raise NotEnabledError("OpenWeather API is not enabled", provider_name="openweather")

        current_key = weather_cache_key("current", lat, lng, units, lang)
        forecast_key = weather_cache_key("forecast", lat, lng, units, lang)

        cached_current = await self._cache.get(current_key)
        cached_forecast = await self._cache.get(forecast_key)
        if cached_current is not None and cached_forecast is not None:
            self._logger.info("weather_cache_hit", lat=lat, lng=lng, units=units, lang=lang)
            return self._build_response(cached_current, cached_forecast, units, cache_hit=True)

        current_raw, forecast_raw = await asyncio.gather(
            self._provider.get_current(lat, lng, units, lang),
            self._provider.get_forecast(lat, lng, units, lang),
        )
        try:
            current = normalize_current(current_raw)
            forecast = group_forecast(
                forecast_raw.get("list") or [], tz=self._tz, max_days=self._forecast_days
            )
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamError(
                f"Malformed OpenWeather payload: {exc!r}",
                provider_name=self._provider.get_provider_name(),
            ) from exc

        await self._cache.set(current_key, current, self._current_ttl)
        await self._cache.set(forecast_key, forecast, self._forecast_ttl)
        self._logger.info(
            "weather_fetched",
            provider=self._provider.get_provider_name(),
            lat=lat,
            lng=lng,
            days=len(forecast),
        )
        return self._build_response(current, forecast, units, cache_hit=False)

    def _build_response(
        self,
        current: WeatherCurrent,
        forecast: list[WeatherForecastDay],
        units: Units,
        cache_hit: bool,
    ) -> WeatherResponse:
        return WeatherResponse(
            current=current,
            forecast=forecast,
            meta=WeatherMeta(
                units=units,
                provider=self._provider.get_provider_name(),
                cache_hit=cache_hit,
                fetched_at=datetime.now(timezone.utc),
            ),
        )
