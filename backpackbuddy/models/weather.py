"""Weather models returned by the weather service."""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Units = Literal["metric", "imperial"]


class WeatherCurrent(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp: int
    feels_like: int
    description: str
    icon: str
    humidity: int
    wind_speed: float
    wind_deg: int | None = None
    pressure: int
    visibility: int | None = None
    sunrise: int
    sunset: int


class WeatherForecastDay(BaseModel):
    """One calendar day aggregated from 3-hour forecast samples."""

    model_config = ConfigDict(frozen=True)

    dt: int
    temp_min: int
    temp_max: int
    pop: int = Field(ge=0, le=100, description="Probability of precipitation, percent")
    description: str
    icon: str
    wind_speed: int


class WeatherMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    units: Units
    provider: str = "openweather"
    cache_hit: bool = False
    fetched_at: datetime.datetime


class WeatherResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: WeatherCurrent
    forecast: list[WeatherForecastDay] = Field(default_factory=list, max_length=5)
    meta: WeatherMeta
