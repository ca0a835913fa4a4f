"""Weather data providers."""

from backpackbuddy.providers.weather.openweather_provider import OpenWeatherProvider

__all__ = ["OpenWeatherProvider"]
