"""Application services: media orchestration, geo basics and weather."""

from backpackbuddy.services.geo_service import GeoService
from backpackbuddy.services.media_orchestrator import MediaOrchestrator
from backpackbuddy.services.weather_service import WeatherService

__all__ = ["GeoService", "MediaOrchestrator", "WeatherService"]
