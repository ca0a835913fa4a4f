"""Abstract provider interfaces.

Business logic depends on these contracts only; concrete adapters live in
``backpackbuddy.providers`` and are wired together in ``backpackbuddy.main``.
"""

from backpackbuddy.interfaces.cache_provider import ICacheProvider
from backpackbuddy.interfaces.geo_provider import ICitySearchProvider, ICountryDataProvider
from backpackbuddy.interfaces.media_provider import IMediaProvider
from backpackbuddy.interfaces.photo_store import ILocationPhotoStore, IObjectStore
from backpackbuddy.interfaces.weather_provider import IWeatherProvider

__all__ = [
    "ICacheProvider",
    "ICitySearchProvider",
    "ICountryDataProvider",
    "ILocationPhotoStore",
    "IMediaProvider",
    "IObjectStore",
    "IWeatherProvider",
]
