"""Media providers, listed in the orchestrator's fallback order.

1. GooglePlacesProvider -- only when a photo reference is known
2. UnsplashProvider     -- rate-limited (50 requests/hour by default)
3. WikimediaProvider    -- free, unmetered
4. PexelsProvider       -- final fallback
"""

from backpackbuddy.providers.media.google_places_provider import GooglePlacesProvider
from backpackbuddy.providers.media.pexels_provider import PexelsProvider
from backpackbuddy.providers.media.unsplash_provider import UnsplashProvider
from backpackbuddy.providers.media.wikimedia_provider import WikimediaProvider

__all__ = [
    "GooglePlacesProvider",
    "PexelsProvider",
    "UnsplashProvider",
    "WikimediaProvider",
]
