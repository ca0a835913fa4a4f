"""Country and city lookup providers."""

from backpackbuddy.providers.geo.geonames_provider import GeoNamesProvider
from backpackbuddy.providers.geo.rest_countries_provider import RestCountriesProvider

__all__ = ["GeoNamesProvider", "RestCountriesProvider"]
