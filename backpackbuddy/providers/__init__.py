"""Concrete adapters for caches, media, geo, weather and photo storage."""
