"""Configuration module -- exports Settings and load_config."""

from backpackbuddy.config.loader import load_config
from backpackbuddy.config.settings import Settings

__all__ = ["Settings", "load_config"]
