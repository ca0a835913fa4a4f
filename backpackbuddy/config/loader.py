"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config`` reads the YAML file first, then deep-merges the
environment-based values from :class:`Settings` on top.
"""

from pathlib import Path

import yaml

from backpackbuddy.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "media": {
            "enabled_providers": settings.get_enabled_media_providers(),
            "bucket": settings.location_photos_bucket,
            "unsplash_rate_limit": {
                "max_requests": settings.unsplash_max_requests,
                "window_seconds": settings.unsplash_window_seconds,
            },
        },
        "weather": {
            "enabled": settings.openweather_enabled,
            "base_url": settings.openweather_base_url,
        },
        "geo": {
            "restcountries_base_url": settings.restcountries_base_url,
            "geonames_base_url": settings.geonames_base_url,
        },
        "cache": {
            "sweep_interval_seconds": settings.cache_sweep_interval,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
