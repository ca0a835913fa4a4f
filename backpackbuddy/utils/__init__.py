"""Utility modules for BackpackBuddy.

- **errors** -- Domain exception hierarchy rooted at BackpackBuddyError;
  adapters raise NotEnabledError, NotFoundError, RateLimitError and
  UpstreamError so callers can fall back or map them to HTTP statuses.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- slug and file-title helpers used to build cache
  keys and Commons titles.
"""

from backpackbuddy.utils.errors import (
    BackpackBuddyError,
    ConfigurationError,
    NotEnabledError,
    NotFoundError,
    RateLimitError,
    StorageError,
    UpstreamError,
)
from backpackbuddy.utils.logging import configure_logging, get_logger
from backpackbuddy.utils.text_normalizer import commons_file_name, slugify_place_name

__all__ = [
    "BackpackBuddyError",
    "ConfigurationError",
    "NotEnabledError",
    "NotFoundError",
    "RateLimitError",
    "StorageError",
    "UpstreamError",
    "commons_file_name",
    "configure_logging",
    "get_logger",
    "slugify_place_name",
]
