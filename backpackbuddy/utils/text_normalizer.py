"""Text normalization helpers for cache keys and storage paths."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def slugify_place_name(name: str) -> str:
    """Lowercase *name* and replace every whitespace run with ``-``.

    >>> slugify_place_name("Rio de  Janeiro")
    'rio-de-janeiro'
    """
    return _WHITESPACE_RE.sub("-", name.lower())


def commons_file_name(name: str) -> str:
    """Return a Wikimedia Commons file title with spaces as underscores."""
    return name.replace(" ", "_")
