"""Custom exception hierarchy for BackpackBuddy.

All application exceptions inherit from :class:`BackpackBuddyError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "unsplash", "openweather", "restcountries") caused
the failure.

    BackpackBuddyError  (base -- catch-all for any BackpackBuddy error)
    +-- NotEnabledError      (integration switched off via configuration)
    +-- NotFoundError        (no matching content upstream)
    +-- RateLimitError       (local quota exhausted, carries reset time)
    +-- UpstreamError        (non-success HTTP status or malformed response)
    +-- StorageError         (photo persistence / object upload failed)
    +-- ConfigurationError   (startup / missing config)

The media orchestrator catches these per provider to fall through to the
next one; the HTTP layer maps each class to a status code.
"""

from __future__ import annotations

from datetime import datetime


class BackpackBuddyError(Exception):
    """Base exception for all BackpackBuddy errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[unsplash] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Integration availability / lookup errors
# ---------------------------------------------------------------------------

class NotEnabledError(BackpackBuddyError):
    """Raised when an integration is disabled (missing key or feature flag)."""

    def __init__(
        self,
        message: str = "Integration is not enabled",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(BackpackBuddyError):
    """Raised when the upstream service has no content matching the lookup."""

    def __init__(
        self,
        message: str = "No matching content found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(BackpackBuddyError):
    """Raised when a locally tracked request quota is exhausted.

    ``reset_at`` is the moment the oldest tracked request leaves the
    window and a slot frees up again.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
        reset_at: datetime | None = None,
    ) -> None:
        self._reset_at = reset_at
        super().__init__(message=message, provider_name=provider_name)

    @property
    def reset_at(self) -> datetime | None:
        return self._reset_at


class UpstreamError(BackpackBuddyError):
    """Raised for non-2xx responses, transport failures or malformed payloads."""

    def __init__(
        self,
        message: str = "Upstream service request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


# ---------------------------------------------------------------------------
# Persistence / configuration errors
# ---------------------------------------------------------------------------

class StorageError(BackpackBuddyError):
    """Raised when persisting a photo record or uploading image bytes fails."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(BackpackBuddyError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
