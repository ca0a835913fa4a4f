"""Shared httpx helpers for upstream API calls.

Every outbound request is logged with provider, endpoint, latency and
status.  Transport failures, non-2xx statuses and unparseable bodies are
converted into :class:`~backpackbuddy.utils.errors.UpstreamError` so
callers only deal with the application hierarchy.  Query strings are never
logged because several APIs take their key as a parameter.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from backpackbuddy.utils.errors import UpstreamError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_HEADERS = {
    "User-Agent": "BackpackBuddy/0.1 (+https://github.com/backpackbuddy)",
}


def build_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` with the project's default headers."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers=DEFAULT_HEADERS,
        follow_redirects=True,
    )


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider_name: str,
    endpoint: str,
    **kwargs: Any,
) -> httpx.Response:
    """Issue a GET and log it.  Does not check the status code."""
    start = time.perf_counter()
    try:
        response = await client.get(url, **kwargs)
    except httpx.HTTPError as exc:
        logger.error(
            "upstream_request_failed",
            provider=provider_name,
            endpoint=endpoint,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            error=str(exc),
        )
        raise UpstreamError(
            message=f"Request to {endpoint} failed: {exc}",
            provider_name=provider_name,
        ) from exc

    logger.info(
        "upstream_request",
        provider=provider_name,
        endpoint=endpoint,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        status=response.status_code,
    )
    return response


def ensure_success(
    response: httpx.Response, *, provider_name: str, message: str | None = None
) -> None:
    """Raise ``UpstreamError`` unless *response* has a 2xx status."""
    if response.is_success:
        return
    raise UpstreamError(
        message=message or f"{provider_name} API error: {response.status_code}",
        provider_name=provider_name,
        status_code=response.status_code,
    )


def parse_json(response: httpx.Response, *, provider_name: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(
            message=f"Malformed JSON from {provider_name}: {exc}",
            provider_name=provider_name,
            status_code=response.status_code,
        ) from exc


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider_name: str,
    endpoint: str,
    **kwargs: Any,
) -> Any:
    """GET *url*, require a 2xx status and return the decoded JSON body."""
    response = await fetch(client, url, provider_name=provider_name, endpoint=endpoint, **kwargs)
    ensure_success(response, provider_name=provider_name)
    return parse_json(response, provider_name=provider_name)


async def download_image(
    client: httpx.AsyncClient, url: str, *, provider_name: str, **kwargs: Any
) -> tuple[bytes, str]:
    """Download image bytes and return ``(content, content_type)``."""
    response = await fetch(client, url, provider_name=provider_name, endpoint="image", **kwargs)
    ensure_success(
        response,
        provider_name=provider_name,
        message=f"Image download failed with status {response.status_code}",
    )
    content_type = response.headers.get("content-type") or "image/jpeg"
    return response.content, content_type
