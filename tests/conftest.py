"""Shared pytest fixtures for the BackpackBuddy test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from backpackbuddy.config.settings import Settings


class FakeClock:
    """Manually advanced clock returning seconds as a float."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(
    status_code: int = 200,
    *,
    json: Any = None,
    content: bytes | None = None,
    headers: dict[str, str] | None = None,
    url: str = "https://upstream.test/",
) -> httpx.Response:
    """Build a real ``httpx.Response`` bound to a request."""
    kwargs: dict[str, Any] = {"headers": headers}
    if json is not None:
        kwargs["json"] = json
    elif content is not None:
        kwargs["content"] = content
    return httpx.Response(status_code, request=httpx.Request("GET", url), **kwargs)


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from any local ``.env`` file."""
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http_client() -> AsyncMock:
    """An ``httpx.AsyncClient`` double; tests set ``get.side_effect``."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return make_settings


@pytest.fixture
def image_response() -> httpx.Response:
    return make_response(
        200, content=b"\xff\xd8\xff\xe0jpeg-bytes", headers={"content-type": "image/jpeg"}
    )


@pytest.fixture
def response_factory() -> Callable[..., httpx.Response]:
    return make_response
