from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING
from unittest.mock import Mock

import httpx
import pytest

from aresource import ApiSettings

if TYPE_CHECKING:
    from collections.abc import Callable

CLIENT_IDENTIFIER = json.dumps({"lang": "python", "publisher": "aresource"})


@pytest.fixture
def settings() -> ApiSettings:
    """Create settings with a precomputed client identifier."""
    return ApiSettings(
        api_key="sk_test_123",
        host="api.test",
        api_version="2024-06-20",
        client_identifier=CLIENT_IDENTIFIER,
    )


@pytest.fixture
def requests_sent() -> list[httpx.Request]:
    """Collect the requests received by the mock transport."""
    return []


@pytest.fixture
def make_client(
    requests_sent: list[httpx.Request],
) -> Callable[..., httpx.AsyncClient]:
    """Create an ``httpx.AsyncClient`` backed by a mock handler.

    The handler may be sync or async. Every request is recorded in
    ``requests_sent``.
    """

    def factory(handler: Callable) -> httpx.AsyncClient:
        async def record(request: httpx.Request) -> httpx.Response:
            requests_sent.append(request)
            response = handler(request)
            if asyncio.iscoroutine(response):
                response = await response
            return response

        return httpx.AsyncClient(transport=httpx.MockTransport(record))

    return factory


@pytest.fixture
def hanging_handler() -> Mock:
    """Create an async handler that never responds.

    ``hanging_handler.cancelled`` is set to ``True`` when the exchange is
    aborted.
    """
    handler = Mock(cancelled=False)

    async def wait_forever(request: httpx.Request) -> httpx.Response:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            handler.cancelled = True
            raise
        raise AssertionError  # pragma: no cover

    handler.side_effect = wait_forever
    return handler


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock ``(error, value)`` completion callback."""
    return Mock()
