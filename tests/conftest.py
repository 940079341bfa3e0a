from __future__ import annotations

from typing import Callable

import httpx
import pytest

from reqkit.client import AsyncClient, Client
from reqkit.transport import Transport

Handler = Callable[[httpx.Request], httpx.Response]


def _default_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"hello", headers={"Content-Type": "text/plain"})


@pytest.fixture
def mock_transport() -> Callable[..., Transport]:
    """Build a reqkit Transport whose inner transports are httpx.MockTransport."""

    def build(handler: Handler = _default_handler, calls: list | None = None) -> Transport:
        def factory(settings, proxy, asynchronous):
            if calls is not None:
                calls.append((proxy, asynchronous))
            return httpx.MockTransport(handler)

        return Transport(transport_factory=factory)

    return build


@pytest.fixture
def make_client(mock_transport) -> Callable[..., Client]:
    def build(handler: Handler = _default_handler) -> Client:
        return Client(transport=mock_transport(handler))

    return build


@pytest.fixture
def make_async_client(mock_transport) -> Callable[..., AsyncClient]:
    def build(handler: Handler = _default_handler) -> AsyncClient:
        return AsyncClient(transport=mock_transport(handler))

    return build
