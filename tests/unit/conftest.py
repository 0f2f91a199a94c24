"""Shared stub-server fixtures for client unit tests."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
import pytest

from moov.client import MoovClient

TOKEN_PAYLOAD = {
    "access_token": "abc",
    "refresh_token": "r",
    "token_type": "Bearer",
    "expires_in": 3600,
    "scope": "/accounts.write",
}
TEST_DOMAIN = "api.moov.test"

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class StubServer:
    """Record requests, answer the token endpoint and delegate the rest."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.token_requests: list[httpx.Request] = []

    @property
    def api_requests(self) -> list[httpx.Request]:
        """Return non-token requests in arrival order."""
        return [request for request in self.requests if request not in self.token_requests]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        """Dispatch one request."""
        self.requests.append(request)
        if request.url.path == "/oauth2/token":
            self.token_requests.append(request)
            return httpx.Response(200, json=TOKEN_PAYLOAD)
        if self.handler is None:
            return httpx.Response(404, json={"error": "not found"})
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result


@pytest.fixture
async def moov_factory() -> AsyncIterator[Callable[..., tuple[MoovClient, StubServer]]]:
    """Build clients wired to stub servers and close their transports afterwards."""
    http_clients: list[httpx.AsyncClient] = []

    def factory(
        handler: Handler | None = None,
        public_key: str = "pub-key",
        secret_key: str = "sec-key",
        **kwargs: Any,
    ) -> tuple[MoovClient, StubServer]:
        stub = StubServer(handler)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        http_clients.append(http_client)
        client = MoovClient(
            public_key=public_key,
            secret_key=secret_key,
            domain=TEST_DOMAIN,
            http_client=http_client,
            **kwargs,
        )
        return client, stub

    yield factory

    for http_client in http_clients:
        await http_client.aclose()
