"""Async client for the Moov payments API."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from moov.call import CallArg, Endpoint, accept_json, build_call, endpoint
from moov.config import MoovSettings, configure_logging, get_settings
from moov.credentials import DEFAULT_SCOPE, CredentialStore, Credentials, Token
from moov.http import HttpInvoker, ResponseEnvelope
from moov.paths import PATH_PING
from moov.responses import completed_or_error
from moov.schedules import SchedulesAPI
from moov.transfers import TransfersAPI

DEFAULT_DOMAIN = "api.moov.io"
# Waiting for a rail response can hold the connection open for a while.
DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=60.0, write=10.0, pool=5.0)


class MoovClient(TransfersAPI, SchedulesAPI):
    """Authenticated client exposing the transfer and schedule operations.

    Usage::

        async with MoovClient("public-key", "secret-key") as client:
            transfers = await client.list_transfers(with_transfer_status("completed"))
    """

    def __init__(
        self,
        public_key: str,
        secret_key: str,
        domain: str = DEFAULT_DOMAIN,
        scope: str = DEFAULT_SCOPE,
        timeout: httpx.Timeout | float | None = None,
        http_client: httpx.AsyncClient | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Create the client; an injected ``http_client`` is not closed by :meth:`aclose`."""
        self._credentials = Credentials(
            public_key=public_key or "", secret_key=secret_key or "", domain=domain
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout or DEFAULT_TIMEOUT)
        self._credential_store = CredentialStore(
            self._credentials, self._client, scope=scope, now=now
        )
        self._invoker = HttpInvoker(
            self._client, self._credential_store, self._credentials.base_url
        )

    @classmethod
    def from_settings(
        cls,
        settings: MoovSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        configure_logs: bool = False,
    ) -> MoovClient:
        """Build a client from ``settings``, loading them from the environment when omitted.

        With ``configure_logs`` the structlog pipeline is set up at ``settings.log_level``.
        """
        settings = settings or get_settings()
        if configure_logs:
            configure_logging(settings.log_level)
        return cls(
            public_key=settings.public_key,
            secret_key=settings.secret_key.get_secret_value(),
            domain=settings.domain,
            scope=settings.scope,
            timeout=settings.timeout_seconds,
            http_client=http_client,
        )

    @property
    def credentials(self) -> Credentials:
        """Key pair and domain this client authenticates with."""
        return self._credentials

    @property
    def credential_store(self) -> CredentialStore:
        """Token cache shared by every call on this client."""
        return self._credential_store

    async def call_http(
        self,
        target: Endpoint,
        *args: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ResponseEnvelope:
        """Build a call from ``args`` and send it to ``target``."""
        call = build_call(target, *args)
        return await self._invoker.invoke(call, timeout=timeout, cancel=cancel)

    async def ensure_bearer_token(
        self, timeout: float | None = None, cancel: asyncio.Event | None = None
    ) -> Token:
        """Return a fresh bearer token, acquiring one if needed."""
        return await self._credential_store.ensure_bearer_token(timeout=timeout, cancel=cancel)

    async def revoke_token(
        self, timeout: float | None = None, cancel: asyncio.Event | None = None
    ) -> None:
        """Revoke the cached bearer token, if any."""
        await self._credential_store.revoke(timeout=timeout, cancel=cancel)

    async def ping(
        self, timeout: float | None = None, cancel: asyncio.Event | None = None
    ) -> None:
        """Check connectivity and credentials against ``GET /ping``."""
        envelope = await self.call_http(
            endpoint("GET", PATH_PING), accept_json(), timeout=timeout, cancel=cancel
        )
        completed_or_error(envelope)

    async def aclose(self) -> None:
        """Close underlying HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> MoovClient:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Exit async context manager and close managed resources."""
        del exc_type, exc, tb
        await self.aclose()
