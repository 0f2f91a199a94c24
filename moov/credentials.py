"""Client credentials, bearer tokens and the token cache."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from moov.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    DecodeError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
)
from moov.http import execute
from moov.paths import PATH_OAUTH2_REVOKE, PATH_OAUTH2_TOKEN

DEFAULT_SCOPE = "/accounts.write"
TOKEN_SAFETY_MARGIN_SECONDS = 30

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def normalize_base_url(domain: str) -> str:
    """Return ``domain`` as a base URL, defaulting to HTTPS for bare hosts."""
    stripped = domain.strip().rstrip("/")
    if not stripped:
        raise ConfigurationError("Domain must not be empty.")
    if stripped.startswith(("http://", "https://")):
        return stripped
    return f"https://{stripped}"


class Token(BaseModel):
    """OAuth2 client-credentials token response."""

    access_token: str
    refresh_token: str = ""
    token_type: str = "Bearer"
    expires_in: int = Field(ge=0)
    scope: str = ""
    acquired_at: datetime = Field(default_factory=_utcnow, exclude=True)

    @property
    def expires_at(self) -> datetime:
        """Moment the server stops accepting the token."""
        return self.acquired_at + timedelta(seconds=self.expires_in)

    def is_fresh(
        self, now: datetime | None = None, margin_seconds: int = TOKEN_SAFETY_MARGIN_SECONDS
    ) -> bool:
        """Return True while the token has more than ``margin_seconds`` left."""
        current = now or _utcnow()
        return self.expires_at - timedelta(seconds=margin_seconds) > current


@dataclass(frozen=True)
class Credentials:
    """Public/secret key pair and the API domain they belong to."""

    public_key: str
    secret_key: str
    domain: str

    @property
    def base_url(self) -> str:
        """HTTPS base URL derived from the domain."""
        return normalize_base_url(self.domain)

    def require_keys(self) -> None:
        """Raise when either key is missing."""
        if not self.public_key.strip() or not self.secret_key.strip():
            raise ConfigurationError("Public and secret API keys must both be set.")

    def basic_authorization(self) -> str:
        """Return the HTTP Basic authorization header value for the key pair."""
        self.require_keys()
        raw = f"{self.public_key}:{self.secret_key}".encode()
        return f"Basic {base64.b64encode(raw).decode('ascii')}"


class CredentialStore:
    """Cache a bearer token and serialize its acquisition.

    Concurrent callers that find no fresh token wait on a single exchange and
    all observe its result.
    """

    def __init__(
        self,
        credentials: Credentials,
        http_client: httpx.AsyncClient,
        scope: str = DEFAULT_SCOPE,
        margin_seconds: int = TOKEN_SAFETY_MARGIN_SECONDS,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Create an empty cache for ``credentials``."""
        self._credentials = credentials
        self._http_client = http_client
        self._scope = scope
        self._margin_seconds = margin_seconds
        self._now = now or _utcnow
        self._token: Token | None = None
        self._lock = asyncio.Lock()

    @property
    def credentials(self) -> Credentials:
        """Credentials used for the grant."""
        return self._credentials

    @property
    def current_token(self) -> Token | None:
        """Cached token, fresh or not."""
        return self._token

    def _cached_fresh_token(self) -> Token | None:
        """Return the cached token while it is still fresh."""
        token = self._token
        if token is not None and token.is_fresh(self._now(), self._margin_seconds):
            return token
        return None

    async def ensure_bearer_token(
        self,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Token:
        """Return a fresh token, acquiring one when none is cached or it is stale."""
        self._credentials.require_keys()
        token = self._cached_fresh_token()
        if token is not None:
            return token

        await self._wait_for_lock(timeout, cancel)
        try:
            token = self._cached_fresh_token()
            if token is not None:
                return token
            self._token = await self._acquire(timeout=timeout, cancel=cancel)
            return self._token
        finally:
            self._lock.release()

    async def _wait_for_lock(self, timeout: float | None, cancel: asyncio.Event | None) -> None:
        """Take the exchange lock unless ``cancel`` fires or ``timeout`` elapses first."""
        if cancel is not None and cancel.is_set():
            raise RequestCancelledError("Token request cancelled before it was sent.")
        lock_task = asyncio.ensure_future(self._lock.acquire())
        cancel_task = asyncio.ensure_future(cancel.wait()) if cancel is not None else None
        waiters = {lock_task} if cancel_task is None else {lock_task, cancel_task}
        acquired = False
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            acquired = lock_task.done()
        finally:
            if cancel_task is not None and not cancel_task.done():
                cancel_task.cancel()
            if not acquired:
                lock_task.cancel()
                await asyncio.wait({lock_task})
                if not lock_task.cancelled():
                    self._lock.release()
        if acquired:
            return
        if cancel is not None and cancel.is_set():
            raise RequestCancelledError("Token request cancelled while waiting for an exchange.")
        raise RequestTimeoutError("Timed out waiting for an in-flight token exchange.")

    async def _acquire(self, timeout: float | None, cancel: asyncio.Event | None) -> Token:
        """Run the client-credentials grant."""
        request = self._auth_request(
            PATH_OAUTH2_TOKEN,
            params={"grant_type": "client_credentials", "scope": self._scope},
            timeout=timeout,
        )
        response = await execute(self._http_client, request, cancel=cancel)
        self._raise_for_auth_status(response)

        try:
            token = Token.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(
                "Token endpoint returned an invalid token payload.", response.status_code
            ) from exc
        token = token.model_copy(update={"acquired_at": self._now()})
        logger.info(
            "moov_token_acquired",
            scope=token.scope,
            token_type=token.token_type,
            expires_in=token.expires_in,
        )
        return token

    async def revoke(
        self,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> None:
        """Revoke the cached access token and forget it."""
        self._credentials.require_keys()
        await self._wait_for_lock(timeout, cancel)
        try:
            token = self._token
            if token is None:
                return
            request = self._auth_request(
                PATH_OAUTH2_REVOKE,
                content={"token": token.access_token, "token_type_hint": "access_token"},
                timeout=timeout,
            )
            response = await execute(self._http_client, request, cancel=cancel)
            self._raise_for_auth_status(response)
            self._token = None
        finally:
            self._lock.release()
        logger.info("moov_token_revoked")

    def _auth_request(
        self,
        path: str,
        params: dict[str, str] | None = None,
        content: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Request:
        """Build a Basic-authenticated form POST to the auth server."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": self._credentials.basic_authorization(),
        }
        kwargs: dict[str, object] = {}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        return self._http_client.build_request(
            "POST",
            f"{self._credentials.base_url}{path}",
            params=params,
            headers=headers,
            data=content,
            **kwargs,
        )

    @staticmethod
    def _raise_for_auth_status(response: httpx.Response) -> None:
        """Map token endpoint failures to typed errors."""
        if response.status_code >= 500:
            logger.warning("moov_auth_unavailable", status_code=response.status_code)
            raise ServerError("Authorization server unavailable.", response.status_code)
        if response.status_code >= 400:
            logger.warning("moov_auth_rejected", status_code=response.status_code)
            raise AuthenticationFailedError(
                f"Credentials rejected with status {response.status_code}.",
                response.status_code,
            )
