"""HTTP invoker: turns a call builder into an exchange and a response envelope."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from enum import StrEnum
from time import perf_counter
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from moov.call import JSON_CONTENT_TYPE, CallBuilder
from moov.exceptions import RequestCancelledError, RequestTimeoutError, TransportError

if TYPE_CHECKING:
    from moov.credentials import CredentialStore

SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}
REDACTED = "***REDACTED***"

logger = structlog.get_logger(__name__)


class StatusClass(StrEnum):
    """Coarse categorization of an HTTP outcome."""

    COMPLETED = "completed"
    STARTED = "started"
    STATE_CONFLICT = "state_conflict"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


def classify_status(status_code: int, *, has_idempotency_key: bool = False) -> StatusClass:
    """Derive the status class from an HTTP status code.

    202 means the server accepted the work but has not finished it. A 409 is
    only an idempotency replay when the request carried an idempotency key;
    otherwise it is an ordinary client error.
    """
    if status_code == 202:
        return StatusClass.STARTED
    if 200 <= status_code < 300:
        return StatusClass.COMPLETED
    if status_code == 409 and has_idempotency_key:
        return StatusClass.STATE_CONFLICT
    if status_code >= 500:
        return StatusClass.SERVER_ERROR
    return StatusClass.CLIENT_ERROR


@dataclass(frozen=True)
class ResponseEnvelope:
    """Fully read HTTP response paired with its status class."""

    status_class: StatusClass
    status_code: int
    headers: httpx.Headers
    body: bytes
    method: str = ""
    url: str = ""
    idempotency_key: str | None = None

    @classmethod
    def from_response(
        cls, response: httpx.Response, idempotency_key: str | None = None
    ) -> ResponseEnvelope:
        """Wrap a fully read httpx response."""
        return cls(
            status_class=classify_status(
                response.status_code, has_idempotency_key=idempotency_key is not None
            ),
            status_code=response.status_code,
            headers=response.headers,
            body=response.content,
            method=response.request.method,
            url=str(response.request.url),
            idempotency_key=idempotency_key,
        )

    @property
    def content_type(self) -> str | None:
        """Response content type header."""
        return self.headers.get("content-type")

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, replacing invalid bytes."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse the body as JSON; raises ``ValueError`` on malformed input."""
        return json.loads(self.body)

    def __str__(self) -> str:
        """Describe the exchange for logs and error messages."""
        return f"{self.method} {self.url} -> {self.status_code} ({self.status_class})"


def redact_headers(headers: httpx.Headers) -> dict[str, str]:
    """Return headers with credential values replaced."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


async def execute(
    http_client: httpx.AsyncClient,
    request: httpx.Request,
    cancel: asyncio.Event | None = None,
) -> httpx.Response:
    """Send ``request`` and read the whole body, honouring an optional cancel event.

    When ``cancel`` is set the in-flight send is cancelled, which aborts the
    underlying connection, and :class:`RequestCancelledError` is raised.
    """
    try:
        if cancel is None:
            return await http_client.send(request)
        if cancel.is_set():
            raise RequestCancelledError("Request cancelled before it was sent.")
        return await _send_or_cancel(http_client, request, cancel)
    except httpx.TimeoutException as exc:
        raise RequestTimeoutError(f"Request to {request.url} timed out.") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"Request to {request.url} failed: {exc}") from exc


async def _send_or_cancel(
    http_client: httpx.AsyncClient,
    request: httpx.Request,
    cancel: asyncio.Event,
) -> httpx.Response:
    """Race the send against ``cancel``, cancelling whichever loses."""
    send_task = asyncio.ensure_future(http_client.send(request))
    cancel_task = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (send_task, cancel_task):
            if not task.done():
                task.cancel()

    if send_task.done() and not send_task.cancelled():
        return send_task.result()

    await asyncio.wait({send_task})
    raise RequestCancelledError(f"Request to {request.url} was cancelled.")


class HttpInvoker:
    """Materializes calls into authenticated HTTP exchanges."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credential_store: CredentialStore,
        base_url: str,
    ) -> None:
        """Bind the transport, token cache and API base URL."""
        self._http_client = http_client
        self._credential_store = credential_store
        self._base_url = base_url.rstrip("/")

    def build_request(
        self,
        call: CallBuilder,
        bearer_token: str,
        timeout: float | None = None,
    ) -> httpx.Request:
        """Render URL, headers and body for ``call``."""
        headers = httpx.Headers(call.headers)
        headers.setdefault("Accept", JSON_CONTENT_TYPE)
        headers["Authorization"] = f"Bearer {bearer_token}"
        content = call.encode_body()
        if content is not None and call.content_type is not None:
            headers["Content-Type"] = call.content_type

        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = httpx.Timeout(timeout)
        return self._http_client.build_request(
            call.method,
            f"{self._base_url}{call.path}",
            params=call.params or None,
            headers=headers,
            content=content,
            **extra,
        )

    async def invoke(
        self,
        call: CallBuilder,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ResponseEnvelope:
        """Authenticate, send and fully read the response for ``call``."""
        token = await self._credential_store.ensure_bearer_token(timeout=timeout, cancel=cancel)
        request = self.build_request(call, token.access_token, timeout=timeout)
        logger.debug(
            "moov_request_sent",
            method=request.method,
            url=str(request.url),
            headers=redact_headers(request.headers),
        )

        start = perf_counter()
        try:
            response = await execute(self._http_client, request, cancel=cancel)
        except TransportError as exc:
            logger.warning(
                "moov_request_failed",
                method=request.method,
                path=request.url.path,
                kind=exc.kind,
                error=exc.detail,
                duration_ms=round((perf_counter() - start) * 1000, 2),
            )
            raise

        envelope = ResponseEnvelope.from_response(response, idempotency_key=call.idempotency_key)
        event_logger = logger.warning if envelope.status_code >= 400 else logger.info
        event_logger(
            "moov_request_completed",
            method=request.method,
            path=request.url.path,
            status_code=envelope.status_code,
            status_class=str(envelope.status_class),
            idempotency_key=call.idempotency_key,
            wait_for=call.wait_for,
            duration_ms=round((perf_counter() - start) * 1000, 2),
        )
        return envelope
