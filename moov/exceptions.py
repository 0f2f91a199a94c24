"""Client exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from moov.http import ResponseEnvelope

ErrorKind = Literal[
    "configuration_error",
    "authentication_failed",
    "idempotency_replay",
    "client_request_error",
    "server_error",
    "transport_error",
    "cancelled",
    "timeout",
    "decode_error",
]


class MoovError(Exception):
    """Base class for all client errors.

    Attributes:
        kind: Machine-readable error kind.
        detail: Human-readable message, taken from the server when available.
        status_code: HTTP status code of the response that caused the error.
        envelope: The raw response envelope, when one was received.
        details: Decoded server error body, when the body was a JSON object.
    """

    kind: ErrorKind = "client_request_error"

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        envelope: ResponseEnvelope | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with optional HTTP context."""
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.envelope = envelope
        self.details = details or {}

    def __str__(self) -> str:
        """Render kind, status and detail."""
        if self.status_code is None:
            return f"{self.kind}: {self.detail}"
        return f"{self.kind} ({self.status_code}): {self.detail}"


class ConfigurationError(MoovError):
    """Raised when credentials are missing or malformed."""

    kind: ErrorKind = "configuration_error"


class AuthenticationFailedError(MoovError):
    """Raised when the server rejects the client credentials."""

    kind: ErrorKind = "authentication_failed"


class IdempotencyReplayError(MoovError):
    """Raised when the server reports that an idempotency key was already used."""

    kind: ErrorKind = "idempotency_replay"

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        envelope: ResponseEnvelope | None = None,
        details: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> None:
        """Initialize with the replayed idempotency key."""
        super().__init__(detail, status_code, envelope, details)
        self.idempotency_key = idempotency_key


class ClientRequestError(MoovError):
    """Raised for validation, not-found and permission errors."""

    kind: ErrorKind = "client_request_error"


class TransientError(MoovError):
    """Marker base for failures a caller may reasonably retry."""


class ServerError(TransientError):
    """Raised when the server answers with a 5xx status."""

    kind: ErrorKind = "server_error"


class TransportError(TransientError):
    """Raised when the HTTP exchange itself fails."""

    kind: ErrorKind = "transport_error"


class RequestCancelledError(TransportError):
    """Raised when the caller's cancel handle fires while a request is in flight."""

    kind: ErrorKind = "cancelled"


class RequestTimeoutError(TransportError):
    """Raised when the request deadline elapses."""

    kind: ErrorKind = "timeout"


class DecodeError(MoovError):
    """Raised when a response body does not match the expected shape."""

    kind: ErrorKind = "decode_error"
