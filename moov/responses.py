"""Response dispatch: decode envelopes into typed results or raise typed errors."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from moov.exceptions import (
    ClientRequestError,
    DecodeError,
    IdempotencyReplayError,
    MoovError,
    ServerError,
)
from moov.http import ResponseEnvelope, StatusClass

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Completed(Generic[T]):
    """The server finished the operation synchronously."""

    value: T


@dataclass(frozen=True)
class Started(Generic[U]):
    """The server accepted the operation and will finish it asynchronously."""

    value: U


Outcome = Union[Completed[T], Started[U]]


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    """Return a cached validator for ``shape``."""
    return TypeAdapter(shape)


def _server_message(payload: Any) -> str | None:
    """Pull a message out of the server's error shapes."""
    if not isinstance(payload, dict):
        return None
    error_field = payload.get("error")
    if isinstance(error_field, str) and error_field:
        return error_field
    if isinstance(error_field, dict) and isinstance(error_field.get("message"), str):
        return error_field["message"]
    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def error_from_envelope(envelope: ResponseEnvelope) -> MoovError:
    """Build the typed error for an envelope the caller cannot use."""
    details: dict[str, Any] | None = None
    message: str | None = None
    try:
        payload = envelope.json() if envelope.body else None
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        details = payload
        message = _server_message(payload)
    detail = message or envelope.text.strip() or f"HTTP {envelope.status_code}"

    if envelope.status_class is StatusClass.STATE_CONFLICT:
        return IdempotencyReplayError(
            detail,
            envelope.status_code,
            envelope,
            details,
            idempotency_key=envelope.idempotency_key,
        )
    if envelope.status_class is StatusClass.SERVER_ERROR:
        return ServerError(detail, envelope.status_code, envelope, details)
    if envelope.status_class is StatusClass.CLIENT_ERROR:
        return ClientRequestError(detail, envelope.status_code, envelope, details)
    return DecodeError(
        f"Unexpected {envelope.status_class} response: {detail}",
        envelope.status_code,
        envelope,
        details,
    )


def _parse_json(envelope: ResponseEnvelope, expected: type, label: str) -> Any:
    """Parse the body and check its top-level JSON type."""
    if not envelope.body.strip():
        raise DecodeError(
            f"Expected a JSON {label} but the body was empty.", envelope.status_code, envelope
        )
    try:
        payload = envelope.json()
    except ValueError as exc:
        raise DecodeError(
            "Response body is not valid JSON.", envelope.status_code, envelope
        ) from exc
    if not isinstance(payload, expected):
        raise DecodeError(f"Expected a JSON {label}.", envelope.status_code, envelope)
    return payload


def decode_object(envelope: ResponseEnvelope, model: type[T]) -> T:
    """Decode the envelope body as a single JSON object of ``model``."""
    payload = _parse_json(envelope, dict, "object")
    try:
        return _adapter(model).validate_python(payload)
    except ValidationError as exc:
        raise DecodeError(
            f"Response does not match {getattr(model, '__name__', model)}: "
            f"{exc.error_count()} validation errors.",
            envelope.status_code,
            envelope,
        ) from exc


def decode_list(envelope: ResponseEnvelope, model: type[T]) -> list[T]:
    """Decode the envelope body as a JSON array of ``model``."""
    payload = _parse_json(envelope, list, "array")
    try:
        return _adapter(list[model]).validate_python(payload)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise DecodeError(
            f"Response items do not match {getattr(model, '__name__', model)}.",
            envelope.status_code,
            envelope,
        ) from exc


def completed_object_or_error(envelope: ResponseEnvelope, model: type[T]) -> T:
    """Decode a completed envelope as one ``model`` or raise its error."""
    if envelope.status_class is not StatusClass.COMPLETED:
        raise error_from_envelope(envelope)
    return decode_object(envelope, model)


def completed_list_or_error(envelope: ResponseEnvelope, model: type[T]) -> list[T]:
    """Decode a completed envelope as a list of ``model`` or raise its error."""
    if envelope.status_class is not StatusClass.COMPLETED:
        raise error_from_envelope(envelope)
    return decode_list(envelope, model)


def completed_or_error(envelope: ResponseEnvelope) -> None:
    """Require a completed status and ignore any body."""
    if envelope.status_class is not StatusClass.COMPLETED:
        raise error_from_envelope(envelope)


def started_or_completed(
    envelope: ResponseEnvelope,
    completed_model: type[T],
    started_model: type[U],
) -> Outcome[T, U]:
    """Decode a response that either finished or was handed off asynchronously."""
    if envelope.status_class is StatusClass.COMPLETED:
        return Completed(decode_object(envelope, completed_model))
    if envelope.status_class is StatusClass.STARTED:
        return Started(decode_object(envelope, started_model))
    raise error_from_envelope(envelope)


def created_or_started(
    envelope: ResponseEnvelope,
    created_model: type[T],
    started_model: type[U],
) -> Outcome[T, U]:
    """Same dispatch as :func:`started_or_completed`, named for create-then-await flows."""
    return started_or_completed(envelope, created_model, started_model)
