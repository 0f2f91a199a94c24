"""Composable call arguments and the call builder they act on."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import quote, urlencode
from uuid import UUID

import httpx
from pydantic_core import to_jsonable_python

HttpMethod = Literal["GET", "POST", "PATCH", "PUT", "DELETE"]

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
IDEMPOTENCY_KEY_HEADER = "X-Idempotency-Key"
WAIT_FOR_HEADER = "X-Wait-For"
WAIT_FOR_RAIL_RESPONSE = "rail-response"

_UNSET: Any = object()


@dataclass(frozen=True)
class Endpoint:
    """HTTP method plus a ``%s`` path template and its positional parameters."""

    method: HttpMethod
    path_template: str
    path_params: tuple[str, ...] = ()

    def render_path(self) -> str:
        """Substitute URL-encoded path parameters into the template."""
        expected = self.path_template.count("%s")
        if expected != len(self.path_params):
            raise ValueError(
                f"Path template {self.path_template!r} takes {expected} parameters, "
                f"got {len(self.path_params)}."
            )
        return self.path_template % tuple(quote(str(value), safe="") for value in self.path_params)


def endpoint(method: HttpMethod, path_template: str, *path_params: str) -> Endpoint:
    """Build an endpoint from a method, path template and positional parameters."""
    return Endpoint(method=method, path_template=path_template, path_params=tuple(path_params))


@dataclass
class CallBuilder:
    """Mutable accumulator for a single outbound request."""

    endpoint: Endpoint | None = None
    params: dict[str, str | list[str]] = field(default_factory=dict)
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Any = _UNSET
    content_type: str | None = None

    @property
    def method(self) -> HttpMethod:
        """HTTP method of the finalized endpoint."""
        return self._require_endpoint().method

    @property
    def path(self) -> str:
        """Rendered, percent-encoded request path."""
        return self._require_endpoint().render_path()

    @property
    def idempotency_key(self) -> str | None:
        """Idempotency key header value, if one was set."""
        return self.headers.get(IDEMPOTENCY_KEY_HEADER)

    @property
    def wait_for(self) -> str | None:
        """Wait-for header value, if one was set."""
        return self.headers.get(WAIT_FOR_HEADER)

    @property
    def has_body(self) -> bool:
        """Return True once a body argument has been applied."""
        return self.body is not _UNSET

    def encode_body(self) -> bytes | None:
        """Encode the body according to the declared content type."""
        if not self.has_body:
            return None
        if self.content_type == FORM_CONTENT_TYPE:
            return urlencode(self.body).encode("utf-8")
        payload = to_jsonable_python(self.body, by_alias=True, exclude_none=True)
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")

    def _require_endpoint(self) -> Endpoint:
        """Return the endpoint or fail for an unfinalized builder."""
        if self.endpoint is None:
            raise ValueError("Call has no endpoint; finalize it with build_call().")
        return self.endpoint


CallArg = Callable[[CallBuilder], None]


def build_call(target: Endpoint, *args: CallArg) -> CallBuilder:
    """Apply call arguments in order and finalize the builder with its endpoint.

    Later arguments overwrite earlier ones for the same header or parameter,
    except for multi-valued parameters added with :func:`multi_param`.
    """
    call = CallBuilder(endpoint=target)
    for arg in args:
        arg(call)
    return call


def prepend_args(args: Iterable[CallArg], *defaults: CallArg) -> list[CallArg]:
    """Place defaults ahead of caller arguments so callers can override them."""
    return [*defaults, *args]


def accept_json() -> CallArg:
    """Request a JSON response."""

    def apply(call: CallBuilder) -> None:
        call.headers["Accept"] = JSON_CONTENT_TYPE

    return apply


def json_body(value: Any) -> CallArg:
    """Send ``value`` as a JSON document."""

    def apply(call: CallBuilder) -> None:
        call.body = value
        call.content_type = JSON_CONTENT_TYPE

    return apply


def form_body(values: Mapping[str, str]) -> CallArg:
    """Send ``values`` as an urlencoded form."""

    def apply(call: CallBuilder) -> None:
        call.body = dict(values)
        call.content_type = FORM_CONTENT_TYPE

    return apply


def idempotency_key(key: str | UUID) -> CallArg:
    """Send ``key`` as the idempotency key header."""

    def apply(call: CallBuilder) -> None:
        call.headers[IDEMPOTENCY_KEY_HEADER] = str(key)

    return apply


def wait_for(mode: str) -> CallArg:
    """Ask the server to block until ``mode`` (e.g. ``"rail-response"``) before answering."""

    def apply(call: CallBuilder) -> None:
        call.headers[WAIT_FOR_HEADER] = mode

    return apply


def skip(n: int) -> CallArg:
    """Skip the first ``n`` results of a list."""
    return param("skip", str(n))


def count(n: int) -> CallArg:
    """Limit a list to ``n`` results."""
    return param("count", str(n))


def param(name: str, value: str) -> CallArg:
    """Set query parameter ``name``, replacing any earlier value."""

    def apply(call: CallBuilder) -> None:
        call.params[name] = value

    return apply


def multi_param(name: str, *values: str) -> CallArg:
    """Add values to a repeated query parameter, keeping existing ones."""

    def apply(call: CallBuilder) -> None:
        existing = call.params.get(name)
        merged = [existing] if isinstance(existing, str) else list(existing or [])
        for value in values:
            if value not in merged:
                merged.append(value)
        call.params[name] = merged

    return apply


def header(name: str, value: str) -> CallArg:
    """Set header ``name``, replacing any earlier value."""

    def apply(call: CallBuilder) -> None:
        call.headers[name] = value

    return apply
