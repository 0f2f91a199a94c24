"""Unit tests for call arguments and the call builder."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from moov.call import (
    FORM_CONTENT_TYPE,
    IDEMPOTENCY_KEY_HEADER,
    JSON_CONTENT_TYPE,
    WAIT_FOR_HEADER,
    CallBuilder,
    accept_json,
    build_call,
    count,
    endpoint,
    form_body,
    header,
    idempotency_key,
    json_body,
    multi_param,
    param,
    prepend_args,
    skip,
    wait_for,
)
from moov.models import CreateRefund, CreateTransfer


def test_call_arguments_set_headers_params_and_body() -> None:
    """Each argument kind mutates the expected builder field."""
    call = build_call(
        endpoint("POST", "/transfers"),
        accept_json(),
        json_body({"amount": 1}),
        idempotency_key("key-1"),
        wait_for("rail-response"),
        skip(10),
        count(5),
        param("status", "pending"),
        header("X-Account-ID", "acct-1"),
    )

    assert call.method == "POST"
    assert call.path == "/transfers"
    assert call.headers["Accept"] == JSON_CONTENT_TYPE
    assert call.headers[IDEMPOTENCY_KEY_HEADER] == "key-1"
    assert call.headers[WAIT_FOR_HEADER] == "rail-response"
    assert call.idempotency_key == "key-1"
    assert call.wait_for == "rail-response"
    assert call.params == {"skip": "10", "count": "5", "status": "pending"}
    assert call.headers["x-account-id"] == "acct-1"
    assert call.content_type == JSON_CONTENT_TYPE
    assert json.loads(call.encode_body() or b"") == {"amount": 1}


def test_later_arguments_overwrite_earlier_ones() -> None:
    """Scalar fields follow last-writer-wins."""
    call = build_call(
        endpoint("GET", "/transfers"),
        idempotency_key("first"),
        param("status", "pending"),
        header("x-idempotency-key", "second"),
        param("status", "completed"),
        count(1),
        count(2),
    )

    assert call.idempotency_key == "second"
    assert call.params["status"] == "completed"
    assert call.params["count"] == "2"


def test_multi_param_accumulates_unique_values() -> None:
    """Multi-valued parameters take the union of every value supplied."""
    call = build_call(
        endpoint("GET", "/transfers"),
        multi_param("accountID", "a", "b"),
        multi_param("accountID", "b", "c"),
    )

    assert call.params["accountID"] == ["a", "b", "c"]


def test_prepend_args_lets_caller_override_defaults() -> None:
    """Defaults go first so caller arguments win."""
    args = prepend_args([idempotency_key("caller")], accept_json(), idempotency_key("default"))
    call = build_call(endpoint("POST", "/transfers"), *args)

    assert call.idempotency_key == "caller"


def test_endpoint_renders_url_encoded_path_parameters() -> None:
    """Positional parameters are substituted and escaped."""
    target = endpoint("GET", "/transfers/%s/refunds/%s", "tr 1", "rf/2")

    assert target.render_path() == "/transfers/tr%201/refunds/rf%2F2"


def test_endpoint_rejects_parameter_count_mismatch() -> None:
    """Templates and parameters must line up."""
    with pytest.raises(ValueError):
        endpoint("GET", "/transfers/%s").render_path()


def test_call_without_endpoint_cannot_render() -> None:
    """An unfinalized builder has no method or path."""
    with pytest.raises(ValueError):
        _ = CallBuilder().path


def test_json_body_encodes_models_with_aliases_and_without_nulls() -> None:
    """Models are sent with their wire names and unset optionals dropped."""
    transfer = CreateTransfer.model_validate(
        {
            "source": {"paymentMethodID": "pm-src"},
            "destination": {"paymentMethodID": "pm-dst"},
            "amount": {"currency": "USD", "value": 1250},
        }
    )
    call = build_call(endpoint("POST", "/transfers"), json_body(transfer))

    assert json.loads(call.encode_body() or b"") == {
        "source": {"paymentMethodID": "pm-src"},
        "destination": {"paymentMethodID": "pm-dst"},
        "amount": {"currency": "USD", "value": 1250},
    }


def test_json_body_encodes_nested_datetimes() -> None:
    """Datetimes inside plain containers serialize as ISO 8601."""
    call = build_call(
        endpoint("POST", "/echo"),
        json_body(
            {
                "runOn": datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
                "refund": CreateRefund(amount=5),
            }
        ),
    )

    payload = json.loads(call.encode_body() or b"")
    assert payload["runOn"].startswith("2024-01-02T03:04:05")
    assert payload["refund"] == {"amount": 5}


def test_form_body_is_urlencoded() -> None:
    """Form bodies use the urlencoded content type."""
    call = build_call(endpoint("POST", "/oauth2/revoke"), form_body({"token": "a b"}))

    assert call.content_type == FORM_CONTENT_TYPE
    assert call.encode_body() == b"token=a+b"


def test_call_without_body_encodes_nothing() -> None:
    """GET calls carry no body."""
    call = build_call(endpoint("GET", "/transfers"), accept_json())

    assert call.has_body is False
    assert call.encode_body() is None
