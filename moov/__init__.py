"""Public client exports."""

from moov.call import (
    CallArg,
    CallBuilder,
    Endpoint,
    accept_json,
    build_call,
    count,
    endpoint,
    header,
    idempotency_key,
    json_body,
    multi_param,
    param,
    skip,
    wait_for,
)
from moov.client import DEFAULT_DOMAIN, MoovClient
from moov.credentials import DEFAULT_SCOPE, Credentials, CredentialStore, Token
from moov.exceptions import (
    AuthenticationFailedError,
    ClientRequestError,
    ConfigurationError,
    DecodeError,
    IdempotencyReplayError,
    MoovError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    TransientError,
    TransportError,
)
from moov.http import ResponseEnvelope, StatusClass
from moov.responses import Completed, Outcome, Started
from moov.transfers import (
    CreateTransferBuilder,
    patch_transfer_metadata,
    with_refund_idempotency_key,
    with_refund_wait_for_rail_response,
    with_reversal_idempotency_key,
    with_transfer_account_ids,
    with_transfer_count,
    with_transfer_disputed,
    with_transfer_end_date,
    with_transfer_group,
    with_transfer_idempotency_key,
    with_transfer_refunded,
    with_transfer_skip,
    with_transfer_start_date,
    with_transfer_status,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_DOMAIN",
    "DEFAULT_SCOPE",
    "AuthenticationFailedError",
    "CallArg",
    "CallBuilder",
    "ClientRequestError",
    "Completed",
    "ConfigurationError",
    "CreateTransferBuilder",
    "CredentialStore",
    "Credentials",
    "DecodeError",
    "Endpoint",
    "IdempotencyReplayError",
    "MoovClient",
    "MoovError",
    "Outcome",
    "RequestCancelledError",
    "RequestTimeoutError",
    "ResponseEnvelope",
    "ServerError",
    "Started",
    "StatusClass",
    "Token",
    "TransientError",
    "TransportError",
    "accept_json",
    "build_call",
    "count",
    "endpoint",
    "header",
    "idempotency_key",
    "json_body",
    "multi_param",
    "param",
    "patch_transfer_metadata",
    "skip",
    "wait_for",
    "with_refund_idempotency_key",
    "with_refund_wait_for_rail_response",
    "with_reversal_idempotency_key",
    "with_transfer_account_ids",
    "with_transfer_count",
    "with_transfer_disputed",
    "with_transfer_end_date",
    "with_transfer_group",
    "with_transfer_idempotency_key",
    "with_transfer_refunded",
    "with_transfer_skip",
    "with_transfer_start_date",
    "with_transfer_status",
]
