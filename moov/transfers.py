"""Transfer, refund, reversal and transfer-option operations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

from moov.call import (
    WAIT_FOR_RAIL_RESPONSE,
    CallArg,
    Endpoint,
    accept_json,
    count,
    endpoint,
    idempotency_key,
    json_body,
    param,
    prepend_args,
    skip,
    wait_for,
)
from moov.http import ResponseEnvelope, StatusClass
from moov.models import (
    CreatedReversal,
    CreateRefund,
    CreateReversal,
    CreateTransfer,
    CreateTransferOptions,
    PatchTransfer,
    Refund,
    RefundStarted,
    Transfer,
    TransferOptions,
    TransferStarted,
)
from moov.paths import (
    PATH_REFUND,
    PATH_REFUNDS,
    PATH_TRANSFER,
    PATH_TRANSFER_OPTIONS,
    PATH_TRANSFER_REVERSALS,
    PATH_TRANSFERS,
)
from moov.responses import (
    Outcome,
    completed_list_or_error,
    completed_object_or_error,
    created_or_started,
    decode_object,
    error_from_envelope,
    started_or_completed,
)

CallHttp = Callable[..., Awaitable[ResponseEnvelope]]
TransferPatcher = Callable[[PatchTransfer], None]


def format_rfc3339(value: datetime) -> str:
    """Format a timestamp as RFC 3339; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")


# Creation options


def with_transfer_idempotency_key(key: str | UUID) -> CallArg:
    """Override the randomly generated idempotency key."""
    return idempotency_key(key)


def with_refund_idempotency_key(key: str | UUID) -> CallArg:
    """Override the randomly generated refund idempotency key."""
    return idempotency_key(key)


def with_refund_wait_for_rail_response() -> CallArg:
    """Wait for the card rail before answering a refund."""
    return wait_for(WAIT_FOR_RAIL_RESPONSE)


def with_reversal_idempotency_key(key: str | UUID) -> CallArg:
    """Override the randomly generated reversal idempotency key."""
    return idempotency_key(key)


# List filters


def with_transfer_account_ids(account_ids: list[str]) -> CallArg:
    """Only return transfers involving these accounts."""
    return param("accountIDs", ",".join(account_ids))


def with_transfer_status(status: str) -> CallArg:
    """Only return transfers in ``status``."""
    return param("status", status)


def with_transfer_start_date(start: datetime) -> CallArg:
    """Only return transfers created at or after ``start``."""
    return param("startDateTime", format_rfc3339(start))


def with_transfer_end_date(end: datetime) -> CallArg:
    """Only return transfers created before ``end``."""
    return param("endDateTime", format_rfc3339(end))


def with_transfer_group(group_id: str) -> CallArg:
    """Only return transfers in the given transfer group."""
    return param("groupID", group_id)


def with_transfer_refunded() -> CallArg:
    """Only return refunded transfers."""
    return param("refunded", "true")


def with_transfer_disputed() -> CallArg:
    """Only return disputed transfers."""
    return param("disputed", "true")


def with_transfer_skip(n: int) -> CallArg:
    """Skip the first ``n`` transfers."""
    return skip(n)


def with_transfer_count(n: int) -> CallArg:
    """Return at most ``n`` transfers."""
    return count(n)


def patch_transfer_metadata(metadata: dict[str, str]) -> TransferPatcher:
    """Replace the transfer's metadata with ``metadata``."""

    def apply(patch: PatchTransfer) -> None:
        patch.metadata = dict(metadata)

    return apply


@dataclass(frozen=True)
class CreateTransferBuilder:
    """Prepared transfer creation; pick how long to wait with a terminal method."""

    call_http: CallHttp
    target: Endpoint
    args: tuple[CallArg, ...]
    timeout: float | None = None
    cancel: asyncio.Event | None = None

    async def _send(self, *extra: CallArg) -> ResponseEnvelope:
        """Send the prepared call with any extra arguments."""
        return await self.call_http(
            self.target, *self.args, *extra, timeout=self.timeout, cancel=self.cancel
        )

    async def started(self) -> TransferStarted:
        """Create the transfer without waiting for the rail."""
        envelope = await self._send()
        if envelope.status_class in (StatusClass.COMPLETED, StatusClass.STARTED):
            return decode_object(envelope, TransferStarted)
        raise error_from_envelope(envelope)

    async def wait_for_rail_response(self) -> Outcome[Transfer, TransferStarted]:
        """Create the transfer and wait for the rail to accept or decline it.

        Returns ``Completed(Transfer)`` when the rail answered in time and
        ``Started(TransferStarted)`` when the server stopped waiting first.
        """
        envelope = await self._send(wait_for(WAIT_FOR_RAIL_RESPONSE))
        return created_or_started(envelope, Transfer, TransferStarted)


class TransfersAPI:
    """Transfer operations; mixed into the client, which provides ``call_http``."""

    call_http: CallHttp

    def create_transfer(
        self,
        transfer: CreateTransfer,
        *options: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> CreateTransferBuilder:
        """Prepare a transfer; nothing is sent until a terminal method is awaited."""
        args = prepend_args(
            options,
            accept_json(),
            json_body(transfer),
            with_transfer_idempotency_key(uuid4()),
        )
        return CreateTransferBuilder(
            call_http=self.call_http,
            target=endpoint("POST", PATH_TRANSFERS),
            args=tuple(args),
            timeout=timeout,
            cancel=cancel,
        )

    async def list_transfers(
        self,
        *filters: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[Transfer]:
        """List transfers matching ``filters``."""
        envelope = await self.call_http(
            endpoint("GET", PATH_TRANSFERS),
            *prepend_args(filters, accept_json()),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_list_or_error(envelope, Transfer)

    async def get_transfer(
        self,
        transfer_id: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Transfer:
        """Fetch one transfer."""
        envelope = await self.call_http(
            endpoint("GET", PATH_TRANSFER, transfer_id),
            accept_json(),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, Transfer)

    async def patch_transfer(
        self,
        transfer_id: str,
        *patches: TransferPatcher,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Transfer:
        """Update mutable transfer fields such as metadata."""
        patch = PatchTransfer()
        for apply in patches:
            apply(patch)
        envelope = await self.call_http(
            endpoint("PATCH", PATH_TRANSFER, transfer_id),
            accept_json(),
            json_body(patch),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, Transfer)

    async def refund_transfer(
        self,
        transfer_id: str,
        refund: CreateRefund,
        *options: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Outcome[Refund, RefundStarted]:
        """Refund a card transfer, in full or in part."""
        args = prepend_args(
            options,
            accept_json(),
            with_refund_idempotency_key(uuid4()),
            json_body(refund),
        )
        envelope = await self.call_http(
            endpoint("POST", PATH_REFUNDS, transfer_id),
            *args,
            timeout=timeout,
            cancel=cancel,
        )
        return started_or_completed(envelope, Refund, RefundStarted)

    async def list_refunds(
        self,
        transfer_id: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[Refund]:
        """List refunds issued against a transfer."""
        envelope = await self.call_http(
            endpoint("GET", PATH_REFUNDS, transfer_id),
            accept_json(),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_list_or_error(envelope, Refund)

    async def get_refund(
        self,
        transfer_id: str,
        refund_id: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Refund:
        """Fetch one refund."""
        envelope = await self.call_http(
            endpoint("GET", PATH_REFUND, transfer_id, refund_id),
            accept_json(),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, Refund)

    async def reverse_transfer(
        self,
        transfer_id: str,
        reversal: CreateReversal,
        *options: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> CreatedReversal:
        """Cancel or refund a transfer, whichever the rail still allows."""
        args = prepend_args(
            options,
            accept_json(),
            with_reversal_idempotency_key(uuid4()),
            json_body(reversal),
        )
        envelope = await self.call_http(
            endpoint("POST", PATH_TRANSFER_REVERSALS, transfer_id),
            *args,
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, CreatedReversal)

    async def transfer_options(
        self,
        payload: CreateTransferOptions,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> TransferOptions:
        """List the payment methods usable between a source and a destination."""
        envelope = await self.call_http(
            endpoint("POST", PATH_TRANSFER_OPTIONS),
            accept_json(),
            json_body(payload),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, TransferOptions)
