"""Scheduled transfer operations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from moov.call import CallArg, accept_json, endpoint, json_body, prepend_args
from moov.http import ResponseEnvelope
from moov.models import CreateSchedule, Schedule
from moov.paths import PATH_SCHEDULE, PATH_SCHEDULES
from moov.responses import completed_list_or_error, completed_object_or_error, completed_or_error


class SchedulesAPI:
    """Schedule operations scoped to a partner account."""

    call_http: Callable[..., Awaitable[ResponseEnvelope]]

    async def create_schedule(
        self,
        account_id: str,
        schedule: CreateSchedule,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Schedule:
        """Create one-off occurrences and/or a recurring transfer for ``account_id``."""
        envelope = await self.call_http(
            endpoint("POST", PATH_SCHEDULES, account_id),
            accept_json(),
            json_body(schedule),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, Schedule)

    async def list_schedules(
        self,
        account_id: str,
        *filters: CallArg,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[Schedule]:
        """List schedules for ``account_id``."""
        envelope = await self.call_http(
            endpoint("GET", PATH_SCHEDULES, account_id),
            *prepend_args(filters, accept_json()),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_list_or_error(envelope, Schedule)

    async def get_schedule(
        self,
        account_id: str,
        schedule_id: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Schedule:
        """Fetch one schedule with its occurrences."""
        envelope = await self.call_http(
            endpoint("GET", PATH_SCHEDULE, account_id, schedule_id),
            accept_json(),
            timeout=timeout,
            cancel=cancel,
        )
        return completed_object_or_error(envelope, Schedule)

    async def cancel_schedule(
        self,
        account_id: str,
        schedule_id: str,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> None:
        """Cancel all future occurrences of a schedule."""
        envelope = await self.call_http(
            endpoint("DELETE", PATH_SCHEDULE, account_id, schedule_id),
            accept_json(),
            timeout=timeout,
            cancel=cancel,
        )
        completed_or_error(envelope)
