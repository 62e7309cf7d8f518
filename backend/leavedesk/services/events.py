"""Domain events for leave transitions.

Events are handed to a pluggable dispatcher after the transition has been
committed. Delivery runs on a background task: a failing dispatcher is logged
and never reaches the caller.
"""

# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from leavedesk.models.base import now_utc
from leavedesk.models.enums import LeaveEventType, LeaveStatus, LeaveType

logger = logging.getLogger(__name__)


class LeaveEvent(BaseModel):
    """Record handed to notification, audit and email consumers."""

    type: LeaveEventType
    leave_id: uuid.UUID
    employee_id: uuid.UUID
    manager_id: uuid.UUID | None = None
    actor_id: uuid.UUID | None = None
    leave_type: LeaveType
    total_days: int
    status: LeaveStatus
    manager_comment: str | None = None
    occurred_at: datetime = Field(default_factory=now_utc)


@runtime_checkable
class EventDispatcher(Protocol):
    """Interface for whatever delivers domain events downstream."""

    async def dispatch(self, event: LeaveEvent) -> None: ...


class LoggingEventDispatcher:
    """Default dispatcher: writes each event to the log."""

    async def dispatch(self, event: LeaveEvent) -> None:
        logger.info(
            "%s leave=%s employee=%s type=%s days=%d status=%s",
            event.type,
            event.leave_id,
            event.employee_id,
            event.leave_type,
            event.total_days,
            event.status,
        )


class InMemoryEventDispatcher:
    """Collects events in a list; used in development and tests."""

    def __init__(self) -> None:
        self.events: list[LeaveEvent] = []

    async def dispatch(self, event: LeaveEvent) -> None:
        self.events.append(event)


_dispatcher: EventDispatcher = LoggingEventDispatcher()
_pending: set[asyncio.Task[None]] = set()


def get_event_dispatcher() -> EventDispatcher:
    """Return the active dispatcher."""
    return _dispatcher


def set_event_dispatcher(dispatcher: EventDispatcher) -> None:
    """Override the dispatcher (for testing or production wiring)."""
    global _dispatcher
    _dispatcher = dispatcher


async def _deliver(dispatcher: EventDispatcher, event: LeaveEvent) -> None:
    try:
        await dispatcher.dispatch(event)
    except Exception:
        logger.exception("Failed to dispatch %s for leave=%s", event.type, event.leave_id)


def publish(event: LeaveEvent) -> None:
    """Schedule delivery of ``event`` without waiting for it."""
    task = asyncio.get_running_loop().create_task(_deliver(_dispatcher, event))
    _pending.add(task)
    task.add_done_callback(_pending.discard)


async def wait_for_pending_events() -> None:
    """Wait until every scheduled delivery has finished."""
    while _pending:
        await asyncio.gather(*list(_pending))


def pending_event_count() -> int:
    """Number of deliveries scheduled but not yet finished."""
    return len(_pending)
