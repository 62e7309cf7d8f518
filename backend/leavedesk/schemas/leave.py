# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ApplyLeavePayload(BaseModel):
    """Request body for applying for leave.

    Range ordering is checked by the lifecycle service so the caller gets an
    ``InvalidRange`` error rather than a schema error.
    """

    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=500)
    is_urgent: bool = False


class PreviewLeavePayload(BaseModel):
    """Request body for the dry-run day/balance/overlap check."""

    leave_type: LeaveType
    start_date: date
    end_date: date


class DecisionPayload(BaseModel):
    """Request body for approve/reject actions."""

    comment: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(BaseModel):
    """Response schema for a single leave record."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    duration_label: str
    reason: str | None
    is_urgent: bool
    status: LeaveStatus
    approver_id: uuid.UUID | None
    manager_comment: str | None
    applied_at: datetime
    processed_at: datetime | None


class LeaveListResponse(BaseModel):
    """Paginated list of leave records."""

    items: list[LeaveResponse]
    total: int


class LeavePreviewResponse(BaseModel):
    """Outcome of checking a candidate range without applying."""

    leave_type: LeaveType
    start_date: date
    end_date: date
    calendar_days: int
    working_days: int
    available_days: int
    sufficient_balance: bool
    has_overlap: bool
    conflicting_leave_id: uuid.UUID | None = None
