# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import ApproverDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import LeaveDecision, LeaveStatus, LeaveType
from leavedesk.schemas.leave import (
    ApplyLeavePayload,
    DecisionPayload,
    LeaveListResponse,
    LeavePreviewResponse,
    LeaveResponse,
    PreviewLeavePayload,
)
from leavedesk.services import leave as leave_service

leaves_router = APIRouter(prefix="/leaves", tags=["leaves"])


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    payload: ApplyLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Apply for leave as the calling employee."""
    return await leave_service.apply_leave(session, auth, payload)


@leaves_router.post("/preview", response_model=LeavePreviewResponse)
async def preview_leave(
    payload: PreviewLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeavePreviewResponse:
    """Check working days, balance and overlap without applying."""
    return await leave_service.preview_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    leave_type: LeaveType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveListResponse:
    """List leave records with optional filters."""
    return await leave_service.list_leaves(session, auth, employee_id, status_filter, leave_type, offset, limit)


@leaves_router.get("/{leave_id}", response_model=LeaveResponse)
async def get_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Get a single leave record."""
    return await leave_service.get_leave(session, auth, leave_id)


@leaves_router.post("/{leave_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: ApproverDep,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Approve a pending leave (manager or admin)."""
    return await leave_service.decide_leave(session, auth, leave_id, LeaveDecision.APPROVED, payload)


@leaves_router.post("/{leave_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: ApproverDep,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Reject a pending leave (manager or admin)."""
    return await leave_service.decide_leave(session, auth, leave_id, LeaveDecision.REJECTED, payload)


@leaves_router.post("/{leave_id}/cancel", response_model=LeaveResponse)
async def cancel_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Cancel your own pending or approved leave."""
    return await leave_service.cancel_leave(session, auth, leave_id)
