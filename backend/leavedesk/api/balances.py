# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, SelfOrApproverDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import LeaveType
from leavedesk.schemas.balance import (
    BalanceListResponse,
    CreateAdjustmentRequest,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leavedesk.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)

employee_ledger_router = APIRouter(
    prefix="/employees/{employee_id}/ledger",
    tags=["balances"],
)

adjustment_router = APIRouter(
    prefix="/adjustments",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: SelfOrApproverDep,
) -> BalanceListResponse:
    """Get every leave-type balance for an employee."""
    return await balance_service.get_employee_balances(session, employee_id)


@employee_ledger_router.get("", response_model=LedgerListResponse)
async def get_employee_ledger(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: SelfOrApproverDep,
    leave_type: LeaveType | None = Query(default=None),
) -> LedgerListResponse:
    """Get ledger entries for an employee, optionally for one leave type."""
    return await balance_service.get_employee_ledger(session, employee_id, leave_type)


@adjustment_router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    auth: AdminDep,
) -> LedgerEntryResponse:
    """Create an admin balance adjustment."""
    return await balance_service.create_adjustment(session, auth, payload)
