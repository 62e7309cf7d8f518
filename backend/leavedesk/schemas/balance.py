# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from leavedesk.models.enums import LeaveType, LedgerEntryType, LedgerSourceType

# ---------------------------------------------------------------------------
# Balance responses
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance for a single leave type."""

    leave_type: LeaveType
    allocated_days: int
    remaining_days: int
    taken_days: int
    updated_at: datetime | None = None


class BalanceListResponse(BaseModel):
    """All leave-type balances for an employee."""

    employee_id: uuid.UUID
    items: list[BalanceResponse]
    total_remaining: int
    total_taken: int


# ---------------------------------------------------------------------------
# Ledger responses
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: uuid.UUID
    leave_type: LeaveType
    entry_type: LedgerEntryType
    amount_days: int
    source_type: LedgerSourceType
    source_id: str
    metadata_json: dict[str, Any] | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Ledger entries for an employee."""

    items: list[LedgerEntryResponse]
    total: int


# ---------------------------------------------------------------------------
# Adjustment request
# ---------------------------------------------------------------------------


class CreateAdjustmentRequest(BaseModel):
    """Admin change to an employee's allocation for one leave type."""

    employee_id: uuid.UUID
    leave_type: LeaveType
    amount_days: int = Field(description="Signed day count; positive grants, negative revokes")
    reason: str = Field(min_length=1, max_length=500)

    @field_validator("amount_days")
    @classmethod
    def _validate_amount(cls, value: int) -> int:
        if value == 0:
            msg = "amount_days must be non-zero"
            raise ValueError(msg)
        return value
