# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import UpdatedAtMixin


class LeaveBalance(UpdatedAtMixin, table=True):
    """Per-employee, per-leave-type entitlement counters.

    ``remaining_days + taken_days == allocated_days`` after every committed
    mutation; the check constraints keep both counters non-negative.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.PrimaryKeyConstraint("employee_id", "leave_type"),
        sa.CheckConstraint("remaining_days >= 0", name="ck_balance_remaining_non_negative"),
        sa.CheckConstraint("taken_days >= 0", name="ck_balance_taken_non_negative"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=20)
    allocated_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    remaining_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    taken_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
