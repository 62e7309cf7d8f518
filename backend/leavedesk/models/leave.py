# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase, now_utc
from leavedesk.models.enums import LeaveStatus


class LeaveRecord(UUIDBase, TimestampMixin, table=True):
    """One leave application and its approval workflow state."""

    __tablename__ = "leave_record"
    __table_args__ = (
        sa.Index("ix_leave_employee_status", "employee_id", "status"),
        sa.Index("ix_leave_employee_start", "employee_id", "start_date"),
        sa.CheckConstraint("total_days >= 1", name="ck_leave_total_days_positive"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_range_ordered"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=20)
    start_date: date
    end_date: date
    total_days: int
    reason: str | None = Field(default=None, max_length=500)
    is_urgent: bool = False
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    approver_id: uuid.UUID | None = None
    manager_comment: str | None = Field(default=None, max_length=500)
    applied_at: datetime = Field(default_factory=now_utc, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    processed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
