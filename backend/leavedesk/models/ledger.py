# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase


class LeaveLedgerEntry(UUIDBase, TimestampMixin, table=True):
    """Append-only record of one balance movement.

    USAGE and REFUND rows point at the leave record they belong to; the unique
    constraint allows at most one of each per leave.
    """

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.Index("ix_ledger_employee_type", "employee_id", "leave_type"),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_ledger_idempotency"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=20)
    entry_type: str = Field(max_length=20)
    amount_days: int
    source_type: str = Field(max_length=20)
    source_id: str = Field(max_length=255)
    metadata_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
