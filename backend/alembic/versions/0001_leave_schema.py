"""leave records, balances, ledger and holidays

Revision ID: 0001
Revises:
Create Date: 2025-01-02 09:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "leave_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=True),
        sa.Column("is_urgent", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("approver_id", sa.Uuid(), nullable=True),
        sa.Column("manager_comment", sa.String(length=500), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("total_days >= 1", name="ck_leave_total_days_positive"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_range_ordered"),
    )
    op.create_index("ix_leave_record_employee_id", "leave_record", ["employee_id"])
    op.create_index("ix_leave_record_status", "leave_record", ["status"])
    op.create_index("ix_leave_employee_status", "leave_record", ["employee_id", "status"])
    op.create_index("ix_leave_employee_start", "leave_record", ["employee_id", "start_date"])

    op.create_table(
        "leave_balance",
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("allocated_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("remaining_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("taken_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("employee_id", "leave_type"),
        sa.CheckConstraint("remaining_days >= 0", name="ck_balance_remaining_non_negative"),
        sa.CheckConstraint("taken_days >= 0", name="ck_balance_taken_non_negative"),
    )
    op.create_index("ix_leave_balance_employee_id", "leave_balance", ["employee_id"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("entry_type", sa.String(length=20), nullable=False),
        sa.Column("amount_days", sa.Integer(), nullable=False),
        sa.Column("source_type", sa.String(length=20), nullable=False),
        sa.Column("source_id", sa.String(length=255), nullable=False),
        sa.Column("metadata_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_ledger_idempotency"),
    )
    op.create_index("ix_leave_ledger_entry_employee_id", "leave_ledger_entry", ["employee_id"])
    op.create_index("ix_ledger_employee_type", "leave_ledger_entry", ["employee_id", "leave_type"])

    op.create_table(
        "holiday",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_holiday_date"),
    )
    op.create_index("ix_holiday_date", "holiday", ["date"])
    op.create_index("ix_holiday_year", "holiday", ["year"])


def downgrade() -> None:
    op.drop_index("ix_holiday_year", table_name="holiday")
    op.drop_index("ix_holiday_date", table_name="holiday")
    op.drop_table("holiday")
    op.drop_index("ix_ledger_employee_type", table_name="leave_ledger_entry")
    op.drop_index("ix_leave_ledger_entry_employee_id", table_name="leave_ledger_entry")
    op.drop_table("leave_ledger_entry")
    op.drop_index("ix_leave_balance_employee_id", table_name="leave_balance")
    op.drop_table("leave_balance")
    op.drop_index("ix_leave_employee_start", table_name="leave_record")
    op.drop_index("ix_leave_employee_status", table_name="leave_record")
    op.drop_index("ix_leave_record_status", table_name="leave_record")
    op.drop_index("ix_leave_record_employee_id", table_name="leave_record")
    op.drop_table("leave_record")
