"""Balance ledger: per-employee, per-leave-type counters.

Mutations never read-modify-write in Python. ``debit`` and ``credit`` are
single conditional UPDATEs, so a concurrent writer can never push
``remaining_days`` below zero or refund more than was taken; a statement that
matches no row aborts the transition with ``LedgerInvariantViolationError``.
Every mutation also appends a ``LeaveLedgerEntry``.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import (
    EmployeeNotFoundError,
    InsufficientBalanceError,
    LedgerInvariantViolationError,
)
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.enums import LeaveType, LedgerEntryType, LedgerSourceType
from leavedesk.models.ledger import LeaveLedgerEntry
from leavedesk.schemas.balance import (
    BalanceListResponse,
    BalanceResponse,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leavedesk.services.directory import DepartmentPolicy, get_org_directory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.balance import CreateAdjustmentRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: LeaveBalance) -> BalanceResponse:
    return BalanceResponse(
        leave_type=LeaveType(balance.leave_type),
        allocated_days=balance.allocated_days,
        remaining_days=balance.remaining_days,
        taken_days=balance.taken_days,
        updated_at=balance.updated_at,
    )


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a ledger entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        leave_type=LeaveType(entry.leave_type),
        entry_type=LedgerEntryType(entry.entry_type),
        amount_days=entry.amount_days,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        metadata_json=entry.metadata_json,
        created_at=entry.created_at,
    )


def _check_conservation(balance: LeaveBalance) -> None:
    if balance.remaining_days < 0 or balance.taken_days < 0:
        raise LedgerInvariantViolationError(
            f"{balance.leave_type} balance went negative",
            context=_balance_context(balance),
        )
    if balance.remaining_days + balance.taken_days != balance.allocated_days:
        raise LedgerInvariantViolationError(
            f"{balance.leave_type} balance no longer sums to its allocation",
            context=_balance_context(balance),
        )


def _balance_context(balance: LeaveBalance) -> dict[str, object]:
    return {
        "employee_id": str(balance.employee_id),
        "leave_type": balance.leave_type,
        "allocated": balance.allocated_days,
        "remaining": balance.remaining_days,
        "taken": balance.taken_days,
    }


async def _reload_balance(session: AsyncSession, employee_id: uuid.UUID, leave_type: LeaveType) -> LeaveBalance:
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type) == leave_type.value,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _append_entry(session: AsyncSession, entry: LeaveLedgerEntry) -> None:
    session.add(entry)
    try:
        await session.flush()
    except IntegrityError:
        raise LedgerInvariantViolationError(
            f"{entry.entry_type} already recorded for {entry.source_type.lower()} {entry.source_id}",
            context={"source_id": entry.source_id, "entry_type": entry.entry_type},
        ) from None


async def _require_employee_policy(employee_id: uuid.UUID) -> DepartmentPolicy:
    employee = await get_org_directory().get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFoundError("Employee not found")
    return employee.department_policy


# ---------------------------------------------------------------------------
# Ledger primitives
# ---------------------------------------------------------------------------


def check_sufficient(
    balances: Mapping[LeaveType, LeaveBalance],
    leave_type: LeaveType,
    requested_days: int,
) -> bool:
    """True iff the leave type has at least ``requested_days`` remaining.

    Advisory only: nothing is reserved.
    """
    balance = balances.get(leave_type)
    remaining = balance.remaining_days if balance is not None else 0
    return remaining >= requested_days


async def lock_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    policy: DepartmentPolicy,
) -> dict[LeaveType, LeaveBalance]:
    """Lock every balance row of one employee, creating missing rows.

    The FOR UPDATE lock is what serializes apply, approve and cancel for the
    same employee; other employees are never blocked. New rows start at the
    department allocation with an ALLOCATION ledger entry.

    Missing rows are inserted with ON CONFLICT DO NOTHING before the lock is
    taken, so two first requests for the same employee both end up waiting
    on the same rows instead of one failing on the primary key.
    """
    existing = await session.execute(
        select(col(LeaveBalance.leave_type)).where(col(LeaveBalance.employee_id) == employee_id)
    )
    known = set(existing.scalars().all())
    missing = [t for t in LeaveType if t.value not in known]
    if missing:
        await create_missing_balances(session, employee_id, policy, missing)

    result = await session.execute(
        select(LeaveBalance)
        .where(col(LeaveBalance.employee_id) == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {LeaveType(b.leave_type): b for b in result.scalars().all()}


_CONFLICT_AWARE_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def create_missing_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    policy: DepartmentPolicy,
    leave_types: list[LeaveType],
) -> list[LeaveType]:
    """Insert balance rows that do not exist yet and return the types actually created.

    Rows another transaction inserted first are left alone, and only the
    inserted rows get an ALLOCATION ledger entry.
    """
    dialect = session.get_bind().dialect.name
    insert = _CONFLICT_AWARE_INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"Balance initialization is not supported on {dialect}")

    table = LeaveBalance.__table__  # ty: ignore[unresolved-attribute]
    stmt = (
        insert(table)
        .values(
            [
                {
                    "employee_id": employee_id,
                    "leave_type": leave_type.value,
                    "allocated_days": policy.allocation_for(leave_type),
                    "remaining_days": policy.allocation_for(leave_type),
                    "taken_days": 0,
                    "version": 1,
                }
                for leave_type in leave_types
            ]
        )
        .on_conflict_do_nothing(index_elements=["employee_id", "leave_type"])
        .returning(table.c.leave_type)
    )
    result = await session.execute(stmt)
    created = [LeaveType(value) for value in result.scalars().all()]

    for leave_type in created:
        session.add(
            LeaveLedgerEntry(
                employee_id=employee_id,
                leave_type=leave_type.value,
                entry_type=LedgerEntryType.ALLOCATION.value,
                amount_days=policy.allocation_for(leave_type),
                source_type=LedgerSourceType.SYSTEM.value,
                source_id=f"{employee_id}:{leave_type.value}",
            )
        )
    if created:
        await session.flush()
        logger.debug("Initialized %d balance rows for employee=%s", len(created), employee_id)
    return created


async def debit(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    days: int,
    leave_id: uuid.UUID,
) -> LeaveBalance:
    """Move ``days`` from remaining to taken, only if enough remains."""
    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type) == leave_type.value,
            col(LeaveBalance.remaining_days) >= days,
        )
        .values(
            remaining_days=col(LeaveBalance.remaining_days) - days,
            taken_days=col(LeaveBalance.taken_days) + days,
            version=col(LeaveBalance.version) + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise LedgerInvariantViolationError(
            f"Debit of {days} {leave_type} day(s) would drive the balance negative",
            context={"employee_id": str(employee_id), "leave_type": leave_type.value, "requested": days},
        )

    balance = await _reload_balance(session, employee_id, leave_type)
    _check_conservation(balance)

    await _append_entry(
        session,
        LeaveLedgerEntry(
            employee_id=employee_id,
            leave_type=leave_type.value,
            entry_type=LedgerEntryType.USAGE.value,
            amount_days=-days,
            source_type=LedgerSourceType.LEAVE.value,
            source_id=str(leave_id),
        ),
    )
    return balance


async def credit(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    days: int,
    leave_id: uuid.UUID,
) -> LeaveBalance:
    """Reverse a prior debit of exactly ``days``."""
    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type) == leave_type.value,
            col(LeaveBalance.taken_days) >= days,
        )
        .values(
            remaining_days=col(LeaveBalance.remaining_days) + days,
            taken_days=col(LeaveBalance.taken_days) - days,
            version=col(LeaveBalance.version) + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise LedgerInvariantViolationError(
            f"Refund of {days} {leave_type} day(s) exceeds the days taken",
            context={"employee_id": str(employee_id), "leave_type": leave_type.value, "requested": days},
        )

    balance = await _reload_balance(session, employee_id, leave_type)
    _check_conservation(balance)

    await _append_entry(
        session,
        LeaveLedgerEntry(
            employee_id=employee_id,
            leave_type=leave_type.value,
            entry_type=LedgerEntryType.REFUND.value,
            amount_days=days,
            source_type=LedgerSourceType.LEAVE.value,
            source_id=str(leave_id),
        ),
    )
    return balance


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
) -> BalanceListResponse:
    """Get every leave-type balance for an employee.

    Types that were never touched are reported at their department
    allocation without being persisted.
    """
    result = await session.execute(select(LeaveBalance).where(col(LeaveBalance.employee_id) == employee_id))
    stored = {LeaveType(b.leave_type): b for b in result.scalars().all()}

    policy = await _require_employee_policy(employee_id)

    items: list[BalanceResponse] = []
    for leave_type in LeaveType:
        balance = stored.get(leave_type)
        if balance is not None:
            items.append(_build_balance_response(balance))
        else:
            allocated = policy.allocation_for(leave_type)
            items.append(
                BalanceResponse(
                    leave_type=leave_type,
                    allocated_days=allocated,
                    remaining_days=allocated,
                    taken_days=0,
                )
            )

    return BalanceListResponse(
        employee_id=employee_id,
        items=items,
        total_remaining=sum(i.remaining_days for i in items),
        total_taken=sum(i.taken_days for i in items),
    )


async def get_employee_ledger(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type: LeaveType | None = None,
) -> LedgerListResponse:
    """Ledger entries for an employee, newest first."""
    base_filter = [col(LeaveLedgerEntry.employee_id) == employee_id]
    if leave_type is not None:
        base_filter.append(col(LeaveLedgerEntry.leave_type) == leave_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry).where(*base_filter).order_by(col(LeaveLedgerEntry.created_at).desc())
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )


# ---------------------------------------------------------------------------
# Write path: admin adjustments
# ---------------------------------------------------------------------------


async def create_adjustment(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateAdjustmentRequest,
) -> LedgerEntryResponse:
    """Grant or revoke allocation for one leave type.

    Flow:
    1. Resolve the employee's department policy
    2. Lock the employee's balances
    3. Refuse a revocation larger than what remains
    4. Update allocation and remaining together
    5. Insert ADJUSTMENT ledger entry
    6. Commit
    """
    policy = await _require_employee_policy(payload.employee_id)
    balances = await lock_employee_balances(session, payload.employee_id, policy)
    balance = balances[payload.leave_type]

    if payload.amount_days < 0 and balance.remaining_days + payload.amount_days < 0:
        raise InsufficientBalanceError(payload.leave_type.value, balance.remaining_days, -payload.amount_days)

    balance.allocated_days += payload.amount_days
    balance.remaining_days += payload.amount_days
    balance.version += 1
    _check_conservation(balance)

    entry_id = uuid.uuid4()
    entry = LeaveLedgerEntry(
        id=entry_id,
        employee_id=payload.employee_id,
        leave_type=payload.leave_type.value,
        entry_type=LedgerEntryType.ADJUSTMENT.value,
        amount_days=payload.amount_days,
        source_type=LedgerSourceType.ADMIN.value,
        source_id=str(entry_id),
        metadata_json={"reason": payload.reason, "adjusted_by": str(auth.user_id)},
    )
    session.add(entry)
    await session.flush()

    await session.commit()
    await session.refresh(entry)
    logger.info(
        "Adjusted %s balance for employee=%s by %+d (by %s)",
        payload.leave_type,
        payload.employee_id,
        payload.amount_days,
        auth.user_id,
    )
    return _build_ledger_entry_response(entry)
