# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from leavedesk.exceptions import (
    AlreadyCancelledError,
    AlreadyProcessedError,
    AppError,
    CrossYearNotAllowedError,
    EmployeeNotFoundError,
    ExceedsConsecutiveLimitError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidRangeError,
    LeaveNotFoundError,
    LeaveOperationFailedError,
    NoWorkingDaysError,
    OutOfScopeError,
    OverlapConflictError,
    PastDateError,
    SelfApprovalForbiddenError,
)
from leavedesk.models.base import now_utc
from leavedesk.models.enums import (
    ACTIVE_STATUSES,
    CONSECUTIVE_LIMIT_EXEMPT,
    EmployeeRole,
    LeaveDecision,
    LeaveEventType,
    LeaveStatus,
    LeaveType,
)
from leavedesk.models.leave import LeaveRecord
from leavedesk.schemas.leave import LeaveListResponse, LeavePreviewResponse, LeaveResponse
from leavedesk.services import balance as ledger
from leavedesk.services.directory import EmployeeInfo, get_org_directory
from leavedesk.services.duration import calendar_days, count_working_days, duration_label, find_overlap
from leavedesk.services.events import LeaveEvent, publish
from leavedesk.services.holiday import fetch_holiday_dates

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.leave import ApplyLeavePayload, DecisionPayload, PreviewLeavePayload

logger = logging.getLogger(__name__)

# Allowed source statuses per transition.
_DECIDABLE = frozenset({LeaveStatus.PENDING})
_CANCELLABLE = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


def _today() -> date:
    """Server-local calendar date used for past-date and year checks."""
    return date.today()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(record: LeaveRecord) -> LeaveResponse:
    """Map a leave record to its response schema."""
    return LeaveResponse(
        id=record.id,
        employee_id=record.employee_id,
        leave_type=LeaveType(record.leave_type),
        start_date=record.start_date,
        end_date=record.end_date,
        total_days=record.total_days,
        duration_label=duration_label(record.total_days),
        reason=record.reason,
        is_urgent=record.is_urgent,
        status=LeaveStatus(record.status),
        approver_id=record.approver_id,
        manager_comment=record.manager_comment,
        applied_at=record.applied_at,
        processed_at=record.processed_at,
    )


def _build_event(
    event_type: LeaveEventType,
    record: LeaveRecord,
    employee: EmployeeInfo,
    actor_id: uuid.UUID,
) -> LeaveEvent:
    return LeaveEvent(
        type=event_type,
        leave_id=record.id,
        employee_id=record.employee_id,
        manager_id=employee.manager_id,
        actor_id=actor_id,
        leave_type=LeaveType(record.leave_type),
        total_days=record.total_days,
        status=LeaveStatus(record.status),
        manager_comment=record.manager_comment,
    )


async def _require_employee(employee_id: uuid.UUID) -> EmployeeInfo:
    employee = await get_org_directory().get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFoundError("Employee not found")
    return employee


async def _get_leave_or_404(
    session: AsyncSession,
    leave_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRecord:
    """Fetch a leave record by ID. Raises 404 if not found."""
    query = select(LeaveRecord).where(col(LeaveRecord.id) == leave_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    record = result.scalar_one_or_none()
    if record is None:
        raise LeaveNotFoundError("Leave application not found")
    return record


async def _active_leaves_in_range(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> list[LeaveRecord]:
    """Pending/approved records of the employee touching ``[start_date, end_date]``."""
    result = await session.execute(
        select(LeaveRecord)
        .where(
            col(LeaveRecord.employee_id) == employee_id,
            col(LeaveRecord.status).in_([s.value for s in ACTIVE_STATUSES]),
            col(LeaveRecord.start_date) <= end_date,
            col(LeaveRecord.end_date) >= start_date,
        )
        .order_by(col(LeaveRecord.start_date))
    )
    return list(result.scalars().all())


def _validate_dates(start_date: date, end_date: date, today: date) -> None:
    if start_date > end_date:
        raise InvalidRangeError(
            "Start date must be on or before end date",
            context={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
    if start_date < today:
        raise PastDateError(
            "Leave cannot be applied for past dates",
            context={"start_date": start_date.isoformat(), "today": today.isoformat()},
        )
    if start_date.year != today.year or end_date.year != today.year:
        raise CrossYearNotAllowedError(
            f"Leave dates must be within the current year ({today.year}). "
            "Cross-year applications are not allowed.",
            context={"current_year": today.year},
        )


async def _commit_transition(session: AsyncSession, record: LeaveRecord, action: str) -> None:
    """Commit record and ledger changes as one unit, or roll both back."""
    try:
        await session.flush()
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Persisting %s of leave=%s failed", action, record.id)
        raise LeaveOperationFailedError from None
    await session.refresh(record)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def apply_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: ApplyLeavePayload,
) -> LeaveResponse:
    """Create a pending leave record for the calling employee.

    Flow:
    1. Validate range ordering, past date, and current-year window
    2. Count working days (weekends and holidays excluded)
    3. Lock the employee's balances
    4. Check balance sufficiency (advisory; nothing reserved)
    5. Enforce the department's consecutive-day cap
    6. Check overlap against own pending/approved records
    7. Create the record and commit
    8. Publish LeaveSubmitted
    """
    employee = await _require_employee(auth.user_id)
    leave_type = payload.leave_type

    # 1. Dates.
    _validate_dates(payload.start_date, payload.end_date, _today())

    # 2. Working days.
    holidays = await fetch_holiday_dates(session, payload.start_date, payload.end_date)
    total_days = count_working_days(payload.start_date, payload.end_date, holidays)
    if total_days <= 0:
        raise NoWorkingDaysError(
            "No working days in the selected date range",
            context={"calendar_days": calendar_days(payload.start_date, payload.end_date)},
        )

    try:
        # 3. Serialize with other writers for this employee.
        balances = await ledger.lock_employee_balances(session, employee.id, employee.department_policy)

        # 4. Balance.
        if not ledger.check_sufficient(balances, leave_type, total_days):
            raise InsufficientBalanceError(leave_type.value, balances[leave_type].remaining_days, total_days)

        # 5. Consecutive-day cap.
        if leave_type not in CONSECUTIVE_LIMIT_EXEMPT:
            max_days = employee.department_policy.max_consecutive_days
            if total_days > max_days:
                raise ExceedsConsecutiveLimitError(leave_type.value, max_days, total_days)

        # 6. Overlap.
        existing = await _active_leaves_in_range(session, employee.id, payload.start_date, payload.end_date)
        conflict = find_overlap(payload.start_date, payload.end_date, existing)
        if conflict is not None:
            raise OverlapConflictError(
                "Leave dates overlap with an existing application",
                context={
                    "conflicting_leave_id": str(conflict.id),
                    "start_date": conflict.start_date.isoformat(),
                    "end_date": conflict.end_date.isoformat(),
                    "status": conflict.status,
                },
            )
    except AppError:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Checking leave application for employee=%s failed", employee.id)
        raise LeaveOperationFailedError from None

    # 7. Create.
    record = LeaveRecord(
        employee_id=employee.id,
        leave_type=leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=total_days,
        reason=payload.reason,
        is_urgent=payload.is_urgent,
        status=LeaveStatus.PENDING.value,
        applied_at=now_utc(),
    )
    session.add(record)
    await _commit_transition(session, record, "application")

    logger.info(
        "Leave applied: leave=%s employee=%s type=%s days=%d",
        record.id,
        employee.id,
        leave_type,
        total_days,
    )

    # 8. Notify.
    publish(_build_event(LeaveEventType.SUBMITTED, record, employee, auth.user_id))
    return _build_leave_response(record)


async def decide_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    decision: LeaveDecision,
    payload: DecisionPayload | None = None,
) -> LeaveResponse:
    """Approve or reject a pending leave.

    Approval debits the ledger in the same transaction as the status change.
    """
    record = await _get_leave_or_404(session, leave_id)

    if record.status not in _DECIDABLE:
        raise AlreadyProcessedError(
            f"Leave is already {record.status}",
            context={"leave_id": str(record.id), "status": record.status},
        )

    if auth.user_id == record.employee_id:
        raise SelfApprovalForbiddenError(
            "You cannot approve or reject your own leave. Only an admin can process your request."
        )

    if not auth.is_approver:
        raise ForbiddenError("Only managers and admins can process leave applications")

    employee = await _require_employee(record.employee_id)
    if auth.role == EmployeeRole.MANAGER:
        actor = await get_org_directory().get_employee(auth.user_id)
        if actor is None or actor.department_id is None or actor.department_id != employee.department_id:
            raise OutOfScopeError("You can only manage leaves in your department")

    try:
        await ledger.lock_employee_balances(session, employee.id, employee.department_policy)

        # Re-read under the lock so a concurrent decision is seen.
        record = await _get_leave_or_404(session, leave_id, for_update=True)
        if record.status not in _DECIDABLE:
            raise AlreadyProcessedError(
                f"Leave is already {record.status}",
                context={"leave_id": str(record.id), "status": record.status},
            )

        record.status = decision.value
        record.approver_id = auth.user_id
        record.manager_comment = payload.comment if payload else None
        record.processed_at = now_utc()

        if decision == LeaveDecision.APPROVED:
            await ledger.debit(session, employee.id, LeaveType(record.leave_type), record.total_days, record.id)
    except AppError:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Recording %s of leave=%s failed", decision.value, leave_id)
        raise LeaveOperationFailedError from None

    await _commit_transition(session, record, decision.value)

    logger.info("Leave %s: leave=%s employee=%s by=%s", decision, record.id, employee.id, auth.user_id)

    event_type = LeaveEventType.APPROVED if decision == LeaveDecision.APPROVED else LeaveEventType.REJECTED
    publish(_build_event(event_type, record, employee, auth.user_id))
    return _build_leave_response(record)


async def cancel_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
) -> LeaveResponse:
    """Cancel the caller's own pending or approved leave.

    Cancelling an approved leave refunds exactly the recorded ``total_days``.
    """
    record = await _get_leave_or_404(session, leave_id)

    if auth.user_id != record.employee_id:
        raise ForbiddenError("You can only cancel your own leave applications")

    employee = await _require_employee(record.employee_id)

    try:
        await ledger.lock_employee_balances(session, employee.id, employee.department_policy)
        record = await _get_leave_or_404(session, leave_id, for_update=True)

        if record.status == LeaveStatus.CANCELLED:
            raise AlreadyCancelledError(
                "Leave is already cancelled",
                context={"leave_id": str(record.id)},
            )
        if record.status not in _CANCELLABLE:
            raise AlreadyProcessedError(
                f"Leave is already {record.status}",
                context={"leave_id": str(record.id), "status": record.status},
            )

        if record.status == LeaveStatus.APPROVED:
            await ledger.credit(session, employee.id, LeaveType(record.leave_type), record.total_days, record.id)

        record.status = LeaveStatus.CANCELLED.value
        record.processed_at = now_utc()
    except AppError:
        await session.rollback()
        raise
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Recording cancellation of leave=%s failed", leave_id)
        raise LeaveOperationFailedError from None

    await _commit_transition(session, record, "cancellation")

    logger.info("Leave cancelled: leave=%s employee=%s", record.id, employee.id)

    publish(_build_event(LeaveEventType.CANCELLED, record, employee, auth.user_id))
    return _build_leave_response(record)


async def get_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
) -> LeaveResponse:
    """Get a single leave record; employees may only see their own."""
    record = await _get_leave_or_404(session, leave_id)
    if not auth.can_view(record.employee_id):
        raise ForbiddenError("You can only view your own leave applications")
    return _build_leave_response(record)


async def list_leaves(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID | None = None,
    status_filter: LeaveStatus | None = None,
    leave_type: LeaveType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveListResponse:
    """List leave records, newest application first.

    Employees only ever see their own records; managers and admins may list
    anyone's.
    """
    if not auth.is_approver:
        if employee_id is not None and employee_id != auth.user_id:
            raise ForbiddenError("You can only view your own leave applications")
        employee_id = auth.user_id

    base_filters = []
    if employee_id is not None:
        base_filters.append(col(LeaveRecord.employee_id) == employee_id)
    if status_filter is not None:
        base_filters.append(col(LeaveRecord.status) == status_filter.value)
    if leave_type is not None:
        base_filters.append(col(LeaveRecord.leave_type) == leave_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRecord).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRecord)
        .where(*base_filters)
        .order_by(col(LeaveRecord.applied_at).desc())
        .offset(offset)
        .limit(limit)
    )
    records = list(result.scalars().all())

    return LeaveListResponse(
        items=[_build_leave_response(r) for r in records],
        total=total,
    )


async def preview_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: PreviewLeavePayload,
) -> LeavePreviewResponse:
    """Report working days, balance and overlap for a candidate range.

    Read-only: nothing is locked or created.
    """
    if payload.start_date > payload.end_date:
        raise InvalidRangeError("Start date must be on or before end date")

    holidays = await fetch_holiday_dates(session, payload.start_date, payload.end_date)
    working_days = count_working_days(payload.start_date, payload.end_date, holidays)

    balances = await ledger.get_employee_balances(session, auth.user_id)
    available = next(b.remaining_days for b in balances.items if b.leave_type == payload.leave_type)

    existing = await _active_leaves_in_range(session, auth.user_id, payload.start_date, payload.end_date)
    conflict = find_overlap(payload.start_date, payload.end_date, existing)

    return LeavePreviewResponse(
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        calendar_days=calendar_days(payload.start_date, payload.end_date),
        working_days=working_days,
        available_days=available,
        sufficient_balance=available >= working_days,
        has_overlap=conflict is not None,
        conflicting_leave_id=conflict.id if conflict else None,
    )
