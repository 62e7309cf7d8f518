from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Entitlement bucket a leave draws from."""

    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    MATERNITY = "maternity"
    PATERNITY = "paternity"


# Leave types whose allocation already bounds duration.
CONSECUTIVE_LIMIT_EXEMPT = frozenset({LeaveType.MATERNITY, LeaveType.PATERNITY})


class LeaveStatus(enum.StrEnum):
    """State machine for leave records."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    # Reserved; no transition reaches it yet.
    EXPIRED = "expired"


# Statuses that block new applications over the same dates.
ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


class LeaveDecision(enum.StrEnum):
    """Outcome chosen by an approver."""

    APPROVED = "approved"
    REJECTED = "rejected"


class EmployeeRole(enum.StrEnum):
    """Role of an employee in the org directory."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class HolidayType(enum.StrEnum):
    """Kind of non-working day."""

    NATIONAL = "national"
    COMPANY = "company"
    REGIONAL = "regional"


class LedgerEntryType(enum.StrEnum):
    """Type of ledger entry affecting balance."""

    ALLOCATION = "ALLOCATION"
    USAGE = "USAGE"
    REFUND = "REFUND"
    ADJUSTMENT = "ADJUSTMENT"


class LedgerSourceType(enum.StrEnum):
    """Origin of a ledger entry."""

    LEAVE = "LEAVE"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class LeaveEventType(enum.StrEnum):
    """Domain events emitted on leave transitions."""

    SUBMITTED = "LeaveSubmitted"
    APPROVED = "LeaveApproved"
    REJECTED = "LeaveRejected"
    CANCELLED = "LeaveCancelled"
