from sqlmodel import SQLModel

from leavedesk.models.balance import LeaveBalance
from leavedesk.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leavedesk.models.enums import (
    EmployeeRole,
    HolidayType,
    LeaveDecision,
    LeaveEventType,
    LeaveStatus,
    LeaveType,
    LedgerEntryType,
    LedgerSourceType,
)
from leavedesk.models.holiday import Holiday
from leavedesk.models.leave import LeaveRecord
from leavedesk.models.ledger import LeaveLedgerEntry

__all__ = [
    "EmployeeRole",
    "Holiday",
    "HolidayType",
    "LeaveBalance",
    "LeaveDecision",
    "LeaveEventType",
    "LeaveLedgerEntry",
    "LeaveRecord",
    "LeaveStatus",
    "LeaveType",
    "LedgerEntryType",
    "LedgerSourceType",
    "SQLModel",
    "TimestampMixin",
    "UpdatedAtMixin",
    "UUIDBase",
]
