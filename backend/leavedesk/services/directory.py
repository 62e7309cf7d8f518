# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator

from leavedesk.config import get_settings
from leavedesk.models.enums import EmployeeRole, LeaveType

# Default per-type allocation when a department sets none.
DEFAULT_ALLOCATIONS: dict[LeaveType, int] = {
    LeaveType.ANNUAL: 20,
    LeaveType.SICK: 10,
    LeaveType.PERSONAL: 5,
    LeaveType.MATERNITY: 90,
    LeaveType.PATERNITY: 15,
}


def _default_max_consecutive_days() -> int:
    return get_settings().default_max_consecutive_days


def normalize_id(value: Any) -> uuid.UUID | None:
    """Reduce a reference to a plain identifier.

    Directory backends hand back references either as raw ids or as expanded
    objects; callers only ever see the ``uuid.UUID``.
    """
    if value is None or isinstance(value, uuid.UUID):
        return value
    if isinstance(value, Mapping):
        return normalize_id(value.get("id"))
    if hasattr(value, "id"):
        return normalize_id(value.id)
    return uuid.UUID(str(value))


class DepartmentPolicy(BaseModel):
    """Leave rules configured per department."""

    max_consecutive_days: int = Field(default_factory=_default_max_consecutive_days, ge=1)
    allocations: dict[LeaveType, int] = Field(default_factory=lambda: dict(DEFAULT_ALLOCATIONS))

    def allocation_for(self, leave_type: LeaveType) -> int:
        return self.allocations.get(leave_type, DEFAULT_ALLOCATIONS[leave_type])


class EmployeeInfo(BaseModel):
    """Employee metadata from the Org Directory."""

    id: uuid.UUID
    name: str
    email: str
    department_id: uuid.UUID | None = None
    manager_id: uuid.UUID | None = None
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    department_policy: DepartmentPolicy = Field(default_factory=DepartmentPolicy)

    @field_validator("department_id", "manager_id", mode="before")
    @classmethod
    def _normalize_reference(cls, value: Any) -> uuid.UUID | None:
        return normalize_id(value)


@runtime_checkable
class OrgDirectory(Protocol):
    """Interface for the Org Directory."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...


class InMemoryOrgDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)


_org_directory: OrgDirectory = InMemoryOrgDirectory()


def get_org_directory() -> OrgDirectory:
    """Return the active Org Directory."""
    return _org_directory


def set_org_directory(directory: OrgDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _org_directory
    _org_directory = directory
