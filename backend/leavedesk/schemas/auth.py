# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leavedesk.models.enums import EmployeeRole


class AuthContext(BaseModel):
    """Caller identity taken from the ``X-User-Id`` and ``X-Role`` headers."""

    user_id: uuid.UUID
    role: EmployeeRole = EmployeeRole.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == EmployeeRole.ADMIN

    @property
    def is_approver(self) -> bool:
        """Managers and admins may decide leave and read other employees' records."""
        return self.role in (EmployeeRole.MANAGER, EmployeeRole.ADMIN)

    def can_view(self, employee_id: uuid.UUID) -> bool:
        return self.is_approver or self.user_id == employee_id
