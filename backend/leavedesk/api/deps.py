# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leavedesk.exceptions import ForbiddenError
from leavedesk.models.enums import EmployeeRole
from leavedesk.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: EmployeeRole = Header(default=EmployeeRole.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require manager or admin role for the request."""
    if not auth.is_approver:
        raise ForbiddenError("Manager or admin access required")
    return auth


ApproverDep = Annotated[AuthContext, Depends(require_approver)]


async def require_self_or_approver(
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> AuthContext:
    """Employees may only read their own balances; managers and admins may read any."""
    if not auth.can_view(employee_id):
        raise ForbiddenError("You can only view your own balance")
    return auth


SelfOrApproverDep = Annotated[AuthContext, Depends(require_self_or_approver)]
