# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import HolidayType
from leavedesk.schemas.holiday import CreateHolidayRequest, HolidayListResponse, HolidayResponse
from leavedesk.services import holiday as holiday_service

holidays_router = APIRouter(
    prefix="/holidays",
    tags=["holidays"],
)


@holidays_router.post(
    "",
    response_model=HolidayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_holiday(
    payload: CreateHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> HolidayResponse:
    """Create a holiday (admin only)."""
    return await holiday_service.create_holiday(session, payload)


@holidays_router.get(
    "",
    response_model=HolidayListResponse,
)
async def list_holidays(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
    holiday_type: HolidayType | None = Query(default=None, alias="type"),
) -> HolidayListResponse:
    """List holidays with optional year and type filters."""
    return await holiday_service.list_holidays(session, year, holiday_type)


@holidays_router.delete(
    "/{holiday_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Delete a holiday (admin only)."""
    await holiday_service.delete_holiday(session, holiday_id)
