from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import HolidayConflictError, HolidayNotFoundError
from leavedesk.models.enums import HolidayType
from leavedesk.models.holiday import Holiday
from leavedesk.schemas.holiday import HolidayListResponse, HolidayResponse

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.holiday import CreateHolidayRequest

logger = logging.getLogger(__name__)


def _build_holiday_response(holiday: Holiday) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        date=holiday.date,
        name=holiday.name,
        type=HolidayType(holiday.type),
        is_recurring=holiday.is_recurring,
        year=holiday.year,
    )


def _recurring_dates(holiday: Holiday, start_date: date, end_date: date) -> set[date]:
    """Project a recurring holiday onto every year of the range."""
    dates: set[date] = set()
    for year in range(start_date.year, end_date.year + 1):
        try:
            candidate = holiday.date.replace(year=year)
        except ValueError:
            # Feb 29 in a non-leap year.
            continue
        if start_date <= candidate <= end_date:
            dates.add(candidate)
    return dates


async def fetch_holiday_dates(
    session: AsyncSession,
    start_date: date,
    end_date: date,
) -> set[date]:
    """Return the non-working dates inside ``[start_date, end_date]``."""
    result = await session.execute(
        select(Holiday).where(
            or_(
                and_(col(Holiday.date) >= start_date, col(Holiday.date) <= end_date),
                col(Holiday.is_recurring).is_(True),
            )
        )
    )
    dates: set[date] = set()
    for holiday in result.scalars().all():
        if holiday.is_recurring:
            dates |= _recurring_dates(holiday, start_date, end_date)
        elif start_date <= holiday.date <= end_date:
            dates.add(holiday.date)
    return dates


async def create_holiday(
    session: AsyncSession,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Create a holiday; one per calendar date."""
    holiday = Holiday(
        date=payload.date,
        name=payload.name,
        type=payload.type.value,
        is_recurring=payload.is_recurring,
        year=payload.date.year,
    )
    session.add(holiday)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise HolidayConflictError(f"A holiday already exists on {payload.date.isoformat()}") from None

    await session.commit()
    await session.refresh(holiday)
    logger.info("Holiday created: %s on %s", holiday.name, holiday.date)
    return _build_holiday_response(holiday)


async def list_holidays(
    session: AsyncSession,
    year: int | None = None,
    holiday_type: HolidayType | None = None,
) -> HolidayListResponse:
    """List holidays ordered by date with optional year and type filters."""
    base_filter = []
    if year is not None:
        base_filter.append(col(Holiday.year) == year)
    if holiday_type is not None:
        base_filter.append(col(Holiday.type) == holiday_type.value)

    count_result = await session.execute(select(func.count()).select_from(Holiday).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(select(Holiday).where(*base_filter).order_by(col(Holiday.date)))
    holidays = list(result.scalars().all())

    return HolidayListResponse(
        items=[_build_holiday_response(h) for h in holidays],
        total=total,
    )


async def get_holiday(session: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
    """Get a single holiday or raise 404."""
    result = await session.execute(select(Holiday).where(col(Holiday.id) == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise HolidayNotFoundError("Holiday not found")
    return holiday


async def delete_holiday(session: AsyncSession, holiday_id: uuid.UUID) -> None:
    """Delete a holiday. Leave records keep the day count they were created with."""
    holiday = await get_holiday(session, holiday_id)
    await session.delete(holiday)
    await session.commit()
    logger.info("Holiday deleted: %s on %s", holiday.name, holiday.date)
