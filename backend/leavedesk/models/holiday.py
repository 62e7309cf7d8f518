# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase
from leavedesk.models.enums import HolidayType


class Holiday(UUIDBase, TimestampMixin, table=True):
    """A non-working day excluded from leave day counts."""

    __tablename__ = "holiday"
    __table_args__ = (sa.UniqueConstraint("date", name="uq_holiday_date"),)

    date: datetime.date = Field(index=True)
    name: str = Field(max_length=100)
    type: str = Field(default=HolidayType.NATIONAL, max_length=20)
    is_recurring: bool = False
    year: int = Field(index=True)
