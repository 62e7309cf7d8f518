# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, computed_field

from leavedesk.models.enums import HolidayType


class CreateHolidayRequest(BaseModel):
    """A non-working day to exclude from leave day counts.

    ``is_recurring`` holidays repeat on the same month and day every year.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    date: date
    name: str = Field(min_length=2, max_length=100)
    type: HolidayType = HolidayType.NATIONAL
    is_recurring: bool = False


class HolidayResponse(BaseModel):
    id: uuid.UUID
    date: date
    name: str
    type: HolidayType
    is_recurring: bool
    year: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def weekday(self) -> str:
        return self.date.strftime("%A")


class HolidayListResponse(BaseModel):
    items: list[HolidayResponse]
    total: int
