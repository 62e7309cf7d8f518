"""Working-day arithmetic and date-range overlap checks.

Everything here is pure: callers fetch holidays and existing leave ranges and
pass them in.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Iterator

    from leavedesk.models.leave import LeaveRecord

_ONE_DAY = timedelta(days=1)
# Monday=0 ... Friday=4.
_LAST_WEEKDAY = 4
# Working days shown as one week in duration labels.
_WORKING_WEEK = 5

_RecordT = TypeVar("_RecordT", bound="LeaveRecord")


def to_calendar_date(value: date | datetime) -> date:
    """Strip the time of day, keeping the calendar date in its own clock."""
    if isinstance(value, datetime):
        return value.date()
    return value


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date in ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += _ONE_DAY


def is_working_day(day: date, holidays: Collection[date]) -> bool:
    return day.weekday() <= _LAST_WEEKDAY and day not in holidays


def calendar_days(start: date | datetime, end: date | datetime) -> int:
    """Number of calendar dates in ``[start, end]``; zero when reversed."""
    span = (to_calendar_date(end) - to_calendar_date(start)).days + 1
    return max(span, 0)


def count_working_days(
    start: date | datetime,
    end: date | datetime,
    holidays: Iterable[date | datetime] = (),
) -> int:
    """Count Monday-Friday dates in ``[start, end]`` that are not holidays.

    Holidays are compared by calendar date and collapsed into a set, so the
    same date listed twice is excluded once. A reversed range counts zero.
    """
    first = to_calendar_date(start)
    last = to_calendar_date(end)
    holiday_dates = {to_calendar_date(h) for h in holidays}
    return sum(1 for day in iter_dates(first, last) if is_working_day(day, holiday_dates))


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Closed intervals overlap when they share at least one calendar date."""
    return a_start <= b_end and a_end >= b_start


def has_overlap(
    start: date | datetime,
    end: date | datetime,
    existing_ranges: Iterable[tuple[date | datetime, date | datetime]],
) -> bool:
    """True if ``[start, end]`` shares a date with any existing range."""
    first = to_calendar_date(start)
    last = to_calendar_date(end)
    return any(
        ranges_overlap(first, last, to_calendar_date(other_start), to_calendar_date(other_end))
        for other_start, other_end in existing_ranges
    )


def find_overlap(start: date, end: date, records: Iterable[_RecordT]) -> _RecordT | None:
    """Return the first record whose dates intersect ``[start, end]``."""
    for record in records:
        if ranges_overlap(start, end, record.start_date, record.end_date):
            return record
    return None


def duration_label(total_days: int) -> str:
    """Human-readable duration, counting five working days as a week."""
    if total_days == 1:
        return "1 day"
    if total_days < 7:
        return f"{total_days} days"
    weeks, days = divmod(total_days, _WORKING_WEEK)
    week_part = f"{weeks} week{'s' if weeks > 1 else ''}"
    if days == 0:
        return week_part
    return f"{week_part} {days} day{'s' if days > 1 else ''}"
