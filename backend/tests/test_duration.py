"""Tests for working-day counting and date-range overlap."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta

import pytest

from leavedesk.models.leave import LeaveRecord
from leavedesk.services.duration import (
    calendar_days,
    count_working_days,
    duration_label,
    find_overlap,
    has_overlap,
    ranges_overlap,
)

# ---------------------------------------------------------------------------
# count_working_days
# ---------------------------------------------------------------------------


def test_weekend_and_holiday_excluded() -> None:
    """Fri 24 Jan .. Mon 27 Jan 2025 with a Sunday holiday: Fri and Mon remain."""
    holidays = {date(2025, 1, 26)}
    assert count_working_days(date(2025, 1, 24), date(2025, 1, 27), holidays) == 2


def test_holiday_on_friday_leaves_only_monday() -> None:
    holidays = {date(2025, 1, 24), date(2025, 1, 26)}
    assert count_working_days(date(2025, 1, 24), date(2025, 1, 27), holidays) == 1


def test_saturday_to_monday_with_sunday_holiday() -> None:
    assert count_working_days(date(2025, 1, 25), date(2025, 1, 27), {date(2025, 1, 26)}) == 1


def test_full_week() -> None:
    # Mon 6 Jan .. Sun 12 Jan 2025.
    assert count_working_days(date(2025, 1, 6), date(2025, 1, 12)) == 5


def test_single_working_day() -> None:
    assert count_working_days(date(2025, 1, 6), date(2025, 1, 6)) == 1


def test_single_weekend_day() -> None:
    assert count_working_days(date(2025, 1, 11), date(2025, 1, 11)) == 0


def test_single_holiday() -> None:
    assert count_working_days(date(2025, 1, 6), date(2025, 1, 6), [date(2025, 1, 6)]) == 0


def test_reversed_range_counts_zero() -> None:
    assert count_working_days(date(2025, 1, 10), date(2025, 1, 6)) == 0


def test_duplicate_holidays_excluded_once() -> None:
    holidays = [date(2025, 1, 7), date(2025, 1, 7), datetime(2025, 1, 7, 15, 30)]
    assert count_working_days(date(2025, 1, 6), date(2025, 1, 10), holidays) == 4


def test_datetimes_compared_by_calendar_date() -> None:
    start = datetime(2025, 1, 6, 18, 45)
    end = datetime(2025, 1, 7, 6, 0)
    assert count_working_days(start, end, [datetime(2025, 1, 7, 0, 0)]) == 1


@pytest.mark.parametrize(
    ("start", "end", "holidays"),
    [
        (date(2025, 1, 1), date(2025, 1, 31), set()),
        (date(2025, 2, 3), date(2025, 2, 7), {date(2025, 2, 5)}),
        (date(2025, 3, 1), date(2025, 3, 2), set()),
        (date(2025, 12, 22), date(2025, 12, 31), {date(2025, 12, 25), date(2025, 12, 26)}),
    ],
)
def test_working_days_never_exceed_calendar_days(start: date, end: date, holidays: set[date]) -> None:
    assert count_working_days(start, end, holidays) <= calendar_days(start, end)


def test_equal_to_calendar_days_only_without_weekend_or_holiday() -> None:
    start, end = date(2025, 1, 6), date(2025, 1, 10)
    assert count_working_days(start, end) == calendar_days(start, end)
    assert count_working_days(start, end, {date(2025, 1, 8)}) < calendar_days(start, end)
    assert count_working_days(start, end + timedelta(days=1)) < calendar_days(start, end + timedelta(days=1))


def test_calendar_days() -> None:
    assert calendar_days(date(2025, 1, 24), date(2025, 1, 27)) == 4
    assert calendar_days(date(2025, 1, 27), date(2025, 1, 24)) == 0


# ---------------------------------------------------------------------------
# Overlap
# ---------------------------------------------------------------------------


def test_shared_boundary_day_overlaps() -> None:
    existing = [(date(2025, 3, 1), date(2025, 3, 5))]
    assert has_overlap(date(2025, 3, 5), date(2025, 3, 7), existing) is True


def test_adjacent_ranges_do_not_overlap() -> None:
    existing = [(date(2025, 3, 1), date(2025, 3, 5))]
    assert has_overlap(date(2025, 3, 6), date(2025, 3, 7), existing) is False


def test_contained_range_overlaps() -> None:
    existing = [(date(2025, 3, 1), date(2025, 3, 31))]
    assert has_overlap(date(2025, 3, 10), date(2025, 3, 11), existing) is True


def test_no_existing_ranges() -> None:
    assert has_overlap(date(2025, 3, 10), date(2025, 3, 11), []) is False


@pytest.mark.parametrize(
    ("a", "x"),
    [
        ((date(2025, 3, 1), date(2025, 3, 5)), (date(2025, 3, 5), date(2025, 3, 7))),
        ((date(2025, 3, 1), date(2025, 3, 5)), (date(2025, 3, 6), date(2025, 3, 7))),
        ((date(2025, 3, 1), date(2025, 3, 31)), (date(2025, 3, 10), date(2025, 3, 10))),
        ((date(2025, 4, 1), date(2025, 4, 1)), (date(2025, 3, 1), date(2025, 3, 31))),
    ],
)
def test_overlap_is_symmetric(a: tuple[date, date], x: tuple[date, date]) -> None:
    assert has_overlap(a[0], a[1], [x]) == has_overlap(x[0], x[1], [a])
    assert ranges_overlap(*a, *x) == ranges_overlap(*x, *a)


def test_find_overlap_returns_first_conflict() -> None:
    early = LeaveRecord(
        employee_id=uuid.uuid4(),
        leave_type="annual",
        start_date=date(2025, 3, 1),
        end_date=date(2025, 3, 3),
        total_days=1,
    )
    late = LeaveRecord(
        employee_id=early.employee_id,
        leave_type="sick",
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 12),
        total_days=3,
    )
    assert find_overlap(date(2025, 3, 11), date(2025, 3, 20), [early, late]) is late
    assert find_overlap(date(2025, 3, 4), date(2025, 3, 9), [early, late]) is None


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("days", "label"),
    [
        (1, "1 day"),
        (3, "3 days"),
        (10, "2 weeks"),
        (7, "1 week 2 days"),
        (11, "2 weeks 1 day"),
    ],
)
def test_duration_label(days: int, label: str) -> None:
    assert duration_label(days) == label
