from datetime import date, datetime

import pytest

from src.core.calendar_math import (
    CalendarUnit,
    advance,
    day_bounds,
    format_time,
    header_label,
    hour_rows,
    is_today,
    month_grid,
    month_weeks,
    same_day,
    today,
    week_grid,
)


def test_month_grid_covers_whole_sunday_first_weeks() -> None:
    cells = month_grid(date(2026, 10, 19))

    assert len(cells) % 7 == 0
    assert cells[0].day == date(2026, 9, 27)
    assert cells[0].day.weekday() == 6
    assert cells[-1].day == date(2026, 10, 31)
    assert not cells[0].in_month
    assert [cell.day for cell in cells if cell.in_month][0] == date(2026, 10, 1)
    assert sum(cell.in_month for cell in cells) == 31


@pytest.mark.parametrize(
    "reference",
    [
        date(2026, 2, 1),
        date(2026, 8, 1),
        date(2026, 11, 30),
        date(2024, 2, 29),
        date(2026, 12, 31),
        date(2027, 1, 1),
        date(2026, 10, 19),
    ],
)
def test_month_grid_contains_reference_once_in_month(reference) -> None:
    cells = month_grid(reference)

    assert len(cells) % 7 == 0
    assert sum(cell.day == reference and cell.in_month for cell in cells) == 1
    assert sum(cell.day == reference for cell in cells) == 1
    assert cells[0].day.weekday() == 6
    assert cells[-1].day.weekday() == 5


def test_month_weeks_chunks_into_rows_of_seven() -> None:
    weeks = month_weeks(date(2026, 11, 5))

    assert all(len(week) == 7 for week in weeks)
    assert weeks[0][0].day == date(2026, 11, 1)
    assert weeks[-1][-1].day == date(2026, 12, 5)


def test_week_grid_starts_on_sunday() -> None:
    days = week_grid(datetime(2026, 10, 19, 14, 0))

    assert days[0] == date(2026, 10, 18)
    assert days[-1] == date(2026, 10, 24)


@pytest.mark.parametrize(
    ("current", "unit", "direction", "expected"),
    [
        (date(2026, 10, 19), CalendarUnit.DAY, 1, date(2026, 10, 20)),
        (date(2026, 10, 19), "week", -1, date(2026, 10, 12)),
        (date(2026, 1, 31), CalendarUnit.MONTH, 1, date(2026, 2, 28)),
        (date(2026, 12, 15), CalendarUnit.MONTH, 1, date(2027, 1, 15)),
        (date(2026, 3, 31), CalendarUnit.MONTH, -1, date(2026, 2, 28)),
    ],
)
def test_advance_steps_by_unit(current, unit, direction, expected) -> None:
    assert advance(current, unit, direction) == expected


def test_advance_preserves_time_of_day() -> None:
    moved = advance(datetime(2026, 10, 19, 9, 45), CalendarUnit.WEEK, 1)

    assert moved == datetime(2026, 10, 26, 9, 45)


def test_month_round_trip_returns_to_same_month() -> None:
    start = date(2026, 1, 31)

    back = advance(advance(start, CalendarUnit.MONTH, 1), CalendarUnit.MONTH, -1)

    assert (back.year, back.month) == (2026, 1)


def test_advance_rejects_unknown_unit_and_direction() -> None:
    with pytest.raises(ValueError):
        advance(date(2026, 10, 19), "year", 1)
    with pytest.raises(ValueError):
        advance(date(2026, 10, 19), CalendarUnit.DAY, 2)


@pytest.mark.parametrize(
    ("current", "unit", "expected"),
    [
        (date(2026, 10, 19), CalendarUnit.MONTH, "October 2026"),
        (date(2026, 10, 19), CalendarUnit.WEEK, "Oct 18 - 24, 2026"),
        (date(2026, 9, 30), CalendarUnit.WEEK, "Sep 27 - Oct 3, 2026"),
        (date(2026, 12, 31), CalendarUnit.WEEK, "Dec 27, 2026 - Jan 2, 2027"),
        (date(2026, 10, 19), CalendarUnit.DAY, "Monday, October 19, 2026"),
    ],
)
def test_header_label(current, unit, expected) -> None:
    assert header_label(current, unit) == expected


def test_today_uses_injected_clock(fixed_clock) -> None:
    assert today(fixed_clock) == date(2026, 10, 19)
    assert is_today(datetime(2026, 10, 19, 23, 59), fixed_clock)
    assert not is_today(date(2026, 10, 20), fixed_clock)


def test_same_day_ignores_time() -> None:
    assert same_day(datetime(2026, 10, 19, 0, 0), datetime(2026, 10, 19, 23, 59))
    assert not same_day(datetime(2026, 10, 19, 23, 59), date(2026, 10, 20))


def test_day_bounds_are_inclusive() -> None:
    start, end = day_bounds(date(2026, 10, 19))

    assert start == datetime(2026, 10, 19, 0, 0)
    assert end.date() == date(2026, 10, 19)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_hour_rows_and_time_formats() -> None:
    assert hour_rows(6, 9) == [6, 7, 8]
    assert len(hour_rows()) == 24

    morning = datetime(2026, 10, 19, 9, 5)
    assert format_time(morning) == "9:05am"
    assert format_time(morning, "24h") == "09:05"
    assert format_time(datetime(2026, 10, 19, 0, 30)) == "12:30am"
    assert format_time(datetime(2026, 10, 19, 12, 0)) == "12:00pm"
    with pytest.raises(ValueError):
        format_time(morning, "iso")
