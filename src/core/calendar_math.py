"""Month/week/day grid arithmetic for the dispatch calendar.

Weeks start on Sunday. Every function here is a pure function of its inputs;
the current date is obtained through an injected clock so callers (and tests)
control what "today" means.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable, List, TypeVar

from .models import as_day, to_local_naive

DateLike = TypeVar("DateLike", date, datetime)
Clock = Callable[[], datetime]


class CalendarUnit(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


@dataclass(frozen=True)
class DayCell:
    day: date
    in_month: bool


def _start_of_week(day: date) -> date:
    # date.weekday() is Monday=0; shift so Sunday=0.
    offset = (day.weekday() + 1) % 7
    return day - timedelta(days=offset)


def month_grid(reference: date | datetime) -> List[DayCell]:
    """Return complete Sunday-first weeks covering ``reference``'s month."""

    anchor = as_day(reference)
    first = anchor.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    start = _start_of_week(first)
    end = _start_of_week(last) + timedelta(days=6)

    cells: List[DayCell] = []
    current = start
    while current <= end:
        cells.append(DayCell(day=current, in_month=current.month == anchor.month))
        current += timedelta(days=1)
    return cells


def month_weeks(reference: date | datetime) -> List[List[DayCell]]:
    cells = month_grid(reference)
    return [cells[index : index + 7] for index in range(0, len(cells), 7)]


def week_grid(reference: date | datetime) -> List[date]:
    start = _start_of_week(as_day(reference))
    return [start + timedelta(days=offset) for offset in range(7)]


def _coerce_unit(unit: CalendarUnit | str) -> CalendarUnit:
    try:
        return CalendarUnit(unit)
    except ValueError as exc:
        raise ValueError(f"Unknown calendar unit: {unit!r}") from exc


def _shift_months(value: DateLike, months: int) -> DateLike:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def advance(current: DateLike, unit: CalendarUnit | str, direction: int) -> DateLike:
    """Shift ``current`` one ``unit`` forwards (+1) or backwards (-1).

    Month steps clamp the day-of-month to the length of the target month, so
    Jan 31 moves to the last day of February rather than spilling into March.
    """

    if direction not in (1, -1):
        raise ValueError("direction must be +1 or -1")
    resolved = _coerce_unit(unit)
    if resolved is CalendarUnit.MONTH:
        return _shift_months(current, direction)
    if resolved is CalendarUnit.WEEK:
        return current + timedelta(days=7 * direction)
    return current + timedelta(days=direction)


def header_label(current: date | datetime, unit: CalendarUnit | str) -> str:
    resolved = _coerce_unit(unit)
    day = as_day(current)
    if resolved is CalendarUnit.MONTH:
        return f"{day.strftime('%B')} {day.year}"
    if resolved is CalendarUnit.WEEK:
        days = week_grid(day)
        start, end = days[0], days[-1]
        if start.year != end.year:
            return (
                f"{start.strftime('%b')} {start.day}, {start.year} - "
                f"{end.strftime('%b')} {end.day}, {end.year}"
            )
        if start.month == end.month:
            return f"{start.strftime('%b')} {start.day} - {end.day}, {start.year}"
        return f"{start.strftime('%b')} {start.day} - {end.strftime('%b')} {end.day}, {end.year}"
    return f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"


def today(clock: Clock = datetime.now) -> date:
    return clock().date()


def same_day(first: date | datetime, second: date | datetime) -> bool:
    return as_day(first) == as_day(second)


def is_today(value: date | datetime, clock: Clock = datetime.now) -> bool:
    return same_day(value, today(clock))


def day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """First and last representable instant of ``day`` (inclusive)."""

    anchor = as_day(day)
    return datetime.combine(anchor, time.min), datetime.combine(anchor, time.max)


def hour_rows(start_hour: int = 0, end_hour: int = 24) -> List[int]:
    return list(range(start_hour, end_hour))


def format_time(value: datetime, fmt: str = "12h") -> str:
    """Compact clock text: ``9:05am`` for 12h, ``09:05`` for 24h."""

    value = to_local_naive(value)
    if fmt == "24h":
        return f"{value.hour:02d}:{value.minute:02d}"
    if fmt != "12h":
        raise ValueError(f"Unknown time format: {fmt!r}")
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d}{suffix}"


__all__ = [
    "CalendarUnit",
    "DayCell",
    "advance",
    "day_bounds",
    "format_time",
    "header_label",
    "hour_rows",
    "is_today",
    "month_grid",
    "month_weeks",
    "same_day",
    "today",
    "week_grid",
]
