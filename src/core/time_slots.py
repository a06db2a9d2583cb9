"""Place bookings on the hour rows of a day or week grid."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Iterable, List, Tuple

from .calendar_math import CalendarUnit, same_day
from .models import Booking, to_local_naive

MIN_HEIGHT_PX = 24.0
DETAILS_THRESHOLD_PX = 45.0
DEFAULT_ROW_HEIGHT_PX = 50.0


@dataclass(frozen=True)
class SlotPosition:
    top: float
    height: float
    show_details: bool
    is_unassigned: bool


def row_height_for_zoom(zoom_level: int) -> float:
    """Zoom 1..5 maps to 40..80 px per hour row."""

    return float(30 + zoom_level * 10)


def project(
    booking: Booking,
    grid_start_hour: float = 0,
    row_height_px: float = DEFAULT_ROW_HEIGHT_PX,
) -> SlotPosition:
    """Vertical placement of ``booking`` inside a grid starting at ``grid_start_hour``.

    ``top`` is not clamped: a booking that starts before the first visible
    row gets a negative offset and the caller decides how to clip it. Short
    bookings are widened to ``MIN_HEIGHT_PX`` so they stay clickable.
    """

    start = to_local_naive(booking.start_time)
    start_in_hours = start.hour + start.minute / 60
    top = (start_in_hours - grid_start_hour) * row_height_px
    height = max((booking.duration_minutes / 60) * row_height_px, MIN_HEIGHT_PX)
    return SlotPosition(
        top=top,
        height=height,
        show_details=height > DETAILS_THRESHOLD_PX,
        is_unassigned=booking.is_unassigned,
    )


def slots_for_day(
    bookings: Iterable[Booking],
    day: date | datetime,
    grid_start_hour: float = 0,
    row_height_px: float = DEFAULT_ROW_HEIGHT_PX,
) -> List[Tuple[Booking, SlotPosition]]:
    on_day = sorted(
        (booking for booking in bookings if same_day(booking.start_time, day)),
        key=lambda booking: to_local_naive(booking.start_time),
    )
    return [(booking, project(booking, grid_start_hour, row_height_px)) for booking in on_day]


def move_booking(
    booking: Booking,
    target: datetime,
    unit: CalendarUnit | str = CalendarUnit.DAY,
) -> Booking:
    """Return a copy of ``booking`` starting at ``target`` with its duration kept.

    Month cells only carry a date, so a midnight target dropped in month view
    keeps the booking's original time-of-day.
    """

    new_start = target
    if CalendarUnit(unit) is CalendarUnit.MONTH and target.time() == time.min:
        new_start = datetime.combine(
            target.date(), booking.start_time.timetz().replace(second=0, microsecond=0)
        )
    new_end = None
    if booking.end_time is not None:
        new_end = new_start + (booking.end_time - booking.start_time)
    return replace(booking, start_time=new_start, end_time=new_end)


__all__ = [
    "DEFAULT_ROW_HEIGHT_PX",
    "DETAILS_THRESHOLD_PX",
    "MIN_HEIGHT_PX",
    "SlotPosition",
    "move_booking",
    "project",
    "row_height_for_zoom",
    "slots_for_day",
]
