from datetime import datetime, timezone

import pytest

from src.core.calendar_math import CalendarUnit
from src.core.time_slots import (
    DETAILS_THRESHOLD_PX,
    MIN_HEIGHT_PX,
    move_booking,
    project,
    row_height_for_zoom,
    slots_for_day,
)


def test_project_places_booking_relative_to_grid_start(make_booking) -> None:
    booking = make_booking(
        start_time=datetime(2026, 10, 19, 9, 30),
        end_time=datetime(2026, 10, 19, 11, 0),
    )

    slot = project(booking, grid_start_hour=6, row_height_px=50)

    assert slot.top == pytest.approx(175.0)
    assert slot.height == pytest.approx(75.0)
    assert slot.show_details
    assert not slot.is_unassigned


def test_short_bookings_get_minimum_height(make_booking) -> None:
    booking = make_booking(end_time=datetime(2026, 10, 19, 9, 10))

    slot = project(booking)

    assert slot.height == MIN_HEIGHT_PX
    assert slot.height <= DETAILS_THRESHOLD_PX
    assert not slot.show_details


def test_missing_end_defaults_to_one_hour(make_booking) -> None:
    slot = project(make_booking(end_time=None), row_height_px=40)

    assert slot.height == pytest.approx(40.0)


def test_booking_before_grid_start_gets_negative_top(make_booking) -> None:
    slot = project(make_booking(driver_id=None), grid_start_hour=10)

    assert slot.top < 0
    assert slot.is_unassigned


def test_row_height_for_zoom() -> None:
    assert row_height_for_zoom(1) == 40.0
    assert row_height_for_zoom(5) == 80.0


def test_slots_for_day_filters_and_orders(make_booking) -> None:
    late = make_booking("late", start_time=datetime(2026, 10, 19, 15, 0), end_time=None)
    early = make_booking("early", start_time=datetime(2026, 10, 19, 7, 0), end_time=None)
    other_day = make_booking("other", start_time=datetime(2026, 10, 20, 7, 0), end_time=None)

    slots = slots_for_day([late, other_day, early], datetime(2026, 10, 19))

    assert [booking.booking_id for booking, _ in slots] == ["early", "late"]


def test_move_booking_keeps_duration(make_booking) -> None:
    booking = make_booking(end_time=datetime(2026, 10, 19, 10, 30))

    moved = move_booking(booking, datetime(2026, 10, 21, 14, 0))

    assert moved.start_time == datetime(2026, 10, 21, 14, 0)
    assert moved.end_time == datetime(2026, 10, 21, 15, 30)
    assert booking.start_time == datetime(2026, 10, 19, 9, 0)


def test_move_booking_in_month_view_keeps_time_of_day(make_booking) -> None:
    booking = make_booking(start_time=datetime(2026, 10, 19, 9, 15, 42), end_time=None)

    moved = move_booking(booking, datetime(2026, 10, 25), CalendarUnit.MONTH)

    assert moved.start_time == datetime(2026, 10, 25, 9, 15)
    assert moved.end_time is None


def test_move_booking_in_day_view_uses_target_time(make_booking) -> None:
    moved = move_booking(make_booking(), datetime(2026, 10, 25), CalendarUnit.DAY)

    assert moved.start_time == datetime(2026, 10, 25, 0, 0)
    assert moved.end_time == datetime(2026, 10, 25, 1, 0)


def test_project_reads_local_wall_clock_hour(make_booking) -> None:
    start = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)
    local = start.astimezone()

    slot = project(make_booking(start_time=start, end_time=None), row_height_px=60)

    assert slot.top == pytest.approx((local.hour + local.minute / 60) * 60)
