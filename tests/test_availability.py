from datetime import date, datetime

from src.core.availability import (
    LEAVE_CLIENT_TEXT,
    AvailabilityLedger,
    availability_status,
    leave_overlay,
)
from src.core.models import AvailabilityStatus, LeaveRecord


def test_toggle_leave_is_an_involution() -> None:
    ledger = AvailabilityLedger()

    assert ledger.toggle_leave("d1", date(2026, 10, 20)) is True
    assert ledger.is_on_leave("d1", datetime(2026, 10, 20, 17, 45))
    assert ledger.toggle_leave("d1", datetime(2026, 10, 20, 8, 0)) is False
    assert not ledger.is_on_leave("d1", date(2026, 10, 20))
    assert len(ledger) == 0


def test_leave_is_per_driver_and_per_day() -> None:
    ledger = AvailabilityLedger([LeaveRecord("d1", date(2026, 10, 20))])

    assert not ledger.is_on_leave("d2", date(2026, 10, 20))
    assert not ledger.is_on_leave("d1", date(2026, 10, 21))
    assert LeaveRecord("d1", date(2026, 10, 20)) in ledger


def test_leave_days_sorted_and_windowed() -> None:
    ledger = AvailabilityLedger(
        [
            LeaveRecord("d1", date(2026, 11, 2)),
            LeaveRecord("d1", date(2026, 10, 20)),
            LeaveRecord("d2", date(2026, 10, 21)),
        ]
    )

    assert ledger.leave_days("d1") == (date(2026, 10, 20), date(2026, 11, 2))
    assert ledger.leave_days("d1", within=(date(2026, 10, 1), date(2026, 10, 31))) == (
        date(2026, 10, 20),
    )


def test_availability_status_precedence(make_booking) -> None:
    ledger = AvailabilityLedger([LeaveRecord("d1", date(2026, 10, 19))])
    bookings = [make_booking()]

    assert availability_status("d1", date(2026, 10, 19), ledger, bookings) is (
        AvailabilityStatus.ON_LEAVE
    )
    ledger.toggle_leave("d1", date(2026, 10, 19))
    assert availability_status("d1", date(2026, 10, 19), ledger, bookings) is (
        AvailabilityStatus.BUSY
    )
    assert availability_status("d1", date(2026, 10, 20), ledger, bookings) is (
        AvailabilityStatus.AVAILABLE
    )
    assert availability_status("d2", date(2026, 10, 19), ledger, bookings) is (
        AvailabilityStatus.AVAILABLE
    )


def test_leave_overlay_builds_all_day_entries(drivers) -> None:
    ledger = AvailabilityLedger(
        [LeaveRecord("d1", date(2026, 10, 20)), LeaveRecord("ghost", date(2026, 10, 22))]
    )

    entries = leave_overlay(ledger, drivers)

    assert [entry.entry_id for entry in entries] == [
        "leave-d1-2026-10-20",
        "leave-ghost-2026-10-22",
    ]
    first = entries[0]
    assert first.title == "Sam Porter"
    assert first.client_name == LEAVE_CLIENT_TEXT
    assert first.start_time == datetime(2026, 10, 20, 0, 0)
    assert first.end_time.date() == date(2026, 10, 20)
    assert first.end_time.hour == 23
    assert entries[1].title == "Driver"


def test_leave_overlay_accepts_driver_mapping(drivers) -> None:
    ledger = AvailabilityLedger([LeaveRecord("d2", date(2026, 10, 20))])

    entries = leave_overlay(ledger, {driver.driver_id: driver for driver in drivers})

    assert entries[0].title == "Lena Ruiz"
