from datetime import date

from src.core.availability import AvailabilityLedger, leave_overlay
from src.core.filters import FilterCriteria, filter_calendar, filter_leave_overlay
from src.core.models import BookingStatus, LeaveRecord, ServiceType


def test_empty_filters_keep_everything(make_booking) -> None:
    bookings = [make_booking("a"), make_booking("b", driver_id=None)]

    assert FilterCriteria().is_empty
    assert filter_calendar(bookings) == bookings


def test_text_query_searches_addresses_too(make_booking) -> None:
    bookings = [
        make_booking("a", pickup_address="Harbour Hotel"),
        make_booking("b", dropoff_address="harbour pier"),
        make_booking("c"),
    ]

    assert [b.booking_id for b in filter_calendar(bookings, "HARBOUR")] == ["a", "b"]


def test_criteria_are_combined(make_booking) -> None:
    bookings = [
        make_booking("tour", service_type=ServiceType.CITY_TOUR, status=BookingStatus.CONFIRMED),
        make_booking("tour-pending", service_type=ServiceType.CITY_TOUR),
        make_booking("airport", service_type=ServiceType.AIRPORT_TRANSFER),
    ]
    criteria = FilterCriteria(
        service_types=frozenset({ServiceType.CITY_TOUR}),
        statuses=frozenset({BookingStatus.CONFIRMED}),
    )

    assert [b.booking_id for b in filter_calendar(bookings, criteria=criteria)] == ["tour"]


def test_unassigned_bookings_never_match_driver_filter(make_booking) -> None:
    bookings = [make_booking("mine"), make_booking("open", driver_id=None)]
    criteria = FilterCriteria(driver_ids=frozenset({"d1"}))

    assert [b.booking_id for b in filter_calendar(bookings, criteria=criteria)] == ["mine"]


def test_leave_overlay_honours_driver_filter_only(drivers) -> None:
    ledger = AvailabilityLedger(
        [LeaveRecord("d1", date(2026, 10, 20)), LeaveRecord("d2", date(2026, 10, 20))]
    )
    entries = leave_overlay(ledger, drivers)
    criteria = FilterCriteria(
        driver_ids=frozenset({"d2"}),
        service_types=frozenset({ServiceType.WINE_TOUR}),
    )

    visible = filter_leave_overlay(entries, criteria=criteria)

    assert [entry.driver_id for entry in visible] == ["d2"]
    assert [e.driver_id for e in filter_leave_overlay(entries, "sam")] == ["d1"]
    assert len(filter_leave_overlay(entries, "on leave")) == 2
