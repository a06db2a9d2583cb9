"""Per-driver daily manifests and revenue summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from math import fsum
from typing import Iterable, List, Optional, Sequence

from .calendar_math import day_bounds
from .collection import CollectionResult, collection_for
from .models import Booking, PaymentStatus, to_local_naive

_OUTSTANDING_STATUSES = (PaymentStatus.UNPAID, PaymentStatus.PARTIAL)


@dataclass(frozen=True)
class ManifestEntry:
    job_number: int
    booking: Booking
    collection: Optional[CollectionResult]


@dataclass(frozen=True)
class DriverSummary:
    count: int
    total_revenue: float
    total_outstanding: float


@dataclass(frozen=True)
class DriverReport:
    summary: DriverSummary
    bookings: List[Booking]


def daily_manifest(
    driver_id: str,
    day: date | datetime,
    bookings: Iterable[Booking],
) -> List[Booking]:
    """The driver's bookings starting on ``day``, earliest first.

    ``sorted`` is stable, so bookings sharing a start time keep their input
    order.
    """

    start_of_day, end_of_day = day_bounds(day)
    selected = [
        booking
        for booking in bookings
        if booking.driver_id == driver_id
        and start_of_day <= to_local_naive(booking.start_time) <= end_of_day
    ]
    return sorted(selected, key=lambda booking: to_local_naive(booking.start_time))


def annotate_manifest(manifest: Sequence[Booking]) -> List[ManifestEntry]:
    return [
        ManifestEntry(job_number=index, booking=booking, collection=collection_for(booking))
        for index, booking in enumerate(manifest, start=1)
    ]


def collection_total(entries: Iterable[ManifestEntry]) -> float:
    return fsum(entry.collection.amount for entry in entries if entry.collection is not None)


def driver_summary(driver_id: str, bookings: Iterable[Booking]) -> DriverSummary:
    driver_bookings = [booking for booking in bookings if booking.driver_id == driver_id]
    return DriverSummary(
        count=len(driver_bookings),
        total_revenue=fsum(booking.price for booking in driver_bookings),
        total_outstanding=fsum(
            booking.price
            for booking in driver_bookings
            if booking.client_payment_status in _OUTSTANDING_STATUSES
        ),
    )


def search_bookings(bookings: Iterable[Booking], query: str) -> List[Booking]:
    needle = query.strip().lower()
    if not needle:
        return list(bookings)
    return [
        booking
        for booking in bookings
        if needle in booking.title.lower() or needle in booking.client_name.lower()
    ]


def driver_report(
    driver_id: str,
    bookings: Sequence[Booking],
    query: str = "",
) -> DriverReport:
    """Summary over the full driver history plus the search-filtered listing."""

    driver_bookings = [booking for booking in bookings if booking.driver_id == driver_id]
    return DriverReport(
        summary=driver_summary(driver_id, driver_bookings),
        bookings=search_bookings(driver_bookings, query),
    )


__all__ = [
    "DriverReport",
    "DriverSummary",
    "ManifestEntry",
    "annotate_manifest",
    "collection_total",
    "daily_manifest",
    "driver_report",
    "driver_summary",
    "search_bookings",
]
