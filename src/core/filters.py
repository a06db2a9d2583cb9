"""Search and criteria filters for the calendar views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .availability import LeaveEntry
from .models import Booking, BookingStatus, ServiceType


@dataclass(frozen=True)
class FilterCriteria:
    service_types: FrozenSet[ServiceType] = field(default_factory=frozenset)
    statuses: FrozenSet[BookingStatus] = field(default_factory=frozenset)
    driver_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not (self.service_types or self.statuses or self.driver_ids)


def _matches_text(query: str, *fields: Optional[str]) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in fields)


def _matches_driver(driver_id: Optional[str], criteria: FilterCriteria) -> bool:
    if not criteria.driver_ids:
        return True
    return bool(driver_id) and driver_id in criteria.driver_ids


def filter_calendar(
    bookings: Iterable[Booking],
    query: str = "",
    criteria: Optional[FilterCriteria] = None,
) -> List[Booking]:
    criteria = criteria or FilterCriteria()
    visible: List[Booking] = []
    for booking in bookings:
        if not _matches_text(
            query,
            booking.title,
            booking.client_name,
            booking.pickup_address,
            booking.dropoff_address,
        ):
            continue
        if criteria.service_types and booking.service_type not in criteria.service_types:
            continue
        if criteria.statuses and booking.status not in criteria.statuses:
            continue
        if not _matches_driver(booking.driver_id, criteria):
            continue
        visible.append(booking)
    return visible


def filter_leave_overlay(
    entries: Iterable[LeaveEntry],
    query: str = "",
    criteria: Optional[FilterCriteria] = None,
) -> List[LeaveEntry]:
    """Leave entries ignore type/status filters but honour the driver filter."""

    criteria = criteria or FilterCriteria()
    return [
        entry
        for entry in entries
        if _matches_text(query, entry.title, entry.client_name)
        and _matches_driver(entry.driver_id, criteria)
    ]


__all__ = ["FilterCriteria", "filter_calendar", "filter_leave_overlay"]
