"""Driver leave days and the availability derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from .calendar_math import day_bounds, same_day
from .models import AvailabilityStatus, Booking, Driver, LeaveRecord, as_day

LEAVE_CLIENT_TEXT = "OFF / ON LEAVE"


class AvailabilityLedger:
    """Set of (driver, calendar day) leave records.

    The ledger is the only authority on leave state. It is mutated solely via
    :meth:`toggle_leave`; callers toggling from several threads must
    serialise access themselves.
    """

    def __init__(self, records: Iterable[LeaveRecord] = ()) -> None:
        self._leave: set[tuple[str, date]] = {
            (record.driver_id, record.day) for record in records
        }

    def is_on_leave(self, driver_id: str, day: date | datetime) -> bool:
        return (driver_id, as_day(day)) in self._leave

    def toggle_leave(self, driver_id: str, day: date | datetime) -> bool:
        """Flip the driver's leave state for ``day`` and return the new state."""

        key = (driver_id, as_day(day))
        if key in self._leave:
            self._leave.remove(key)
            return False
        self._leave.add(key)
        return True

    def leave_days(
        self,
        driver_id: str,
        within: Optional[Tuple[date, date]] = None,
    ) -> Tuple[date, ...]:
        days = sorted(day for owner, day in self._leave if owner == driver_id)
        if within is not None:
            first, last = within
            days = [day for day in days if first <= day <= last]
        return tuple(days)

    def snapshot(self) -> Tuple[LeaveRecord, ...]:
        return tuple(
            LeaveRecord(driver_id=driver_id, day=day)
            for driver_id, day in sorted(self._leave)
        )

    def __len__(self) -> int:
        return len(self._leave)

    def __contains__(self, record: object) -> bool:
        if not isinstance(record, LeaveRecord):
            return False
        return (record.driver_id, record.day) in self._leave


def availability_status(
    driver_id: str,
    day: date | datetime,
    ledger: AvailabilityLedger,
    bookings: Iterable[Booking] = (),
) -> AvailabilityStatus:
    if ledger.is_on_leave(driver_id, day):
        return AvailabilityStatus.ON_LEAVE
    if any(
        booking.driver_id == driver_id and same_day(booking.start_time, day)
        for booking in bookings
    ):
        return AvailabilityStatus.BUSY
    return AvailabilityStatus.AVAILABLE


@dataclass(frozen=True)
class LeaveEntry:
    """All-day pseudo entry shown on the calendar for a leave day."""

    entry_id: str
    driver_id: str
    title: str
    client_name: str
    start_time: datetime
    end_time: datetime


def leave_overlay(
    ledger: AvailabilityLedger,
    drivers: Sequence[Driver] | Mapping[str, Driver],
) -> list[LeaveEntry]:
    if isinstance(drivers, Mapping):
        names = {driver_id: driver.name for driver_id, driver in drivers.items()}
    else:
        names = {driver.driver_id: driver.name for driver in drivers}

    entries: list[LeaveEntry] = []
    for record in ledger.snapshot():
        start, end = day_bounds(record.day)
        entries.append(
            LeaveEntry(
                entry_id=f"leave-{record.driver_id}-{record.day.isoformat()}",
                driver_id=record.driver_id,
                title=names.get(record.driver_id) or "Driver",
                client_name=LEAVE_CLIENT_TEXT,
                start_time=start,
                end_time=end,
            )
        )
    return entries


__all__ = [
    "AvailabilityLedger",
    "LEAVE_CLIENT_TEXT",
    "LeaveEntry",
    "availability_status",
    "leave_overlay",
]
