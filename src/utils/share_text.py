"""Plain-text driver manifest for messaging apps."""

from __future__ import annotations

from datetime import date, datetime
from typing import Sequence

from ..core.calendar_math import format_time
from ..core.collection import collection_line
from ..core.manifest import ManifestEntry
from ..core.models import Driver, passenger_summary

DIVIDER = "=" * 40
JOB_SEPARATOR = "-" * 40


def build_manifest_text(
    driver: Driver,
    day: date | datetime,
    entries: Sequence[ManifestEntry],
    *,
    time_format: str = "12h",
    currency: str = "$",
) -> str:
    day_text = f"{day.strftime('%A')}, {day.strftime('%B')} {day.day}, {day.year}"
    lines = [
        "DRIVER MANIFEST",
        f"Driver: {driver.name.upper()}",
        f"Date:   {day_text.upper()}",
        f"Jobs:   {len(entries)}",
        DIVIDER,
    ]

    if not entries:
        lines.append("NO JOBS SCHEDULED")
    for entry in entries:
        booking = entry.booking
        start = format_time(booking.start_time, time_format)
        end = format_time(booking.end_time, time_format) if booking.end_time else "TBD"
        lines.append("")
        lines.append(f"Job #{entry.job_number}  |  {start} - {end}")
        lines.append(f"Service: {booking.title.upper()}")
        lines.append(f"Pickup:  {booking.pickup_address}")
        if booking.stop_address:
            lines.append(f"Stop:  {booking.stop_address}")
        lines.append(f"Dropoff: {booking.dropoff_address}")
        lines.append(f"Client:  {booking.client_name} (Pax: {passenger_summary(booking)})")
        if booking.notes:
            lines.append(f"Note:    {' '.join(booking.notes.split())}")
        if entry.collection is not None:
            lines.append(f"*** {collection_line(entry.collection, currency)} ***")
        lines.append(JOB_SEPARATOR)

    lines.append("END")
    return "\n".join(lines)


__all__ = ["build_manifest_text"]
