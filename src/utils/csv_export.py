"""CSV statement of a driver's bookings."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from ..core.collection import collection_for, collection_line, format_amount
from ..core.manifest import DriverReport
from ..core.models import Driver, payment_method_label

logger = logging.getLogger(__name__)

HEADERS = [
    "Date",
    "Time",
    "Service",
    "Client",
    "Pickup",
    "Dropoff",
    "Payment method",
    "Payment status",
    "Revenue",
    "On-site collection",
]


def export_driver_report_csv(
    output_path: Path | str,
    driver: Driver,
    report: DriverReport,
    *,
    currency: str = "$",
) -> Path:
    path = Path(output_path)
    if path.suffix.lower() != ".csv":
        path = path.with_suffix(".csv")
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADERS)
        for booking in report.bookings:
            collection = collection_for(booking)
            status = booking.client_payment_status
            writer.writerow(
                [
                    booking.start_time.strftime("%Y-%m-%d"),
                    booking.start_time.strftime("%H:%M"),
                    booking.title,
                    booking.client_name,
                    booking.pickup_address,
                    booking.dropoff_address,
                    payment_method_label(booking),
                    status.value if status is not None else "",
                    f"{booking.price:.2f}",
                    collection_line(collection, currency) if collection else "",
                ]
            )
        writer.writerow([])
        writer.writerow(["Driver", driver.name])
        writer.writerow(["Bookings", report.summary.count])
        writer.writerow(["Total revenue", format_amount(report.summary.total_revenue, currency)])
        writer.writerow(
            ["Outstanding", format_amount(report.summary.total_outstanding, currency)]
        )

    logger.info("Driver statement for %s written to %s", driver.name, path)
    return path


__all__ = ["HEADERS", "export_driver_report_csv"]
