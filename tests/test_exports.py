import csv
from datetime import date, datetime
from pathlib import Path

import pytest

from src.core.manifest import annotate_manifest, driver_report
from src.core.models import PaymentMethod, PaymentStatus
from src.utils.csv_export import HEADERS, export_driver_report_csv
from src.utils.share_text import DIVIDER, build_manifest_text

MANIFEST_DAY = date(2026, 10, 19)


@pytest.fixture
def entries(make_booking):
    return annotate_manifest(
        [
            make_booking(
                "b1",
                title="Airport run",
                payment_method=PaymentMethod.DEPOSIT_BALANCE,
                client_price=400.0,
                deposit=250.0,
                stop_address="Hotel Lobby",
                notes="Flight UA 12\nmeet at arrivals",
                passengers_adults=2,
                passengers_kids=1,
            ),
            make_booking(
                "b2",
                title="City tour",
                start_time=datetime(2026, 10, 19, 13, 30),
                end_time=None,
                payment_method=PaymentMethod.PREPAID,
                client_price=90.0,
                client_payment_status=PaymentStatus.PAID,
            ),
        ]
    )


def test_manifest_text_layout(drivers, entries) -> None:
    text = build_manifest_text(drivers[0], MANIFEST_DAY, entries)
    lines = text.splitlines()

    assert lines[:5] == [
        "DRIVER MANIFEST",
        "Driver: SAM PORTER",
        "Date:   MONDAY, OCTOBER 19, 2026",
        "Jobs:   2",
        DIVIDER,
    ]
    assert "Job #1  |  9:00am - 10:00am" in lines
    assert "Service: AIRPORT RUN" in lines
    assert "Stop:  Hotel Lobby" in lines
    assert "Client:  Ada Client (Pax: 2 adults, 1 kids)" in lines
    assert "Note:    Flight UA 12 meet at arrivals" in lines
    assert "*** COLLECT $150.00 (BALANCE DUE) ***" in lines
    assert "Job #2  |  1:30pm - TBD" in lines
    assert text.count("COLLECT") == 1
    assert lines[-1] == "END"


def test_manifest_text_for_empty_day(drivers) -> None:
    text = build_manifest_text(drivers[1], MANIFEST_DAY, [], time_format="24h")

    assert "Jobs:   0" in text
    assert "NO JOBS SCHEDULED" in text
    assert text.endswith("END")


def test_manifest_text_uses_24h_and_currency(drivers, entries) -> None:
    text = build_manifest_text(drivers[0], MANIFEST_DAY, entries, time_format="24h", currency="€")

    assert "Job #1  |  09:00 - 10:00" in text
    assert "COLLECT €150.00" in text


def test_driver_report_csv(tmp_path: Path, drivers, make_booking) -> None:
    bookings = [
        make_booking(
            "b1",
            payment_method=PaymentMethod.CASH,
            client_price=1200.0,
            client_payment_status=PaymentStatus.UNPAID,
        ),
        make_booking("b2", title="City tour", client_price=80.0),
    ]
    report = driver_report("d1", bookings)

    path = export_driver_report_csv(tmp_path / "statement.txt", drivers[0], report)

    assert path.suffix == ".csv"
    with path.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == HEADERS
    assert rows[1][2] == "Airport run"
    assert rows[1][6] == "Cash"
    assert rows[1][8] == "1200.00"
    assert rows[1][9] == "COLLECT $1,200.00 (full collection)"
    assert rows[2][6] == "-"
    assert rows[2][9] == ""
    assert ["Driver", "Sam Porter"] in rows
    assert ["Total revenue", "$1,280.00"] in rows
    assert ["Outstanding", "$1,200.00"] in rows


def test_manifest_pdf_export(tmp_path: Path, drivers, entries) -> None:
    pytest.importorskip("reportlab")
    from src.utils.pdf_exporter import export_manifest_pdf

    path = export_manifest_pdf(
        tmp_path / "manifest",
        drivers[0],
        MANIFEST_DAY,
        entries,
        generated_at=datetime(2026, 10, 19, 7, 0),
    )

    assert path == tmp_path / "manifest.pdf"
    assert path.read_bytes().startswith(b"%PDF")


def test_manifest_pdf_export_for_empty_day(tmp_path: Path, drivers) -> None:
    pytest.importorskip("reportlab")
    from src.utils.pdf_exporter import export_manifest_pdf

    path = export_manifest_pdf(tmp_path / "empty.pdf", drivers[1], MANIFEST_DAY, [])

    assert path.exists()
    assert path.stat().st_size > 0
