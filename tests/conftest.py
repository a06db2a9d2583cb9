import os
from datetime import datetime
from typing import Any, Callable, Dict

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from src.core.models import Booking, Driver  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: datetime(2026, 10, 19, 8, 30)


@pytest.fixture
def drivers() -> list[Driver]:
    return [
        Driver(driver_id="d1", name="Sam Porter", email="sam@example.com"),
        Driver(driver_id="d2", name="Lena Ruiz", email="lena@example.com"),
    ]


@pytest.fixture
def make_booking() -> Callable[..., Booking]:
    """Factory for a one-hour Monday morning booking assigned to ``d1``."""

    def _make(booking_id: str = "b1", **overrides: Any) -> Booking:
        fields: Dict[str, Any] = {
            "booking_id": booking_id,
            "title": "Airport run",
            "start_time": datetime(2026, 10, 19, 9, 0),
            "end_time": datetime(2026, 10, 19, 10, 0),
            "driver_id": "d1",
            "client_name": "Ada Client",
            "pickup_address": "1 Main St",
            "dropoff_address": "Terminal 2",
        }
        fields.update(overrides)
        return Booking(**fields)

    return _make
