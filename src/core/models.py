"""Typed records for bookings, drivers and leave days.

Everything here is immutable: the scheduling engine derives values from these
records but never changes them. External feeds hand over plain mappings, so
each record offers a ``from_mapping`` constructor that accepts either the
camelCase keys used by the dispatch front-end or snake_case keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Mapping, Optional

DEFAULT_DURATION = timedelta(minutes=60)


class InvalidBookingError(ValueError):
    """Raised when a booking is missing required data or is self-contradictory."""


_FILLER_WORDS = frozenset({"the"})


def _normalise_token(value: str) -> str:
    words = re.findall(r"[a-z0-9]+", value.lower())
    return "".join(word for word in words if word not in _FILLER_WORDS)


class PaymentMethod(str, Enum):
    """How the client settles the booking."""

    PREPAID = "Prepaid"
    CASH = "Cash"
    DEPOSIT_BALANCE = "Deposit + Balance"
    PAY_TO_DRIVER = "Pay to the driver"
    DEPOSIT_BALANCE_TO_DRIVER = "Paid deposit + balance to the driver"
    FUTURE_INVOICE = "Future Invoice"

    @classmethod
    def parse(cls, value: Any) -> Optional["PaymentMethod"]:
        """Resolve free text to a method, ignoring case, spacing and punctuation.

        Filler words are dropped too, so "Pay-to-driver" matches
        "Pay to the driver". Blank or unrecognised text yields ``None``.
        """

        if value is None:
            return None
        if isinstance(value, cls):
            return value
        token = _normalise_token(str(value))
        if not token:
            return None
        for member in cls:
            if token in (_normalise_token(member.value), _normalise_token(member.name)):
                return member
        return None


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ServiceType(str, Enum):
    AIRPORT_TRANSFER = "AIRPORT_TRANSFER"
    CITY_TOUR = "CITY_TOUR"
    HOTEL_TRANSFER = "HOTEL_TRANSFER"
    WINE_TOUR = "WINE_TOUR"
    CUSTOM = "CUSTOM"


class DriverRole(str, Enum):
    ADMIN = "ADMIN"
    DRIVER = "DRIVER"
    PARTNER = "PARTNER"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "Available"
    BUSY = "Busy"
    ON_LEAVE = "On Leave"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware timestamp to naive local wall-clock time.

    Naive values are assumed to be local already and are returned unchanged.
    """

    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Return a local ``datetime`` for ISO strings or datetimes; ``None`` when absent.

    Offset or ``Z`` timestamps are converted to local wall-clock time.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_naive(datetime.fromisoformat(text))


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _optional_enum(enum_cls, value: Any):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    return enum_cls(str(value).strip().upper())


@dataclass(frozen=True)
class Booking:
    """A single scheduled transportation job."""

    booking_id: str
    title: str
    start_time: datetime
    end_time: Optional[datetime] = None
    driver_id: Optional[str] = None
    supplier_id: Optional[str] = None
    client_name: str = ""
    pickup_address: str = ""
    stop_address: Optional[str] = None
    dropoff_address: str = ""
    notes: Optional[str] = None
    color: Optional[str] = None
    passengers_adults: Optional[int] = None
    passengers_kids: Optional[int] = None
    number_of_passengers: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    client_price: Optional[float] = None
    deposit: Optional[float] = None
    client_payment_status: Optional[PaymentStatus] = None
    status: BookingStatus = BookingStatus.PENDING
    service_type: ServiceType = ServiceType.CUSTOM

    def __post_init__(self) -> None:
        if not isinstance(self.start_time, datetime):
            raise InvalidBookingError(f"Booking {self.booking_id!r} has no start time.")
        if self.end_time is not None and self.end_time < self.start_time:
            raise InvalidBookingError(
                f"Booking {self.booking_id!r} ends before it starts."
            )
        for field_name in ("client_price", "deposit"):
            amount = getattr(self, field_name)
            if amount is not None and amount < 0:
                raise InvalidBookingError(
                    f"Booking {self.booking_id!r} has a negative {field_name}."
                )

    @property
    def effective_end(self) -> datetime:
        return self.end_time if self.end_time is not None else self.start_time + DEFAULT_DURATION

    @property
    def duration_minutes(self) -> float:
        return (self.effective_end - self.start_time).total_seconds() / 60.0

    @property
    def adults(self) -> int:
        if self.passengers_adults:
            return self.passengers_adults
        return self.number_of_passengers or 1

    @property
    def kids(self) -> int:
        return self.passengers_kids or 0

    @property
    def is_unassigned(self) -> bool:
        return not self.driver_id and not self.supplier_id

    @property
    def price(self) -> float:
        return self.client_price or 0.0

    @property
    def deposit_amount(self) -> float:
        return self.deposit or 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Booking":
        """Build a booking from a feed record (camelCase or snake_case keys)."""

        booking_id = str(_pick(data, "id", "booking_id", default=""))
        raw_start = _pick(data, "startTime", "start_time")
        try:
            start_time = parse_timestamp(raw_start)
            end_time = parse_timestamp(_pick(data, "endTime", "end_time"))
        except (TypeError, ValueError) as exc:
            raise InvalidBookingError(
                f"Booking {booking_id!r} has an unreadable timestamp: {exc}"
            ) from exc
        if start_time is None:
            raise InvalidBookingError(f"Booking {booking_id!r} has no start time.")

        try:
            status = _optional_enum(BookingStatus, _pick(data, "status")) or BookingStatus.PENDING
            service_type = (
                _optional_enum(ServiceType, _pick(data, "serviceType", "service_type"))
                or ServiceType.CUSTOM
            )
            payment_status = _optional_enum(
                PaymentStatus, _pick(data, "clientPaymentStatus", "client_payment_status")
            )
            client_price = _optional_float(_pick(data, "clientPrice", "client_price"))
            deposit = _optional_float(_pick(data, "deposit"))
            adults = _optional_int(_pick(data, "passengersAdults", "passengers_adults"))
            kids = _optional_int(_pick(data, "passengersKids", "passengers_kids"))
            legacy_count = _optional_int(
                _pick(data, "numberOfPassengers", "number_of_passengers")
            )
        except ValueError as exc:
            raise InvalidBookingError(f"Booking {booking_id!r}: {exc}") from exc

        return cls(
            booking_id=booking_id,
            title=str(_pick(data, "title", default="")),
            start_time=start_time,
            end_time=end_time,
            driver_id=_pick(data, "driverId", "driver_id"),
            supplier_id=_pick(data, "supplierId", "supplier_id"),
            client_name=str(_pick(data, "clientName", "client_name", default="")),
            pickup_address=str(_pick(data, "pickupAddress", "pickup_address", default="")),
            stop_address=_pick(data, "stopAddress", "stop_address") or None,
            dropoff_address=str(_pick(data, "dropoffAddress", "dropoff_address", default="")),
            notes=_pick(data, "notes") or None,
            color=_pick(data, "color"),
            passengers_adults=adults,
            passengers_kids=kids,
            number_of_passengers=legacy_count,
            payment_method=PaymentMethod.parse(_pick(data, "paymentMethod", "payment_method")),
            client_price=client_price,
            deposit=deposit,
            client_payment_status=payment_status,
            status=status,
            service_type=service_type,
        )


@dataclass(frozen=True)
class Driver:
    driver_id: str
    name: str
    role: DriverRole = DriverRole.DRIVER
    email: str = ""
    phone: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Driver":
        role = _optional_enum(DriverRole, _pick(data, "role")) or DriverRole.DRIVER
        return cls(
            driver_id=str(_pick(data, "id", "driver_id", default="")),
            name=str(_pick(data, "name", default="")),
            role=role,
            email=str(_pick(data, "email", default="")),
            phone=_pick(data, "phone"),
        )


def as_day(value: date | datetime) -> date:
    """Strip the time-of-day so two values compare by calendar day only."""

    if isinstance(value, datetime):
        return to_local_naive(value).date()
    return value


@dataclass(frozen=True)
class LeaveRecord:
    """A whole calendar day on which a driver is unavailable."""

    driver_id: str
    day: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "day", as_day(self.day))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LeaveRecord":
        raw_day = _pick(data, "date", "day")
        parsed = parse_timestamp(raw_day)
        if parsed is None:
            raise ValueError("Leave record has no date.")
        return cls(driver_id=str(_pick(data, "driverId", "driver_id", default="")), day=parsed)


def payment_method_label(booking: Booking) -> str:
    if booking.payment_method is None:
        return "-"
    return booking.payment_method.value


def passenger_summary(booking: Booking) -> str:
    return f"{booking.adults} adults, {booking.kids} kids"


__all__ = [
    "AvailabilityStatus",
    "Booking",
    "BookingStatus",
    "DEFAULT_DURATION",
    "Driver",
    "DriverRole",
    "InvalidBookingError",
    "LeaveRecord",
    "PaymentMethod",
    "PaymentStatus",
    "ServiceType",
    "as_day",
    "parse_timestamp",
    "passenger_summary",
    "payment_method_label",
    "to_local_naive",
]
