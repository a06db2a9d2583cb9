"""Read the JSON dispatch feed exported by the booking back office.

The feed is a single object with ``drivers``, ``bookings`` and ``leaves``
arrays. It is input only: nothing is ever written back to it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Mapping, TypeVar

from ..core.models import Booking, Driver, LeaveRecord, PaymentMethod

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DispatchFeedError(RuntimeError):
    """Raised when the dispatch feed cannot be read or contains invalid records."""


@dataclass
class DispatchFeed:
    drivers: List[Driver] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)
    leaves: List[LeaveRecord] = field(default_factory=list)

    def driver_lookup(self) -> dict[str, Driver]:
        return {driver.driver_id: driver for driver in self.drivers}


def _parse_section(
    payload: Mapping[str, Any],
    key: str,
    factory: Callable[[Mapping[str, Any]], T],
) -> List[T]:
    raw_items = payload.get(key) or []
    if not isinstance(raw_items, list):
        raise DispatchFeedError(f"Feed section '{key}' must be a list.")
    parsed: List[T] = []
    for index, item in enumerate(raw_items):
        if not isinstance(item, Mapping):
            raise DispatchFeedError(f"{key}[{index}] is not an object.")
        try:
            parsed.append(factory(item))
        except (TypeError, ValueError) as exc:
            raise DispatchFeedError(f"{key}[{index}] is invalid: {exc}") from exc
    return parsed


def parse_dispatch_feed(payload: Mapping[str, Any]) -> DispatchFeed:
    if not isinstance(payload, Mapping):
        raise DispatchFeedError("Dispatch feed must be a JSON object.")

    feed = DispatchFeed(
        drivers=_parse_section(payload, "drivers", Driver.from_mapping),
        bookings=_parse_section(payload, "bookings", Booking.from_mapping),
        leaves=_parse_section(payload, "leaves", LeaveRecord.from_mapping),
    )

    for raw in payload.get("bookings") or []:
        method = raw.get("paymentMethod", raw.get("payment_method"))
        if method and PaymentMethod.parse(method) is None:
            logger.warning(
                "Booking %s uses unknown payment method %r; treating it as unset.",
                raw.get("id", raw.get("booking_id", "?")),
                method,
            )
    return feed


def load_dispatch_feed(path: Path | str) -> DispatchFeed:
    feed_path = Path(path)
    try:
        payload = json.loads(feed_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise DispatchFeedError(f"Could not read dispatch feed {feed_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DispatchFeedError(f"Dispatch feed {feed_path} is not valid JSON: {exc}") from exc

    feed = parse_dispatch_feed(payload)
    logger.info(
        "Loaded %d drivers, %d bookings and %d leave days from %s",
        len(feed.drivers),
        len(feed.bookings),
        len(feed.leaves),
        feed_path,
    )
    return feed


__all__ = ["DispatchFeed", "DispatchFeedError", "load_dispatch_feed", "parse_dispatch_feed"]
