"""Decide what a driver has to collect from the client on-site.

Rules are evaluated top to bottom and the first match wins:

1. ``Cash`` with a positive price: collect the full price.
2. ``Deposit + Balance``: collect ``price - deposit`` when that is positive.
3. Any other unresolved booking marked ``UNPAID`` with a positive price,
   except ``Future Invoice`` clients who are billed later.
4. Nothing to collect.

Amounts are advisory and kept unrounded; formatting to cents happens in
:func:`format_amount`, which every export shares.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import Booking, PaymentMethod, PaymentStatus


class CollectionLabel(str, Enum):
    FULL_COLLECTION = "full collection"
    BALANCE_DUE = "balance due"


@dataclass(frozen=True)
class CollectionResult:
    amount: float
    label: CollectionLabel


def collection_for(booking: Booking) -> Optional[CollectionResult]:
    method = booking.payment_method
    price = booking.price

    if method is PaymentMethod.CASH and price > 0:
        return CollectionResult(price, CollectionLabel.FULL_COLLECTION)

    if method is PaymentMethod.DEPOSIT_BALANCE:
        balance = max(0.0, price - booking.deposit_amount)
        if balance > 0:
            return CollectionResult(balance, CollectionLabel.BALANCE_DUE)

    if (
        booking.client_payment_status is PaymentStatus.UNPAID
        and price > 0
        and method is not PaymentMethod.FUTURE_INVOICE
    ):
        return CollectionResult(price, CollectionLabel.FULL_COLLECTION)

    return None


def format_amount(amount: float, currency: str = "$") -> str:
    return f"{currency}{amount:,.2f}"


def display_label(result: CollectionResult) -> str:
    if result.label is CollectionLabel.BALANCE_DUE:
        return result.label.value.upper()
    return result.label.value


def collection_line(result: CollectionResult, currency: str = "$") -> str:
    """``COLLECT $150.00 (BALANCE DUE)``: the wording shared by all exports."""

    return f"COLLECT {format_amount(result.amount, currency)} ({display_label(result)})"


__all__ = [
    "CollectionLabel",
    "CollectionResult",
    "collection_for",
    "collection_line",
    "display_label",
    "format_amount",
]
