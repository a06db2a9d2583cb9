import pytest

from src.core.collection import (
    CollectionLabel,
    collection_for,
    collection_line,
    display_label,
    format_amount,
)
from src.core.models import PaymentMethod, PaymentStatus


def test_cash_collects_full_price(make_booking) -> None:
    result = collection_for(make_booking(payment_method=PaymentMethod.CASH, client_price=120.0))

    assert result is not None
    assert result.amount == 120.0
    assert result.label is CollectionLabel.FULL_COLLECTION


def test_cash_wins_over_paid_status(make_booking) -> None:
    result = collection_for(
        make_booking(
            payment_method=PaymentMethod.CASH,
            client_price=80.0,
            client_payment_status=PaymentStatus.PAID,
        )
    )

    assert result is not None
    assert result.amount == 80.0


def test_cash_without_price_collects_nothing(make_booking) -> None:
    assert collection_for(make_booking(payment_method=PaymentMethod.CASH)) is None


def test_deposit_balance_collects_remaining_balance(make_booking) -> None:
    result = collection_for(
        make_booking(
            payment_method=PaymentMethod.DEPOSIT_BALANCE,
            client_price=400.0,
            deposit=150.0,
        )
    )

    assert result is not None
    assert result.amount == pytest.approx(250.0)
    assert result.label is CollectionLabel.BALANCE_DUE


def test_fully_covered_deposit_falls_through_to_unpaid_rule(make_booking) -> None:
    covered = make_booking(
        payment_method=PaymentMethod.DEPOSIT_BALANCE, client_price=100.0, deposit=100.0
    )
    assert collection_for(covered) is None

    unpaid = make_booking(
        payment_method=PaymentMethod.DEPOSIT_BALANCE,
        client_price=100.0,
        deposit=120.0,
        client_payment_status=PaymentStatus.UNPAID,
    )
    result = collection_for(unpaid)
    assert result is not None
    assert result.amount == 100.0
    assert result.label is CollectionLabel.FULL_COLLECTION


@pytest.mark.parametrize(
    "method",
    [PaymentMethod.PREPAID, PaymentMethod.PAY_TO_DRIVER, None],
)
def test_unpaid_bookings_collect_full_price(make_booking, method) -> None:
    result = collection_for(
        make_booking(
            payment_method=method,
            client_price=60.0,
            client_payment_status=PaymentStatus.UNPAID,
        )
    )

    assert result is not None
    assert result.amount == 60.0


def test_future_invoice_is_never_collected(make_booking) -> None:
    booking = make_booking(
        payment_method=PaymentMethod.FUTURE_INVOICE,
        client_price=60.0,
        client_payment_status=PaymentStatus.UNPAID,
    )

    assert collection_for(booking) is None


def test_partial_status_alone_collects_nothing(make_booking) -> None:
    booking = make_booking(
        payment_method=PaymentMethod.PREPAID,
        client_price=60.0,
        client_payment_status=PaymentStatus.PARTIAL,
    )

    assert collection_for(booking) is None


def test_collection_text_formatting(make_booking) -> None:
    balance = collection_for(
        make_booking(
            payment_method=PaymentMethod.DEPOSIT_BALANCE, client_price=1500.0, deposit=250.5
        )
    )
    full = collection_for(make_booking(payment_method=PaymentMethod.CASH, client_price=45.0))

    assert format_amount(1249.5) == "$1,249.50"
    assert format_amount(12.0, "€") == "€12.00"
    assert display_label(balance) == "BALANCE DUE"
    assert display_label(full) == "full collection"
    assert collection_line(balance) == "COLLECT $1,249.50 (BALANCE DUE)"
    assert collection_line(full, "£") == "COLLECT £45.00 (full collection)"
