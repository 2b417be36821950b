"""Transfer Policy — tests for fee, daily limit, and approval rules.

Tests cover:
    - fee is base + percentage, rounded half-up to the base currency's minor units
    - the daily limit is inclusive and reports what is left
    - approval applies strictly above the threshold and only blocks completion
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from transfer_service.core.domain_types import (
    Currency, CustomerId, ErrorKind, TransferStatus,
)
from transfer_service.core.money import Money
from transfer_service.core.transfer import Transfer
from transfer_service.core.transfer_policy import (
    TransferPolicy, approval_deadline, calculate_fee, check_approval_window,
    check_daily_limit, remaining_daily_limit, start_of_day,
)

NOW = datetime(2026, 3, 14, 15, 9, 26, tzinfo=timezone.utc)

POLICY = TransferPolicy(
    base_currency=Currency.TRY,
    daily_limit=Decimal("10000"),
    high_amount_threshold=Decimal("1000"),
    approval_wait=timedelta(minutes=5),
    base_fee=Decimal("5.00"),
    fee_percentage=Decimal("0.01"),
)


@pytest.mark.parametrize("amount,fee", [
    ("100", "6.00"),
    ("0.01", "5.00"),
    ("12.35", "5.12"),
    ("1000", "15.00"),
])
def test_calculate_fee(amount, fee):
    assert calculate_fee(Money(amount, Currency.TRY), POLICY) == Money(fee, Currency.TRY)


def test_calculate_fee_rounds_to_currency_units():
    policy = TransferPolicy(
        Currency.JPY, Decimal("1000000"), Decimal("100000"),
        timedelta(minutes=5), Decimal("0"), Decimal("0.015"),
    )
    assert calculate_fee(Money("150", Currency.JPY), policy).amount == Decimal("2")


def test_start_of_day():
    assert start_of_day(NOW) == datetime(2026, 3, 14, tzinfo=timezone.utc)


def test_daily_limit_allows_up_to_the_limit():
    assert check_daily_limit(
        Decimal("6000"), Money("4000", Currency.TRY), POLICY,
    ) is None


def test_daily_limit_exceeded():
    failure = check_daily_limit(
        Decimal("6000"), Money("4000.01", Currency.TRY), POLICY,
    )
    assert failure.kind == ErrorKind.DAILY_LIMIT_EXCEEDED
    assert failure.error.message == (
        "Daily transfer limit exceeded. Remaining: 4000.00 TRY"
    )
    assert failure.error.details["remaining"] == "4000"


def test_daily_limit_remaining_never_negative():
    failure = check_daily_limit(
        Decimal("12000"), Money("1", Currency.TRY), POLICY,
    )
    assert failure.error.details["remaining"] == "0"
    assert remaining_daily_limit(Decimal("12000"), POLICY) == Decimal("0")


def test_approval_deadline_above_threshold():
    deadline = approval_deadline(Money("1000.01", Currency.TRY), POLICY, NOW)
    assert deadline == NOW + timedelta(minutes=5)


def test_no_approval_at_threshold():
    assert approval_deadline(Money("1000", Currency.TRY), POLICY, NOW) is None


def _awaiting(deadline):
    transfer, _ = Transfer.create(
        transaction_code="12345678",
        sender_customer_id=CustomerId(uuid4()),
        receiver_customer_id=CustomerId(uuid4()),
        amount=Money("5000", Currency.TRY),
        approval_required_until=deadline,
        now=NOW,
    )
    return transfer


def test_approval_window_blocks_completion():
    transfer = _awaiting(NOW + timedelta(minutes=4, seconds=1))
    failure = check_approval_window(transfer, TransferStatus.COMPLETED, NOW)
    assert failure.kind == ErrorKind.APPROVAL_PENDING
    assert failure.error.message == (
        "Transfer approval required. Please wait 5 more minute(s)."
    )


@pytest.mark.parametrize("target", [TransferStatus.CANCELLED, TransferStatus.FAILED])
def test_approval_window_never_delays_other_outcomes(target):
    transfer = _awaiting(NOW + timedelta(minutes=5))
    assert check_approval_window(transfer, target, NOW) is None


def test_approval_window_elapsed():
    transfer = _awaiting(NOW)
    assert check_approval_window(transfer, TransferStatus.COMPLETED, NOW) is None


def test_no_approval_window():
    transfer = _awaiting(None)
    assert check_approval_window(
        transfer, TransferStatus.COMPLETED, NOW + timedelta(days=1),
    ) is None
