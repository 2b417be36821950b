"""Creation Enforcement — tests for new-transfer domain rules.

Tests cover:
    - sender == receiver rejected
    - amount ≤ 0, garbage, and over-precise amounts rejected as INVALID_TRANSFER
    - conversion needed only for a different target currency
    - customer checks: unknown → CUSTOMER_NOT_FOUND, not active → CUSTOMER_NOT_ACTIVE
    - amounts at or above MAX_AMOUNT rejected before they reach storage
    - idempotency keys: blank or too long rejected; replays must match the first request
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from transfer_service.core.commands import CallerContext, CreateTransfer
from transfer_service.core.domain_types import (
    Currency, CustomerId, CustomerStatus, ErrorKind,
)
from transfer_service.core.enforce_creation import (
    MAX_AMOUNT, build_amount, check_customer, check_idempotency_key,
    check_parties, check_replay, check_storable, needs_conversion,
)
from transfer_service.core.money import Money
from transfer_service.core.transfer import Transfer
from transfer_service.core.result import Failure, Success


def test_check_parties_rejects_same_customer():
    cid = CustomerId(uuid4())
    failure = check_parties(cid, cid)
    assert failure.kind == ErrorKind.INVALID_TRANSFER


def test_check_parties_accepts_distinct_customers():
    assert check_parties(CustomerId(uuid4()), CustomerId(uuid4())) is None


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), "0.00"])
def test_build_amount_rejects_non_positive(amount):
    result = build_amount(amount, Currency.USD)
    assert isinstance(result, Failure)
    assert result.kind == ErrorKind.INVALID_TRANSFER
    assert result.error.details["field"] == "amount"


def test_build_amount_rejects_over_precise():
    result = build_amount(Decimal("1.001"), Currency.USD)
    assert isinstance(result, Failure)
    assert result.kind == ErrorKind.INVALID_TRANSFER


def test_build_amount_rejects_float():
    assert isinstance(build_amount(1.5, Currency.USD), Failure)


def test_build_amount_success():
    result = build_amount(Decimal("100"), Currency.USD)
    assert isinstance(result, Success)
    assert result.value.amount == Decimal("100.00")


def test_needs_conversion():
    assert not needs_conversion(Currency.USD, None)
    assert not needs_conversion(Currency.USD, Currency.USD)
    assert needs_conversion(Currency.USD, Currency.EUR)


def test_check_customer_unknown():
    failure = check_customer("sender", CustomerId(uuid4()), None)
    assert failure.kind == ErrorKind.CUSTOMER_NOT_FOUND
    assert failure.error.message.startswith("Sender")


@pytest.mark.parametrize("status", [CustomerStatus.PASSIVE, CustomerStatus.BLOCKED])
def test_check_customer_not_active(status):
    failure = check_customer("receiver", CustomerId(uuid4()), status)
    assert failure.kind == ErrorKind.CUSTOMER_NOT_ACTIVE
    assert failure.error.details["customer_status"] == status.value


def test_check_customer_active():
    assert check_customer("sender", CustomerId(uuid4()), CustomerStatus.ACTIVE) is None


def test_build_amount_rejects_unstorable_amount():
    result = build_amount(MAX_AMOUNT, Currency.USD)
    assert result.kind == ErrorKind.INVALID_TRANSFER
    assert result.error.details["maximum"] == str(MAX_AMOUNT)


def test_build_amount_accepts_largest_storable_amount():
    result = build_amount(MAX_AMOUNT - Decimal("0.01"), Currency.USD)
    assert isinstance(result, Success)


def test_check_storable_names_the_field():
    failure = check_storable(Money(MAX_AMOUNT, Currency.JPY), "converted_amount")
    assert failure.error.details["field"] == "converted_amount"
    assert failure.error.message == "Converted amount exceeds the supported maximum."


@pytest.mark.parametrize("key", ["", "   ", "k" * 101])
def test_check_idempotency_key_rejects(key):
    failure = check_idempotency_key(key)
    assert failure.kind == ErrorKind.INVALID_TRANSFER
    assert failure.error.details["field"] == "idempotency_key"


def test_check_idempotency_key_accepts():
    assert check_idempotency_key("k" * 100) is None


def _first_request():
    command = CreateTransfer(
        caller=CallerContext(api_key="k"),
        sender_customer_id=CustomerId(uuid4()),
        receiver_customer_id=CustomerId(uuid4()),
        amount=Decimal("100"),
        currency=Currency.USD,
        idempotency_key="order-1",
    )
    transfer, _ = Transfer.create(
        transaction_code="12345678",
        sender_customer_id=command.sender_customer_id,
        receiver_customer_id=command.receiver_customer_id,
        amount=Money(command.amount, command.currency),
        idempotency_key=command.idempotency_key,
    )
    return command, transfer


def test_check_replay_accepts_same_request():
    command, transfer = _first_request()
    assert check_replay(transfer, command) is None


def test_check_replay_rejects_other_amount():
    command, transfer = _first_request()
    other = CreateTransfer(
        caller=command.caller,
        sender_customer_id=command.sender_customer_id,
        receiver_customer_id=command.receiver_customer_id,
        amount=Decimal("101"),
        currency=command.currency,
        idempotency_key=command.idempotency_key,
    )
    assert check_replay(transfer, other).kind == ErrorKind.INVALID_TRANSFER


def test_check_replay_rejects_archived_transfer():
    command, transfer = _first_request()
    archived, _ = transfer.tombstoned()
    failure = check_replay(archived, command)
    assert "archived" in failure.error.message
