"""Creation Enforcement — domain rules a new transfer must satisfy.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return Failure on violation, None (or a Success value) otherwise
    - Amount checks never round: an amount finer than the currency's minor unit fails
    - Every stored amount stays below MAX_AMOUNT, the Numeric(19, 4) column range

Design Decisions:
    - Same shape as enforce_transitions: handlers chain `if failure: return failure`
"""

from decimal import Decimal

from transfer_service.core.commands import CreateTransfer
from transfer_service.core.domain_types import (
    Currency, CustomerId, CustomerStatus, ErrorKind,
)
from transfer_service.core.money import Money
from transfer_service.core.result import Failure, Result, Success, fail
from transfer_service.core.transfer import Transfer

# Numeric(19, 4) leaves 15 integer digits
MAX_AMOUNT = Decimal(10) ** 15
MAX_IDEMPOTENCY_KEY_LENGTH = 100


def check_parties(
    sender: CustomerId, receiver: CustomerId,
) -> Failure | None:
    if sender == receiver:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            "Sender and receiver must be different customers.",
            field="receiver_customer_id",
        )
    return None


def build_amount(amount: Decimal | int | str, currency: Currency) -> Result[Money]:
    """Validate and wrap the requested amount."""
    try:
        money = Money(amount, currency)
    except ValueError as e:
        return fail(ErrorKind.INVALID_TRANSFER, str(e), field="amount")
    if not money.is_positive:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            "Amount must be greater than zero.",
            field="amount",
        )
    failure = check_storable(money, "amount")
    if failure:
        return failure
    return Success(money)


def check_storable(money: Money, field: str) -> Failure | None:
    """Amounts derived at creation (converted, base, fee) get the same bound."""
    if money.amount >= MAX_AMOUNT:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            f"{field.replace('_', ' ').capitalize()} exceeds the supported maximum.",
            field=field,
            maximum=str(MAX_AMOUNT),
        )
    return None


def check_idempotency_key(key: str) -> Failure | None:
    if not key.strip():
        return fail(
            ErrorKind.INVALID_TRANSFER,
            "Idempotency key must not be blank.",
            field="idempotency_key",
        )
    if len(key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            f"Idempotency key must be at most {MAX_IDEMPOTENCY_KEY_LENGTH} characters.",
            field="idempotency_key",
        )
    return None


def check_replay(existing: Transfer, command: CreateTransfer) -> Failure | None:
    """A repeated key must carry the same request it was first used with."""
    if existing.is_deleted:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            "Idempotency key belongs to an archived transfer.",
            field="idempotency_key",
        )
    same_request = (
        existing.sender_customer_id == command.sender_customer_id
        and existing.receiver_customer_id == command.receiver_customer_id
        and existing.amount.currency == command.currency
        and existing.amount.amount == command.amount
    )
    if not same_request:
        return fail(
            ErrorKind.INVALID_TRANSFER,
            "Idempotency key was already used for a different transfer.",
            field="idempotency_key",
        )
    return None


def needs_conversion(currency: Currency, target: Currency | None) -> bool:
    return target is not None and target != currency


def check_customer(
    role: str, customer_id: CustomerId, status: CustomerStatus | None,
) -> Failure | None:
    """role is 'sender' or 'receiver'; status None means the customer is unknown."""
    if status is None:
        return fail(
            ErrorKind.CUSTOMER_NOT_FOUND,
            f"{role.capitalize()} customer not found.",
            customer_id=str(customer_id),
        )
    if status != CustomerStatus.ACTIVE:
        return fail(
            ErrorKind.CUSTOMER_NOT_ACTIVE,
            f"{role.capitalize()} customer is not active.",
            customer_id=str(customer_id),
            customer_status=status.value,
        )
    return None
