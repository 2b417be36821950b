"""Domain Events — immutable records of transfer state changes.

Invariants:
    - DomainEvent is a CLOSED union: TransferCreated | TransferStatusChanged | TransferDeleted
    - Every event carries event_id, transfer_id and occurred_at
    - Events are built by the core and handed to an EventSink only after persistence

Design Decisions:
    - Closed union + exhaustive `match` (assert_never) over an open base class:
      adding a case means extending DomainEvent and every consumer fails type-check
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Union, assert_never

from transfer_service.core.domain_types import (
    Currency, CustomerId, TransferId, TransferStatus,
)


@dataclass(frozen=True)
class TransferCreated:
    transfer_id: TransferId
    transaction_code: str
    sender_customer_id: CustomerId
    receiver_customer_id: CustomerId
    amount: Decimal
    currency: Currency
    converted_amount: Decimal | None
    target_currency: Currency | None
    occurred_at: datetime
    transaction_fee: Decimal | None = None
    fee_currency: Currency | None = None
    approval_required_until: datetime | None = None
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class TransferStatusChanged:
    transfer_id: TransferId
    transaction_code: str
    old_status: TransferStatus
    new_status: TransferStatus
    occurred_at: datetime
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class TransferDeleted:
    transfer_id: TransferId
    transaction_code: str
    status: TransferStatus
    occurred_at: datetime
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)


DomainEvent = Union[TransferCreated, TransferStatusChanged, TransferDeleted]


def event_type(event: DomainEvent) -> str:
    """Stable routing key for sinks and subscribers."""
    match event:
        case TransferCreated():
            return "transfer.created"
        case TransferStatusChanged():
            return "transfer.status_changed"
        case TransferDeleted():
            return "transfer.deleted"
        case _:
            assert_never(event)


def event_payload(event: DomainEvent) -> dict[str, Any]:
    """JSON-safe payload: decimals and ids as strings, enums as their tokens."""
    base = {
        "event_id": str(event.event_id),
        "event_type": event_type(event),
        "transfer_id": str(event.transfer_id),
        "transaction_code": event.transaction_code,
        "occurred_at": event.occurred_at.isoformat(),
    }
    match event:
        case TransferCreated():
            base.update({
                "sender_customer_id": str(event.sender_customer_id),
                "receiver_customer_id": str(event.receiver_customer_id),
                "amount": str(event.amount),
                "currency": event.currency.value,
                "converted_amount": (
                    str(event.converted_amount)
                    if event.converted_amount is not None else None
                ),
                "target_currency": (
                    event.target_currency.value if event.target_currency else None
                ),
                "transaction_fee": (
                    str(event.transaction_fee)
                    if event.transaction_fee is not None else None
                ),
                "fee_currency": (
                    event.fee_currency.value if event.fee_currency else None
                ),
                "approval_required_until": (
                    event.approval_required_until.isoformat()
                    if event.approval_required_until else None
                ),
            })
        case TransferStatusChanged():
            base.update({
                "old_status": event.old_status.value,
                "new_status": event.new_status.value,
            })
        case TransferDeleted():
            base["status"] = event.status.value
        case _:
            assert_never(event)
    return base
