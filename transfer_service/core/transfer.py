"""Transfer Entity — one money movement between two customers.

Invariants:
    - transaction_code assigned once at creation, never changed
    - amount is positive Money; sender != receiver
    - conversion is present iff the transfer was converted to another currency,
      and is never recomputed after creation
    - status changes only through with_status(), which enforces the status graph
    - deleted_at is a tombstone; transfers are never physically removed
    - transaction_fee, when set, is in the same currency as amount_in_base
    - idempotency_key, when set, is the caller's key for the create request

Design Decisions:
    - Frozen dataclass: state changes return a new Transfer plus the event that
      describes the change, so a loaded snapshot can be compared with what is stored
    - Constructor validates invariants and raises ValueError; handlers check the
      same rules up-front (enforce_creation) and return Failure instead
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal

from transfer_service.core.domain_types import (
    Currency, CustomerId, TransferId, TransferStatus,
)
from transfer_service.core.enforce_transitions import is_transition_allowed
from transfer_service.core.events import (
    TransferCreated, TransferDeleted, TransferStatusChanged,
)
from transfer_service.core.money import Money


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Conversion:
    """Explicit marker that conversion was applied, carrying its result."""
    converted: Money

    @property
    def target_currency(self) -> Currency:
        return self.converted.currency


@dataclass(frozen=True)
class Transfer:
    id: TransferId
    transaction_code: str
    sender_customer_id: CustomerId
    receiver_customer_id: CustomerId
    amount: Money
    status: TransferStatus
    created_at: datetime
    updated_at: datetime
    conversion: Conversion | None = None
    deleted_at: datetime | None = None
    amount_in_base: Money | None = None
    transaction_fee: Money | None = None
    approval_required_until: datetime | None = None
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        if not self.transaction_code:
            raise ValueError("transaction_code must be non-empty")
        if not self.amount.is_positive:
            raise ValueError(f"amount must be positive, got {self.amount}")
        if self.sender_customer_id == self.receiver_customer_id:
            raise ValueError("sender and receiver must differ")
        if (
            self.conversion is not None
            and self.conversion.target_currency == self.amount.currency
        ):
            raise ValueError("conversion target must differ from source currency")
        if self.transaction_fee is not None:
            if self.amount_in_base is None:
                raise ValueError("transaction_fee requires amount_in_base")
            if self.transaction_fee.currency != self.amount_in_base.currency:
                raise ValueError("transaction_fee must be in the base currency")
            if self.transaction_fee.amount < 0:
                raise ValueError("transaction_fee must not be negative")
        if self.idempotency_key is not None and not self.idempotency_key.strip():
            raise ValueError("idempotency_key must be non-blank when set")

    @classmethod
    def create(
        cls,
        *,
        transaction_code: str,
        sender_customer_id: CustomerId,
        receiver_customer_id: CustomerId,
        amount: Money,
        conversion: Conversion | None = None,
        amount_in_base: Money | None = None,
        transaction_fee: Money | None = None,
        approval_required_until: datetime | None = None,
        idempotency_key: str | None = None,
        now: datetime | None = None,
    ) -> tuple["Transfer", TransferCreated]:
        """Build a new PENDING transfer and its TransferCreated event."""
        now = now or utc_now()
        transfer = cls(
            id=TransferId(uuid.uuid4()),
            transaction_code=transaction_code,
            sender_customer_id=sender_customer_id,
            receiver_customer_id=receiver_customer_id,
            amount=amount,
            status=TransferStatus.PENDING,
            created_at=now,
            updated_at=now,
            conversion=conversion,
            amount_in_base=amount_in_base,
            transaction_fee=transaction_fee,
            approval_required_until=approval_required_until,
            idempotency_key=idempotency_key,
        )
        event = TransferCreated(
            transfer_id=transfer.id,
            transaction_code=transfer.transaction_code,
            sender_customer_id=transfer.sender_customer_id,
            receiver_customer_id=transfer.receiver_customer_id,
            amount=transfer.amount.amount,
            currency=transfer.amount.currency,
            converted_amount=transfer.converted_amount,
            target_currency=transfer.target_currency,
            occurred_at=now,
            transaction_fee=transaction_fee.amount if transaction_fee else None,
            fee_currency=transaction_fee.currency if transaction_fee else None,
            approval_required_until=approval_required_until,
        )
        return transfer, event

    @property
    def converted_amount(self) -> Decimal | None:
        return self.conversion.converted.amount if self.conversion else None

    @property
    def target_currency(self) -> Currency | None:
        return self.conversion.target_currency if self.conversion else None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def with_status(
        self, new_status: TransferStatus, now: datetime | None = None,
    ) -> tuple["Transfer", TransferStatusChanged]:
        """Apply a legal transition. Illegal ones are a contract violation (ValueError)."""
        if not is_transition_allowed(self.status, new_status):
            raise ValueError(
                f"Illegal transition {self.status.value} -> {new_status.value}",
            )
        now = now or utc_now()
        updated = replace(self, status=new_status, updated_at=now)
        event = TransferStatusChanged(
            transfer_id=self.id,
            transaction_code=self.transaction_code,
            old_status=self.status,
            new_status=new_status,
            occurred_at=now,
        )
        return updated, event

    def tombstoned(
        self, now: datetime | None = None,
    ) -> tuple["Transfer", TransferDeleted]:
        now = now or utc_now()
        updated = replace(self, deleted_at=now, updated_at=now)
        event = TransferDeleted(
            transfer_id=self.id,
            transaction_code=self.transaction_code,
            status=self.status,
            occurred_at=now,
        )
        return updated, event
