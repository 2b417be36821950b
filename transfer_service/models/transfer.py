"""Transfer ORM — persisted row for the Transfer entity.

Invariants:
    - id is UUID primary key, assigned by the domain (Transfer.create)
    - transaction_code is unique across live AND tombstoned rows
    - status stores TransferStatus values; currency columns store ISO codes
    - converted_amount and target_currency are both NULL or both set
    - deleted_at is the soft-delete tombstone; rows are never removed
    - idempotency_key is unique when set; NULLs never collide
    - base_amount, base_currency and transaction_fee are set together when a
      policy priced the transfer; the fee is in base_currency

Design Decisions:
    - Numeric(19, 4): exact decimals, wider than any supported minor unit
    - Plain string columns for enums: the domain enum is the validator, and an
      unknown stored token surfaces as CorruptedRecordError on load
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from transfer_service.db.base import Base


class TransferRecord(Base):
    __tablename__ = "transfers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    transaction_code: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True,
    )
    sender_customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    receiver_customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    converted_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True,
    )
    target_currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
    )
    base_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True,
    )
    base_currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    transaction_fee: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True,
    )
    approval_required_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    __table_args__ = (
        Index("ix_transfers_created_at", "created_at"),
        Index("ix_transfers_sender_created_at", "sender_customer_id", "created_at"),
        UniqueConstraint("idempotency_key", name="uq_transfers_idempotency_key"),
    )
