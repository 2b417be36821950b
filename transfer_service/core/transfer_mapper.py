"""Transfer Mapper — entity to outward-facing DTO.

Invariants:
    - to_transfer_dto is PURE and TOTAL: every valid Transfer maps, no failure path
    - status and currency leave the core as stable string tokens
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from transfer_service.core.transfer import Transfer


@dataclass(frozen=True)
class TransferDto:
    id: UUID
    transaction_code: str
    sender_customer_id: UUID
    receiver_customer_id: UUID
    amount: Decimal
    currency: str
    status: str
    converted_amount: Decimal | None
    target_currency: str | None
    created_at: datetime
    updated_at: datetime
    transaction_fee: Decimal | None = None
    fee_currency: str | None = None
    approval_required_until: datetime | None = None


def to_transfer_dto(transfer: Transfer) -> TransferDto:
    fee = transfer.transaction_fee
    return TransferDto(
        id=transfer.id,
        transaction_code=transfer.transaction_code,
        sender_customer_id=transfer.sender_customer_id,
        receiver_customer_id=transfer.receiver_customer_id,
        amount=transfer.amount.amount,
        currency=transfer.amount.currency.value,
        status=transfer.status.value,
        converted_amount=transfer.converted_amount,
        target_currency=(
            transfer.target_currency.value if transfer.target_currency else None
        ),
        created_at=transfer.created_at,
        updated_at=transfer.updated_at,
        transaction_fee=fee.amount if fee else None,
        fee_currency=fee.currency.value if fee else None,
        approval_required_until=transfer.approval_required_until,
    )


@dataclass(frozen=True)
class DailyLimitDto:
    customer_id: UUID
    currency: str
    total_today: Decimal
    daily_limit: Decimal
    remaining: Decimal
