"""Commands & Queries — typed inputs for each handler.

Invariants:
    - Every request carries the CallerContext used for authorization
    - Requests are immutable values; handlers never mutate them
"""

from dataclasses import dataclass
from decimal import Decimal

from transfer_service.core.domain_types import (
    Currency, CustomerId, TransferId, TransferStatus,
)


@dataclass(frozen=True)
class CallerContext:
    """Identity of whoever invoked a handler, as seen by the Authorizer."""
    api_key: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class CreateTransfer:
    caller: CallerContext
    sender_customer_id: CustomerId
    receiver_customer_id: CustomerId
    amount: Decimal
    currency: Currency
    target_currency: Currency | None = None
    idempotency_key: str | None = None


@dataclass(frozen=True)
class GetTransferByCode:
    caller: CallerContext
    transaction_code: str


@dataclass(frozen=True)
class GetTransferById:
    caller: CallerContext
    transfer_id: TransferId


@dataclass(frozen=True)
class ListCustomerTransfers:
    caller: CallerContext
    customer_id: CustomerId
    limit: int = 50


@dataclass(frozen=True)
class UpdateTransferStatus:
    caller: CallerContext
    transfer_id: TransferId
    new_status: TransferStatus


@dataclass(frozen=True)
class DeleteTransfer:
    caller: CallerContext
    transfer_id: TransferId


@dataclass(frozen=True)
class CheckDailyLimit:
    caller: CallerContext
    customer_id: CustomerId
