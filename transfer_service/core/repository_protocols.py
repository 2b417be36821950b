"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via constructor injection (no service locator)
    - Collaborators signal failure by raising the typed errors in core/errors.py;
      handlers translate them to Result.Failure

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      and every call is a cancellation point for the caller
    - The repository is also the unit of work: save() stages, commit() makes the
      staged transfer and any transactional sink writes durable together
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from transfer_service.core.commands import CallerContext
from transfer_service.core.domain_types import (
    Currency, CustomerId, CustomerStatus, TransferAction, TransferId, TransferStatus,
)
from transfer_service.core.events import DomainEvent
from transfer_service.core.money import Money
from transfer_service.core.transfer import Transfer


class TransferRepository(Protocol):
    """Contract for transfer persistence — implemented by shell.

    save(transfer, expected_status=None) stages an insert and raises
    DuplicateTransactionCodeError or DuplicateIdempotencyKeyError when a unique
    value is taken. With expected_status it is a compare-and-swap: it writes
    only if the stored status still equals expected_status and the row is not
    tombstoned, else raises ConcurrentModificationError. A failed save leaves
    nothing staged. Nothing is visible to other readers until commit().
    Storage faults raise StorageUnavailableError.
    """
    async def get_by_transaction_code(self, code: str) -> Transfer | None: ...
    async def get_by_id(self, transfer_id: TransferId) -> Transfer | None: ...
    async def get_by_idempotency_key(self, key: str) -> Transfer | None: ...
    async def transaction_code_exists(self, code: str) -> bool: ...
    async def list_by_customer(
        self, customer_id: CustomerId, limit: int,
    ) -> list[Transfer]: ...
    async def get_daily_total(
        self, customer_id: CustomerId, since: datetime,
    ) -> Decimal: ...
    async def save(
        self, transfer: Transfer, expected_status: TransferStatus | None = None,
    ) -> None: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


class CurrencyConverter(Protocol):
    """Raises ConversionUnavailableError when no rate can be supplied."""
    async def convert(self, amount: Money, target: Currency) -> Money: ...


class EventSink(Protocol):
    """transactional sinks write inside the repository's unit of work, before
    commit, and their failure aborts it. Other sinks publish after commit and
    their failures are only logged."""
    transactional: bool

    async def publish(self, event: DomainEvent) -> None: ...


class Authorizer(Protocol):
    async def is_authorized(
        self, caller: CallerContext, action: TransferAction,
    ) -> bool: ...


class CustomerDirectory(Protocol):
    """Returns None for unknown customers; raises CustomerServiceUnavailableError on failure."""
    async def get_status(self, customer_id: CustomerId) -> CustomerStatus | None: ...
