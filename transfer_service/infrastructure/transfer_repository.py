"""SQL Transfer Repository — SQLAlchemy implementation of TransferRepository.

Invariants:
    - Reads never lock; every read refreshes from the database (populate_existing)
    - save(expected_status=None) stages an INSERT (add + flush); a taken
      transaction_code or idempotency_key raises the matching Duplicate*Error
    - save(expected_status=s) is a single conditional UPDATE
      (id, status = s, deleted_at IS NULL); zero rows → ConcurrentModificationError
    - A failed save rolls the session back, so nothing stays staged
    - Nothing is durable until commit(); OutboxEventSink rows staged on the same
      session commit with the transfer
    - Every other SQLAlchemy failure → StorageUnavailableError; no retries here
    - A row that cannot be rebuilt into a valid Transfer → CorruptedRecordError

Design Decisions:
    - The repository is the unit of work for its session (commit/rollback)
    - Naive datetimes coming back from SQLite are read as UTC
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_service.core.domain_types import (
    Currency, CustomerId, TransferId, TransferStatus,
)
from transfer_service.core.errors import (
    ConcurrentModificationError,
    CorruptedRecordError,
    DuplicateIdempotencyKeyError,
    DuplicateTransactionCodeError,
    StorageUnavailableError,
)
from transfer_service.core.money import Money
from transfer_service.core.transfer import Conversion, Transfer
from transfer_service.core.transfer_policy import DAILY_TOTAL_STATUSES
from transfer_service.models.transfer import TransferRecord

logger = logging.getLogger(__name__)


class SqlTransferRepository:

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_by_transaction_code(self, code: str) -> Transfer | None:
        record = await self._first(
            select(TransferRecord).where(TransferRecord.transaction_code == code),
            "get_by_transaction_code",
        )
        return _to_entity(record) if record else None

    async def get_by_id(self, transfer_id: TransferId) -> Transfer | None:
        record = await self._first(
            select(TransferRecord).where(TransferRecord.id == transfer_id),
            "get_by_id",
        )
        return _to_entity(record) if record else None

    async def get_by_idempotency_key(self, key: str) -> Transfer | None:
        record = await self._first(
            select(TransferRecord).where(TransferRecord.idempotency_key == key),
            "get_by_idempotency_key",
        )
        return _to_entity(record) if record else None

    async def transaction_code_exists(self, code: str) -> bool:
        # Tombstoned rows still reserve their code.
        record_id = await self._scalar(
            select(TransferRecord.id).where(TransferRecord.transaction_code == code),
            "transaction_code_exists",
        )
        return record_id is not None

    async def list_by_customer(
        self, customer_id: CustomerId, limit: int,
    ) -> list[Transfer]:
        stmt = (
            select(TransferRecord)
            .where(
                or_(
                    TransferRecord.sender_customer_id == customer_id,
                    TransferRecord.receiver_customer_id == customer_id,
                ),
                TransferRecord.deleted_at.is_(None),
            )
            .order_by(TransferRecord.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._db.execute(stmt)
            records = result.scalars().all()
        except SQLAlchemyError as e:
            raise _storage_error(e, "list_by_customer") from e
        return [_to_entity(r) for r in records]

    async def get_daily_total(
        self, customer_id: CustomerId, since: datetime,
    ) -> Decimal:
        """Sum of base amounts the customer sent since `since` (unpriced rows count 0)."""
        stmt = select(func.coalesce(func.sum(TransferRecord.base_amount), 0)).where(
            TransferRecord.sender_customer_id == customer_id,
            TransferRecord.created_at >= since,
            TransferRecord.status.in_([s.value for s in DAILY_TOTAL_STATUSES]),
        )
        total = await self._scalar(stmt, "get_daily_total")
        return Decimal(str(total)) if total is not None else Decimal(0)

    async def save(
        self, transfer: Transfer, expected_status: TransferStatus | None = None,
    ) -> None:
        if expected_status is None:
            await self._insert(transfer)
        else:
            await self._compare_and_swap(transfer, expected_status)

    async def commit(self) -> None:
        try:
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise _storage_error(e, "commit") from e

    async def rollback(self) -> None:
        try:
            await self._db.rollback()
        except SQLAlchemyError as e:
            raise _storage_error(e, "rollback") from e

    # ─── Writes ──────────────────────────────────────────────────

    async def _insert(self, transfer: Transfer) -> None:
        try:
            self._db.add(_to_record(transfer))
            await self._db.flush()
        except IntegrityError as e:
            await self._db.rollback()
            if transfer.idempotency_key and await self._idempotency_key_taken(
                transfer.idempotency_key,
            ):
                raise DuplicateIdempotencyKeyError(transfer.idempotency_key) from e
            raise DuplicateTransactionCodeError(transfer.transaction_code) from e
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise _storage_error(e, "insert") from e

    async def _idempotency_key_taken(self, key: str) -> bool:
        record_id = await self._scalar(
            select(TransferRecord.id).where(TransferRecord.idempotency_key == key),
            "get_by_idempotency_key",
        )
        return record_id is not None

    async def _compare_and_swap(
        self, transfer: Transfer, expected_status: TransferStatus,
    ) -> None:
        stmt = (
            update(TransferRecord)
            .where(
                TransferRecord.id == transfer.id,
                TransferRecord.status == expected_status.value,
                TransferRecord.deleted_at.is_(None),
            )
            .values(
                status=transfer.status.value,
                updated_at=transfer.updated_at,
                deleted_at=transfer.deleted_at,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise _storage_error(e, "update") from e
        if result.rowcount != 1:
            await self._db.rollback()
            raise ConcurrentModificationError()

    # ─── Reads ───────────────────────────────────────────────────

    async def _first(self, stmt, operation: str) -> TransferRecord | None:
        try:
            result = await self._db.execute(
                stmt.execution_options(populate_existing=True),
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error(e, operation) from e

    async def _scalar(self, stmt, operation: str):
        try:
            return (await self._db.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error(e, operation) from e


def _storage_error(e: SQLAlchemyError, operation: str) -> StorageUnavailableError:
    logger.error(f"Transfer storage {operation} failed: {e}")
    return StorageUnavailableError("Database operation failed", operation)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_record(transfer: Transfer) -> TransferRecord:
    base = transfer.amount_in_base
    return TransferRecord(
        id=transfer.id,
        transaction_code=transfer.transaction_code,
        sender_customer_id=transfer.sender_customer_id,
        receiver_customer_id=transfer.receiver_customer_id,
        amount=transfer.amount.amount,
        currency=transfer.amount.currency.value,
        converted_amount=transfer.converted_amount,
        target_currency=(
            transfer.target_currency.value if transfer.target_currency else None
        ),
        status=transfer.status.value,
        created_at=transfer.created_at,
        updated_at=transfer.updated_at,
        deleted_at=transfer.deleted_at,
        idempotency_key=transfer.idempotency_key,
        base_amount=base.amount if base else None,
        base_currency=base.currency.value if base else None,
        transaction_fee=(
            transfer.transaction_fee.amount if transfer.transaction_fee else None
        ),
        approval_required_until=transfer.approval_required_until,
    )


def _to_entity(record: TransferRecord) -> Transfer:
    """Rebuild the entity; any invariant violation means the row is corrupted."""
    try:
        conversion = None
        if record.converted_amount is not None or record.target_currency is not None:
            if record.converted_amount is None or record.target_currency is None:
                raise ValueError("converted_amount and target_currency must be set together")
            conversion = Conversion(
                Money(record.converted_amount, Currency(record.target_currency)),
            )
        amount_in_base = fee = None
        if record.base_amount is not None:
            base_currency = Currency(record.base_currency)
            amount_in_base = Money(record.base_amount, base_currency)
            if record.transaction_fee is not None:
                fee = Money(record.transaction_fee, base_currency)
        elif record.transaction_fee is not None:
            raise ValueError("transaction_fee set without base_amount")
        return Transfer(
            id=TransferId(record.id),
            transaction_code=record.transaction_code,
            sender_customer_id=CustomerId(record.sender_customer_id),
            receiver_customer_id=CustomerId(record.receiver_customer_id),
            amount=Money(record.amount, Currency(record.currency)),
            status=TransferStatus(record.status),
            created_at=_as_utc(record.created_at),
            updated_at=_as_utc(record.updated_at),
            conversion=conversion,
            deleted_at=_as_utc(record.deleted_at),
            amount_in_base=amount_in_base,
            transaction_fee=fee,
            approval_required_until=_as_utc(record.approval_required_until),
            idempotency_key=record.idempotency_key,
        )
    except ValueError as e:
        logger.critical(
            f"Corrupted transfer row {record.id}: {e}",
            extra={"transfer_id": str(record.id), "error_code": "CORRUPTED_RECORD"},
        )
        raise CorruptedRecordError(str(record.id), str(e)) from e
