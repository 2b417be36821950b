"""Query Handlers — tests for lookup by code, by id, and by customer.

Invariants:
    - create → get-by-code returns an equal DTO (idempotent recovery path)
    - Unknown or blank code → TRANSFER_NOT_FOUND / INVALID_TRANSFER
    - Tombstoned transfers are hidden from every read
    - Reads never write or publish
    - Daily limit usage counts the sender's pending and completed transfers only
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from transfer_service.core.commands import (
    CallerContext, CheckDailyLimit, CreateTransfer, GetTransferByCode,
    GetTransferById, ListCustomerTransfers,
)
from transfer_service.core.domain_types import (
    Currency, CustomerId, ErrorKind, TransferId, TransferStatus,
)
from transfer_service.core.errors import StorageUnavailableError
from transfer_service.core.money import Money
from transfer_service.core.result import Success
from transfer_service.core.transfer import Transfer
from transfer_service.core.transfer_policy import TransferPolicy
from transfer_service.services.handle_create import CreateTransferHandler
from transfer_service.services.handle_queries import (
    CheckDailyLimitHandler, GetTransferByCodeHandler, GetTransferByIdHandler,
    ListCustomerTransfersHandler,
)
from tests.services.fakes import StaticAuthorizer

CALLER = CallerContext(api_key="k")
POLICY = TransferPolicy(
    base_currency=Currency.USD,
    daily_limit=Decimal("10000"),
    high_amount_threshold=Decimal("1000"),
    approval_wait=timedelta(minutes=5),
    base_fee=Decimal("5.00"),
    fee_percentage=Decimal("0.01"),
)


def _stored(repository, sender=None, receiver=None, code=None):
    transfer, _ = Transfer.create(
        transaction_code=code or uuid4().hex[:8],
        sender_customer_id=sender or CustomerId(uuid4()),
        receiver_customer_id=receiver or CustomerId(uuid4()),
        amount=Money("10", Currency.EUR),
    )
    return repository.add(transfer)


async def test_create_then_get_by_code_round_trip(
    repository, converter, sink, authorizer,
):
    created = await CreateTransferHandler(
        repository, converter, sink, authorizer,
    ).handle(CreateTransfer(
        caller=CALLER,
        sender_customer_id=CustomerId(uuid4()),
        receiver_customer_id=CustomerId(uuid4()),
        amount=Decimal("100"),
        currency=Currency.USD,
        target_currency=Currency.EUR,
    ))
    handler = GetTransferByCodeHandler(repository, authorizer)

    first = await handler.handle(GetTransferByCode(CALLER, created.value.transaction_code))
    second = await handler.handle(GetTransferByCode(CALLER, created.value.transaction_code))

    assert first.value == created.value
    assert second.value == first.value
    assert len(sink.events) == 1


async def test_get_by_code_unknown(repository, authorizer):
    result = await GetTransferByCodeHandler(repository, authorizer).handle(
        GetTransferByCode(CALLER, "00000000"),
    )
    assert result.kind == ErrorKind.TRANSFER_NOT_FOUND


async def test_get_by_code_blank(repository, authorizer):
    result = await GetTransferByCodeHandler(repository, authorizer).handle(
        GetTransferByCode(CALLER, "   "),
    )
    assert result.kind == ErrorKind.INVALID_TRANSFER


async def test_get_by_code_hides_tombstoned(repository, authorizer):
    transfer = _stored(repository)
    failed, _ = transfer.with_status(TransferStatus.FAILED)
    tombstone, _ = failed.tombstoned()
    repository.add(tombstone)

    result = await GetTransferByCodeHandler(repository, authorizer).handle(
        GetTransferByCode(CALLER, transfer.transaction_code),
    )
    assert result.kind == ErrorKind.TRANSFER_NOT_FOUND


async def test_get_by_code_forbidden(repository):
    transfer = _stored(repository)
    result = await GetTransferByCodeHandler(
        repository, StaticAuthorizer(allowed=False),
    ).handle(GetTransferByCode(CALLER, transfer.transaction_code))
    assert result.kind == ErrorKind.FORBIDDEN


async def test_get_by_code_storage_failure(repository, authorizer):
    repository.fail_with = StorageUnavailableError("down", "select")
    result = await GetTransferByCodeHandler(repository, authorizer).handle(
        GetTransferByCode(CALLER, "12345678"),
    )
    assert result.kind == ErrorKind.STORAGE_UNAVAILABLE


async def test_get_by_id(repository, authorizer):
    transfer = _stored(repository)
    result = await GetTransferByIdHandler(repository, authorizer).handle(
        GetTransferById(CALLER, transfer.id),
    )
    assert isinstance(result, Success)
    assert result.value.id == transfer.id


async def test_get_by_id_unknown(repository, authorizer):
    result = await GetTransferByIdHandler(repository, authorizer).handle(
        GetTransferById(CALLER, TransferId(uuid4())),
    )
    assert result.kind == ErrorKind.TRANSFER_NOT_FOUND


async def test_list_customer_transfers(repository, authorizer):
    customer = CustomerId(uuid4())
    _stored(repository, sender=customer)
    _stored(repository, receiver=customer)
    _stored(repository)

    result = await ListCustomerTransfersHandler(repository, authorizer).handle(
        ListCustomerTransfers(CALLER, customer),
    )
    assert len(result.value) == 2


async def test_list_customer_transfers_respects_limit(repository, authorizer):
    customer = CustomerId(uuid4())
    for _ in range(3):
        _stored(repository, sender=customer)
    result = await ListCustomerTransfersHandler(repository, authorizer).handle(
        ListCustomerTransfers(CALLER, customer, limit=2),
    )
    assert len(result.value) == 2


async def test_list_customer_transfers_rejects_bad_limit(repository, authorizer):
    handler = ListCustomerTransfersHandler(repository, authorizer)
    for limit in (0, 101):
        result = await handler.handle(
            ListCustomerTransfers(CALLER, CustomerId(uuid4()), limit=limit),
        )
        assert result.kind == ErrorKind.INVALID_TRANSFER


def _priced(repository, sender, amount, status=TransferStatus.PENDING):
    transfer, _ = Transfer.create(
        transaction_code=uuid4().hex[:8],
        sender_customer_id=sender,
        receiver_customer_id=CustomerId(uuid4()),
        amount=Money(amount, Currency.USD),
        amount_in_base=Money(amount, Currency.USD),
    )
    if status != TransferStatus.PENDING:
        transfer, _ = transfer.with_status(status)
    return repository.add(transfer)


async def test_check_daily_limit(repository, authorizer):
    sender = CustomerId(uuid4())
    _priced(repository, sender, "2500")
    _priced(repository, sender, "1500", TransferStatus.COMPLETED)
    _priced(repository, sender, "3000", TransferStatus.CANCELLED)
    _priced(repository, CustomerId(uuid4()), "4000")

    result = await CheckDailyLimitHandler(repository, authorizer, POLICY).handle(
        CheckDailyLimit(CALLER, sender),
    )

    assert isinstance(result, Success)
    assert result.value.currency == "USD"
    assert result.value.total_today == Decimal("4000")
    assert result.value.daily_limit == Decimal("10000")
    assert result.value.remaining == Decimal("6000")


async def test_check_daily_limit_never_negative(repository, authorizer):
    sender = CustomerId(uuid4())
    _priced(repository, sender, "12000")

    result = await CheckDailyLimitHandler(repository, authorizer, POLICY).handle(
        CheckDailyLimit(CALLER, sender),
    )
    assert result.value.remaining == Decimal("0")


async def test_check_daily_limit_forbidden(repository):
    result = await CheckDailyLimitHandler(
        repository, StaticAuthorizer(allowed=False), POLICY,
    ).handle(CheckDailyLimit(CALLER, CustomerId(uuid4())))
    assert result.kind == ErrorKind.FORBIDDEN
