"""Query Handlers — read paths: by transaction code, by id, by customer, daily limit.

Invariants:
    - Read-only: no writes, no events, safe to call any number of times
    - Lookup by code is the idempotent recovery path for a lost create response
    - Tombstoned transfers are invisible (TRANSFER_NOT_FOUND) but keep their code reserved
    - Transaction code format is not validated here beyond non-blank
    - Daily limit usage is reported in the policy's base currency, from 00:00 UTC
"""

import logging

from transfer_service.core.commands import (
    CheckDailyLimit, GetTransferByCode, GetTransferById, ListCustomerTransfers,
)
from transfer_service.core.domain_types import ErrorKind, TransferAction
from transfer_service.core.errors import StorageUnavailableError
from transfer_service.core.repository_protocols import Authorizer, TransferRepository
from transfer_service.core.result import Result, Success, fail
from transfer_service.core.transfer import Transfer, utc_now
from transfer_service.core.transfer_mapper import (
    DailyLimitDto, TransferDto, to_transfer_dto,
)
from transfer_service.core.transfer_policy import (
    TransferPolicy, remaining_daily_limit, start_of_day,
)
from transfer_service.services.handler_helpers import authorize, failure_from_error

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100


def _found(transfer: Transfer | None, missing_message: str) -> Result[TransferDto]:
    if transfer is None or transfer.is_deleted:
        return fail(ErrorKind.TRANSFER_NOT_FOUND, missing_message)
    return Success(to_transfer_dto(transfer))


class GetTransferByCodeHandler:
    """Handles lookup by caller-facing transaction code."""

    def __init__(self, repository: TransferRepository, authorizer: Authorizer):
        self._repository = repository
        self._authorizer = authorizer

    async def handle(self, query: GetTransferByCode) -> Result[TransferDto]:
        denied = await authorize(self._authorizer, query.caller, TransferAction.READ)
        if denied:
            return denied
        code = query.transaction_code.strip()
        if not code:
            return fail(
                ErrorKind.INVALID_TRANSFER,
                "Transaction code must not be empty.",
                field="transaction_code",
            )
        try:
            transfer = await self._repository.get_by_transaction_code(code)
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        return _found(transfer, f"No transfer with transaction code '{code}'.")


class GetTransferByIdHandler:
    """Handles lookup by transfer id."""

    def __init__(self, repository: TransferRepository, authorizer: Authorizer):
        self._repository = repository
        self._authorizer = authorizer

    async def handle(self, query: GetTransferById) -> Result[TransferDto]:
        denied = await authorize(self._authorizer, query.caller, TransferAction.READ)
        if denied:
            return denied
        try:
            transfer = await self._repository.get_by_id(query.transfer_id)
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        return _found(transfer, f"Transfer '{query.transfer_id}' not found.")


class ListCustomerTransfersHandler:
    """Handles listing transfers where the customer is sender or receiver."""

    def __init__(self, repository: TransferRepository, authorizer: Authorizer):
        self._repository = repository
        self._authorizer = authorizer

    async def handle(
        self, query: ListCustomerTransfers,
    ) -> Result[list[TransferDto]]:
        denied = await authorize(self._authorizer, query.caller, TransferAction.READ)
        if denied:
            return denied
        if not 1 <= query.limit <= MAX_LIST_LIMIT:
            return fail(
                ErrorKind.INVALID_TRANSFER,
                f"limit must be between 1 and {MAX_LIST_LIMIT}.",
                field="limit",
            )
        try:
            transfers = await self._repository.list_by_customer(
                query.customer_id, query.limit,
            )
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        return Success([to_transfer_dto(t) for t in transfers if not t.is_deleted])


class CheckDailyLimitHandler:
    """Reports how much of the daily limit a sender has used today."""

    def __init__(
        self,
        repository: TransferRepository,
        authorizer: Authorizer,
        policy: TransferPolicy,
    ):
        self._repository = repository
        self._authorizer = authorizer
        self._policy = policy

    async def handle(self, query: CheckDailyLimit) -> Result[DailyLimitDto]:
        denied = await authorize(self._authorizer, query.caller, TransferAction.READ)
        if denied:
            return denied
        try:
            total = await self._repository.get_daily_total(
                query.customer_id, start_of_day(utc_now()),
            )
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        return Success(DailyLimitDto(
            customer_id=query.customer_id,
            currency=self._policy.base_currency.value,
            total_today=total,
            daily_limit=self._policy.daily_limit,
            remaining=remaining_daily_limit(total, self._policy),
        ))
