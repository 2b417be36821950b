"""Create Transfer Handler — validates, converts, prices, allocates a code, persists, emits.

Invariants:
    - Returns Success(TransferDto) or Failure; expected failures never raise
    - Order: authorize → idempotency replay → domain rules → customers →
      conversion → policy (base amount, daily limit, fee, approval) → code →
      persist → publish
    - A repeated idempotency key returns the transfer it first created; no second
      transfer, no second event. A key reused for a different request fails
    - convertedAmount is computed here once; it is never recomputed later
    - No rate is ever guessed: a converter failure is CONVERSION_UNAVAILABLE
    - transaction_code collisions are regenerated (pre-check + unique constraint),
      bounded by max_code_attempts; exhaustion is STORAGE_UNAVAILABLE (retryable)

Design Decisions:
    - Customer directory is optional: the customer service owns customer lifecycle,
      deployments without it treat customer ids as opaque
    - Policy is optional: without one no fee is charged and no limit applies
    - Daily limit is check-then-insert; two concurrent creates for one sender can
      both pass the check
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from transfer_service.core.commands import CreateTransfer
from transfer_service.core.domain_types import Currency, ErrorKind, TransferAction
from transfer_service.core.enforce_creation import (
    build_amount, check_customer, check_idempotency_key, check_parties,
    check_replay, check_storable, needs_conversion,
)
from transfer_service.core.errors import (
    ConversionUnavailableError,
    CustomerServiceUnavailableError,
    DuplicateIdempotencyKeyError,
    DuplicateTransactionCodeError,
    StorageUnavailableError,
)
from transfer_service.core.money import Money
from transfer_service.core.repository_protocols import (
    Authorizer, CurrencyConverter, CustomerDirectory, EventSink, TransferRepository,
)
from transfer_service.core.result import Failure, Result, Success, fail
from transfer_service.core.transaction_codes import CodeGenerator, code_generator
from transfer_service.core.transfer import Conversion, Transfer, utc_now
from transfer_service.core.transfer_mapper import TransferDto, to_transfer_dto
from transfer_service.core.transfer_policy import (
    TransferPolicy, approval_deadline, calculate_fee, check_daily_limit,
    start_of_day,
)
from transfer_service.services.handler_helpers import (
    authorize, failure_from_error, persist_and_publish,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CODE_ATTEMPTS = 5


@dataclass(frozen=True)
class _Pricing:
    """Policy outcome for one request."""
    amount_in_base: Money | None = None
    fee: Money | None = None
    approval_required_until: datetime | None = None


class CreateTransferHandler:
    """Handles the create-transfer command."""

    def __init__(
        self,
        repository: TransferRepository,
        converter: CurrencyConverter,
        event_sink: EventSink,
        authorizer: Authorizer,
        *,
        generate_code: CodeGenerator | None = None,
        max_code_attempts: int = DEFAULT_MAX_CODE_ATTEMPTS,
        customer_directory: CustomerDirectory | None = None,
        policy: TransferPolicy | None = None,
    ):
        self._repository = repository
        self._converter = converter
        self._event_sink = event_sink
        self._authorizer = authorizer
        self._generate_code = generate_code or code_generator()
        self._max_code_attempts = max_code_attempts
        self._customers = customer_directory
        self._policy = policy

    async def handle(self, command: CreateTransfer) -> Result[TransferDto]:
        denied = await authorize(
            self._authorizer, command.caller, TransferAction.CREATE,
        )
        if denied:
            return denied

        if command.idempotency_key is not None:
            failure = check_idempotency_key(command.idempotency_key)
            if failure:
                return failure
            try:
                existing = await self._repository.get_by_idempotency_key(
                    command.idempotency_key,
                )
            except StorageUnavailableError as e:
                return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
            if existing is not None:
                return self._replay(existing, command)

        failure = check_parties(
            command.sender_customer_id, command.receiver_customer_id,
        )
        if failure:
            return failure

        amount_result = build_amount(command.amount, command.currency)
        if isinstance(amount_result, Failure):
            return amount_result
        amount = amount_result.value

        if self._customers is not None:
            failure = await self._check_customers(command)
            if failure:
                return failure

        conversion = None
        if needs_conversion(command.currency, command.target_currency):
            converted = await self._convert(amount, command.target_currency)
            if isinstance(converted, Failure):
                return converted
            failure = check_storable(converted.value, "converted_amount")
            if failure:
                return failure
            conversion = Conversion(converted.value)

        pricing = _Pricing()
        if self._policy is not None:
            priced = await self._price(command, amount, conversion)
            if isinstance(priced, Failure):
                return priced
            pricing = priced.value

        return await self._persist_with_fresh_code(
            command, amount, conversion, pricing,
        )

    def _replay(self, existing: Transfer, command: CreateTransfer) -> Result[TransferDto]:
        failure = check_replay(existing, command)
        if failure:
            logger.warning(
                "Idempotency key reused with a different request",
                extra={"transfer_id": str(existing.id), "error_code": "INVALID_TRANSFER"},
            )
            return failure
        logger.info(
            f"Idempotent replay of transfer {existing.id}",
            extra={
                "transfer_id": str(existing.id),
                "transaction_code": existing.transaction_code,
            },
        )
        return Success(to_transfer_dto(existing))

    async def _check_customers(self, command: CreateTransfer) -> Failure | None:
        try:
            for role, customer_id in (
                ("sender", command.sender_customer_id),
                ("receiver", command.receiver_customer_id),
            ):
                status = await self._customers.get_status(customer_id)
                failure = check_customer(role, customer_id, status)
                if failure:
                    return failure
        except CustomerServiceUnavailableError as e:
            logger.warning(
                f"Customer service unavailable: {e.message}",
                extra={"error_code": e.code},
            )
            return failure_from_error(e, ErrorKind.CUSTOMER_SERVICE_UNAVAILABLE)
        return None

    async def _convert(self, amount: Money, target: Currency) -> Result[Money]:
        try:
            return Success(await self._converter.convert(amount, target))
        except ConversionUnavailableError as e:
            logger.warning(
                f"Conversion {amount.currency.value}->{target.value} "
                f"unavailable: {e.message}",
                extra={"error_code": e.code},
            )
            return failure_from_error(e, ErrorKind.CONVERSION_UNAVAILABLE)

    async def _price(
        self, command: CreateTransfer, amount: Money, conversion: Conversion | None,
    ) -> Result[_Pricing]:
        policy = self._policy
        if amount.currency == policy.base_currency:
            in_base = amount
        elif conversion is not None and conversion.target_currency == policy.base_currency:
            in_base = conversion.converted
        else:
            converted = await self._convert(amount, policy.base_currency)
            if isinstance(converted, Failure):
                return converted
            in_base = converted.value
        failure = check_storable(in_base, "amount_in_base")
        if failure:
            return failure

        now = utc_now()
        try:
            total_today = await self._repository.get_daily_total(
                command.sender_customer_id, start_of_day(now),
            )
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        failure = check_daily_limit(total_today, in_base, policy)
        if failure:
            logger.info(
                f"Daily limit exceeded for sender {command.sender_customer_id}",
                extra={"error_code": "DAILY_LIMIT_EXCEEDED"},
            )
            return failure

        fee = calculate_fee(in_base, policy)
        failure = check_storable(fee, "transaction_fee")
        if failure:
            return failure
        return Success(_Pricing(in_base, fee, approval_deadline(in_base, policy, now)))

    async def _persist_with_fresh_code(
        self,
        command: CreateTransfer,
        amount: Money,
        conversion: Conversion | None,
        pricing: _Pricing,
    ) -> Result[TransferDto]:
        for attempt in range(1, self._max_code_attempts + 1):
            code = self._generate_code()
            try:
                if await self._repository.transaction_code_exists(code):
                    logger.info(
                        f"Transaction code collision on attempt {attempt}",
                        extra={"attempt": attempt},
                    )
                    continue
                transfer, event = Transfer.create(
                    transaction_code=code,
                    sender_customer_id=command.sender_customer_id,
                    receiver_customer_id=command.receiver_customer_id,
                    amount=amount,
                    conversion=conversion,
                    amount_in_base=pricing.amount_in_base,
                    transaction_fee=pricing.fee,
                    approval_required_until=pricing.approval_required_until,
                    idempotency_key=command.idempotency_key,
                )
                await persist_and_publish(
                    self._repository, self._event_sink, transfer, event,
                )
            except DuplicateTransactionCodeError:
                logger.info(
                    f"Transaction code taken at insert on attempt {attempt}",
                    extra={"attempt": attempt},
                )
                continue
            except DuplicateIdempotencyKeyError:
                return await self._replay_after_conflict(command)
            except StorageUnavailableError as e:
                logger.error(
                    f"Failed to persist transfer: {e.message}",
                    extra={"error_code": e.code},
                )
                return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)

            logger.info(
                f"Transfer created: {transfer.id} - {transfer.amount}",
                extra={
                    "transfer_id": str(transfer.id),
                    "transaction_code": transfer.transaction_code,
                },
            )
            return Success(to_transfer_dto(transfer))

        return fail(
            ErrorKind.STORAGE_UNAVAILABLE,
            "Could not allocate a unique transaction code. Please retry.",
            attempts=self._max_code_attempts,
        )

    async def _replay_after_conflict(self, command: CreateTransfer) -> Result[TransferDto]:
        """A concurrent request with the same key inserted first: return its transfer."""
        try:
            existing = await self._repository.get_by_idempotency_key(
                command.idempotency_key,
            )
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        if existing is None:
            return fail(
                ErrorKind.STORAGE_UNAVAILABLE,
                "Idempotency key conflict could not be resolved. Please retry.",
            )
        return self._replay(existing, command)
