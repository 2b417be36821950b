"""API Dependencies — per-request wiring of handlers to infrastructure.

Invariants:
    - Caller identity comes only from the X-Api-Key header (plus X-Request-Id for tracing)
    - Repository and OutboxEventSink share the request's AsyncSession (get_db is
      cached per request by FastAPI), so the outbox row commits with the transfer
    - Every handler is built explicitly here; no service locator

Design Decisions:
    - Settings read through Depends(get_settings) so tests can override them
    - The customer service httpx client is owned by the app lifespan
      (app.state.customer_client); absent client → no customer checks
"""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_service.config import Settings, get_settings
from transfer_service.core.commands import CallerContext
from transfer_service.core.transfer_policy import TransferPolicy
from transfer_service.core.transaction_codes import code_generator
from transfer_service.infrastructure.authorization import ApiKeyAuthorizer
from transfer_service.infrastructure.currency_converter import (
    StaticRateConverter, parse_rate_table,
)
from transfer_service.infrastructure.customer_directory import HttpCustomerDirectory
from transfer_service.infrastructure.database import get_db
from transfer_service.infrastructure.event_sinks import (
    LoggingEventSink, OutboxEventSink,
)
from transfer_service.infrastructure.transfer_repository import SqlTransferRepository
from transfer_service.services.handle_create import CreateTransferHandler
from transfer_service.services.handle_delete import DeleteTransferHandler
from transfer_service.services.handle_queries import (
    CheckDailyLimitHandler, GetTransferByCodeHandler, GetTransferByIdHandler,
    ListCustomerTransfersHandler,
)
from transfer_service.services.handle_status import UpdateTransferStatusHandler


# ─── Collaborators ───────────────────────────────────────────────

def get_caller(
    x_api_key: str | None = Header(default=None),
    x_request_id: str | None = Header(default=None),
) -> CallerContext:
    return CallerContext(api_key=x_api_key, request_id=x_request_id)


def get_repository(db: AsyncSession = Depends(get_db)) -> SqlTransferRepository:
    return SqlTransferRepository(db)


def get_event_sink(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if settings.event_sink == "outbox":
        return OutboxEventSink(db)
    return LoggingEventSink()


def get_authorizer(settings: Settings = Depends(get_settings)) -> ApiKeyAuthorizer:
    return ApiKeyAuthorizer(settings.api_keys)


def get_converter(settings: Settings = Depends(get_settings)) -> StaticRateConverter:
    return StaticRateConverter(parse_rate_table(settings.exchange_rates))


def get_policy(settings: Settings = Depends(get_settings)) -> TransferPolicy:
    return settings.transfer_policy()


def get_customer_directory(request: Request) -> HttpCustomerDirectory | None:
    client = getattr(request.app.state, "customer_client", None)
    return HttpCustomerDirectory(client) if client is not None else None


# ─── Handlers ────────────────────────────────────────────────────

def get_create_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    converter: StaticRateConverter = Depends(get_converter),
    event_sink=Depends(get_event_sink),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
    customers: HttpCustomerDirectory | None = Depends(get_customer_directory),
    policy: TransferPolicy = Depends(get_policy),
    settings: Settings = Depends(get_settings),
) -> CreateTransferHandler:
    return CreateTransferHandler(
        repository, converter, event_sink, authorizer,
        generate_code=code_generator(settings.transaction_code_length),
        max_code_attempts=settings.transaction_code_max_attempts,
        customer_directory=customers,
        policy=policy,
    )


def get_by_code_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
) -> GetTransferByCodeHandler:
    return GetTransferByCodeHandler(repository, authorizer)


def get_by_id_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
) -> GetTransferByIdHandler:
    return GetTransferByIdHandler(repository, authorizer)


def get_list_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
) -> ListCustomerTransfersHandler:
    return ListCustomerTransfersHandler(repository, authorizer)


def get_daily_limit_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
    policy: TransferPolicy = Depends(get_policy),
) -> CheckDailyLimitHandler:
    return CheckDailyLimitHandler(repository, authorizer, policy)


def get_status_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    event_sink=Depends(get_event_sink),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
) -> UpdateTransferStatusHandler:
    return UpdateTransferStatusHandler(repository, event_sink, authorizer)


def get_delete_handler(
    repository: SqlTransferRepository = Depends(get_repository),
    event_sink=Depends(get_event_sink),
    authorizer: ApiKeyAuthorizer = Depends(get_authorizer),
) -> DeleteTransferHandler:
    return DeleteTransferHandler(repository, event_sink, authorizer)
