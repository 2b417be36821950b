"""Customer Transfer Routes — a customer's transfers and daily limit usage.

Invariants:
    - limit is validated by the handler (1..100), so violations surface as INVALID_TRANSFER
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from transfer_service.api.deps import (
    get_caller, get_daily_limit_handler, get_list_handler,
)
from transfer_service.api.routes.result_http import unwrap
from transfer_service.core.commands import (
    CallerContext, CheckDailyLimit, ListCustomerTransfers,
)
from transfer_service.core.domain_types import CustomerId
from transfer_service.schemas.transfer import DailyLimitResponse, TransferResponse
from transfer_service.services.handle_queries import (
    CheckDailyLimitHandler, ListCustomerTransfersHandler,
)

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.get("/{customer_id}/transfers", response_model=list[TransferResponse])
async def list_customer_transfers(
    customer_id: UUID,
    limit: int = Query(50),
    caller: CallerContext = Depends(get_caller),
    handler: ListCustomerTransfersHandler = Depends(get_list_handler),
):
    result = await handler.handle(
        ListCustomerTransfers(caller, CustomerId(customer_id), limit),
    )
    return [TransferResponse.model_validate(dto) for dto in unwrap(result)]


@router.get("/{customer_id}/daily-limit", response_model=DailyLimitResponse)
async def check_daily_limit(
    customer_id: UUID,
    caller: CallerContext = Depends(get_caller),
    handler: CheckDailyLimitHandler = Depends(get_daily_limit_handler),
):
    result = await handler.handle(CheckDailyLimit(caller, CustomerId(customer_id)))
    return DailyLimitResponse.model_validate(unwrap(result))
