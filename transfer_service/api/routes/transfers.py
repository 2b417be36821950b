"""Transfer Routes — create, read, status change, and soft delete.

Invariants:
    - Routes build a command/query, call one handler, unwrap the Result
    - POST returns 201; DELETE returns the tombstoned transfer
    - GET /by-code/{code} is the idempotent recovery path for a lost POST response
    - POST with a repeated Idempotency-Key header returns the original transfer
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status

from transfer_service.api.deps import (
    get_by_code_handler, get_by_id_handler, get_caller, get_create_handler,
    get_delete_handler, get_status_handler,
)
from transfer_service.api.routes.result_http import unwrap
from transfer_service.core.commands import (
    CallerContext, CreateTransfer, DeleteTransfer, GetTransferByCode,
    GetTransferById, UpdateTransferStatus,
)
from transfer_service.core.domain_types import CustomerId, TransferId
from transfer_service.schemas.transfer import (
    TransferCreate, TransferResponse, TransferStatusUpdate,
)
from transfer_service.services.handle_create import CreateTransferHandler
from transfer_service.services.handle_delete import DeleteTransferHandler
from transfer_service.services.handle_queries import (
    GetTransferByCodeHandler, GetTransferByIdHandler,
)
from transfer_service.services.handle_status import UpdateTransferStatusHandler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.post(
    "", response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transfer(
    body: TransferCreate,
    idempotency_key: str | None = Header(default=None),
    caller: CallerContext = Depends(get_caller),
    handler: CreateTransferHandler = Depends(get_create_handler),
):
    result = await handler.handle(CreateTransfer(
        caller=caller,
        sender_customer_id=CustomerId(body.sender_customer_id),
        receiver_customer_id=CustomerId(body.receiver_customer_id),
        amount=body.amount,
        currency=body.currency,
        target_currency=body.target_currency,
        idempotency_key=idempotency_key,
    ))
    return TransferResponse.model_validate(unwrap(result))


@router.get("/by-code/{transaction_code}", response_model=TransferResponse)
async def get_transfer_by_code(
    transaction_code: str,
    caller: CallerContext = Depends(get_caller),
    handler: GetTransferByCodeHandler = Depends(get_by_code_handler),
):
    result = await handler.handle(GetTransferByCode(caller, transaction_code))
    return TransferResponse.model_validate(unwrap(result))


@router.get("/{transfer_id}", response_model=TransferResponse)
async def get_transfer(
    transfer_id: UUID,
    caller: CallerContext = Depends(get_caller),
    handler: GetTransferByIdHandler = Depends(get_by_id_handler),
):
    result = await handler.handle(GetTransferById(caller, TransferId(transfer_id)))
    return TransferResponse.model_validate(unwrap(result))


@router.patch("/{transfer_id}/status", response_model=TransferResponse)
async def update_transfer_status(
    transfer_id: UUID,
    body: TransferStatusUpdate,
    caller: CallerContext = Depends(get_caller),
    handler: UpdateTransferStatusHandler = Depends(get_status_handler),
):
    result = await handler.handle(UpdateTransferStatus(
        caller, TransferId(transfer_id), body.status,
    ))
    return TransferResponse.model_validate(unwrap(result))


@router.delete("/{transfer_id}", response_model=TransferResponse)
async def delete_transfer(
    transfer_id: UUID,
    caller: CallerContext = Depends(get_caller),
    handler: DeleteTransferHandler = Depends(get_delete_handler),
):
    result = await handler.handle(DeleteTransfer(caller, TransferId(transfer_id)))
    return TransferResponse.model_validate(unwrap(result))
