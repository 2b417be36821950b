"""Handler Helpers — shared steps every transfer handler runs.

Invariants:
    - authorize() returns Failure(FORBIDDEN) instead of raising
    - persist_and_publish() is one unit of work: the transfer write and a
      transactional sink's write (outbox row) commit together or not at all
    - A non-transactional sink publishes only after the commit; its failures are
      logged and never undo the committed write
    - The unit is shielded from caller cancellation: once started it runs to
      commit or rollback, so persisted state and emitted events never diverge
    - When the caller was cancelled, the detached unit's outcome is still logged

Design Decisions:
    - Repository doubles as the unit of work (commit/rollback) so handlers get
      atomic save + outbox without a separate transaction collaborator
"""

import asyncio
import logging
from functools import partial

from transfer_service.core.commands import CallerContext
from transfer_service.core.domain_types import (
    ErrorKind, TransferAction, TransferStatus,
)
from transfer_service.core.errors import TransferServiceError
from transfer_service.core.events import DomainEvent, event_type
from transfer_service.core.repository_protocols import (
    Authorizer, EventSink, TransferRepository,
)
from transfer_service.core.result import Failure, fail
from transfer_service.core.transfer import Transfer

logger = logging.getLogger(__name__)


async def authorize(
    authorizer: Authorizer, caller: CallerContext, action: TransferAction,
) -> Failure | None:
    if await authorizer.is_authorized(caller, action):
        return None
    logger.warning(
        f"Caller not authorized for {action.value}",
        extra={"error_code": "FORBIDDEN", "request_id": caller.request_id},
    )
    return fail(
        ErrorKind.FORBIDDEN,
        f"Caller is not authorized to {action.value.replace('_', ' ')} transfers.",
        action=action.value,
    )


async def persist_and_publish(
    repository: TransferRepository,
    sink: EventSink,
    transfer: Transfer,
    event: DomainEvent,
    expected_status: TransferStatus | None = None,
) -> None:
    """Save and commit the transfer with its event. Raises if nothing was committed."""
    unit = asyncio.ensure_future(
        _save_then_publish(repository, sink, transfer, event, expected_status),
    )
    try:
        await asyncio.shield(unit)
    except asyncio.CancelledError:
        unit.add_done_callback(partial(_log_detached_outcome, transfer, event))
        raise


async def _save_then_publish(
    repository: TransferRepository,
    sink: EventSink,
    transfer: Transfer,
    event: DomainEvent,
    expected_status: TransferStatus | None,
) -> None:
    # A failed save leaves nothing staged, so only later steps need a rollback
    await repository.save(transfer, expected_status)
    try:
        if sink.transactional:
            await sink.publish(event)
        await repository.commit()
    except Exception:
        await repository.rollback()
        raise

    if sink.transactional:
        return
    try:
        await sink.publish(event)
    except TransferServiceError as e:
        logger.error(
            f"Event publish failed for transfer {transfer.id}: {e.message}",
            extra={
                "transfer_id": str(transfer.id),
                "event_type": event_type(event),
                "error_code": e.code,
            },
            exc_info=True,
        )


def _log_detached_outcome(
    transfer: Transfer, event: DomainEvent, unit: asyncio.Future,
) -> None:
    extra = {"transfer_id": str(transfer.id), "event_type": event_type(event)}
    if unit.cancelled():
        logger.error(
            f"Write for transfer {transfer.id} was cancelled after its caller",
            extra=extra,
        )
        return
    error = unit.exception()
    if error is not None:
        logger.error(
            f"Write for transfer {transfer.id} failed after its caller was cancelled",
            extra=extra,
            exc_info=error,
        )
        return
    logger.info(
        f"Write for transfer {transfer.id} finished after its caller was cancelled",
        extra=extra,
    )


def failure_from_error(error: TransferServiceError, kind: ErrorKind) -> Failure:
    """Collaborator exception → Failure, keeping the user-facing message."""
    return fail(kind, error.message, code=error.code)
