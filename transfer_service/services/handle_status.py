"""Update Transfer Status Handler — moves a transfer along the status graph.

Invariants:
    - Illegal transitions return INVALID_STATUS_TRANSITION and write nothing
    - The write is a compare-and-swap on the status observed at read time;
      a lost race returns CONCURRENT_MODIFICATION and the caller must re-read
    - TransferStatusChanged (old, new) is published only after the write succeeded
    - Completing a transfer whose approval wait has not elapsed returns
      APPROVAL_PENDING; the other transitions are never delayed
"""

import logging

from transfer_service.core.commands import UpdateTransferStatus
from transfer_service.core.domain_types import ErrorKind, TransferAction
from transfer_service.core.enforce_transitions import check_transition
from transfer_service.core.errors import (
    ConcurrentModificationError, StorageUnavailableError,
)
from transfer_service.core.repository_protocols import (
    Authorizer, EventSink, TransferRepository,
)
from transfer_service.core.result import Result, Success, fail
from transfer_service.core.transfer import utc_now
from transfer_service.core.transfer_mapper import TransferDto, to_transfer_dto
from transfer_service.core.transfer_policy import check_approval_window
from transfer_service.services.handler_helpers import (
    authorize, failure_from_error, persist_and_publish,
)

logger = logging.getLogger(__name__)


class UpdateTransferStatusHandler:
    """Handles the update-status command."""

    def __init__(
        self,
        repository: TransferRepository,
        event_sink: EventSink,
        authorizer: Authorizer,
    ):
        self._repository = repository
        self._event_sink = event_sink
        self._authorizer = authorizer

    async def handle(self, command: UpdateTransferStatus) -> Result[TransferDto]:
        denied = await authorize(
            self._authorizer, command.caller, TransferAction.UPDATE_STATUS,
        )
        if denied:
            return denied

        try:
            current = await self._repository.get_by_id(command.transfer_id)
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)
        if current is None or current.is_deleted:
            return fail(
                ErrorKind.TRANSFER_NOT_FOUND,
                f"Transfer '{command.transfer_id}' not found.",
            )

        failure = check_transition(current.status, command.new_status)
        if failure:
            logger.info(
                f"Rejected transition {current.status.value} -> "
                f"{command.new_status.value}",
                extra={"transfer_id": str(current.id), "status": current.status.value},
            )
            return failure

        failure = check_approval_window(current, command.new_status, utc_now())
        if failure:
            logger.info(
                f"Transfer {current.id} still waiting for approval",
                extra={"transfer_id": str(current.id), "error_code": "APPROVAL_PENDING"},
            )
            return failure

        updated, event = current.with_status(command.new_status)
        try:
            await persist_and_publish(
                self._repository, self._event_sink, updated, event,
                expected_status=current.status,
            )
        except ConcurrentModificationError as e:
            logger.warning(
                f"Concurrent status change on transfer {current.id}",
                extra={"transfer_id": str(current.id), "error_code": e.code},
            )
            return failure_from_error(e, ErrorKind.CONCURRENT_MODIFICATION)
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)

        logger.info(
            f"Transfer {updated.id} moved {current.status.value} -> "
            f"{updated.status.value}",
            extra={
                "transfer_id": str(updated.id),
                "transaction_code": updated.transaction_code,
                "status": updated.status.value,
            },
        )
        return Success(to_transfer_dto(updated))
