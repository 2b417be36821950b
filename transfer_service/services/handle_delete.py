"""Delete Transfer Handler — soft delete (tombstone) for terminal transfers.

Invariants:
    - Rows are never removed; deleted_at is set and reads stop returning the transfer
    - Only terminal statuses may be tombstoned; PENDING/COMPLETED are rejected
    - Same compare-and-swap as status updates; TransferDeleted published after the write
"""

import logging

from transfer_service.core.commands import DeleteTransfer
from transfer_service.core.domain_types import ErrorKind, TransferAction
from transfer_service.core.enforce_transitions import check_deletable
from transfer_service.core.errors import (
    ConcurrentModificationError, StorageUnavailableError,
)
from transfer_service.core.repository_protocols import (
    Authorizer, EventSink, TransferRepository,
)
from transfer_service.core.result import Result, Success, fail
from transfer_service.core.transfer_mapper import TransferDto, to_transfer_dto
from transfer_service.services.handler_helpers import (
    authorize, failure_from_error, persist_and_publish,
)

logger = logging.getLogger(__name__)


class DeleteTransferHandler:

    def __init__(
        self,
        repository: TransferRepository,
        event_sink: EventSink,
        authorizer: Authorizer,
    ):
        self._repository = repository
        self._event_sink = event_sink
        self._authorizer = authorizer

    async def handle(self, command: DeleteTransfer) -> Result[TransferDto]:
        denied = await authorize(
            self._authorizer, command.caller, TransferAction.DELETE,
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

        failure = check_deletable(current.status)
        if failure:
            return failure

        tombstone, event = current.tombstoned()
        try:
            await persist_and_publish(
                self._repository, self._event_sink, tombstone, event,
                expected_status=current.status,
            )
        except ConcurrentModificationError as e:
            return failure_from_error(e, ErrorKind.CONCURRENT_MODIFICATION)
        except StorageUnavailableError as e:
            return failure_from_error(e, ErrorKind.STORAGE_UNAVAILABLE)

        logger.info(
            f"Transfer {tombstone.id} archived",
            extra={
                "transfer_id": str(tombstone.id),
                "transaction_code": tombstone.transaction_code,
            },
        )
        return Success(to_transfer_dto(tombstone))
