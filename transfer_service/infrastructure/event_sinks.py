"""Event Sinks — EventSink implementations: structured log line or outbox row.

Invariants:
    - LoggingEventSink is not transactional: it runs after the transfer change
      is committed, and its failures are logged by the handler helpers
    - OutboxEventSink is transactional: it stages one outbox_messages row per
      event on the repository's session, and the row commits with the transfer
    - An outbox write failure raises StorageUnavailableError and the whole unit
      of work is rolled back

Design Decisions:
    - Outbox over direct broker publish: a relay can deliver rows later
      without the request path depending on broker availability
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transfer_service.core.errors import StorageUnavailableError
from transfer_service.core.events import DomainEvent, event_payload, event_type
from transfer_service.models.outbox_message import OutboxMessage

logger = logging.getLogger(__name__)


class LoggingEventSink:
    """Emits each event as an INFO log record with the payload attached."""

    transactional = False

    def __init__(self, logger_name: str = "transfer_service.events"):
        self._logger = logging.getLogger(logger_name)

    async def publish(self, event: DomainEvent) -> None:
        kind = event_type(event)
        self._logger.info(
            f"Domain event {kind}",
            extra={
                "event_type": kind,
                "transfer_id": str(event.transfer_id),
                "transaction_code": event.transaction_code,
                "payload": event_payload(event),
            },
        )


class OutboxEventSink:
    """Stages each event as an outbox_messages row in the caller's transaction."""

    transactional = True

    def __init__(self, db: AsyncSession):
        self._db = db

    async def publish(self, event: DomainEvent) -> None:
        message = OutboxMessage(
            event_id=event.event_id,
            event_type=event_type(event),
            aggregate_id=event.transfer_id,
            payload=event_payload(event),
            occurred_at=event.occurred_at,
        )
        try:
            self._db.add(message)
            await self._db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Outbox write failed: {e}")
            raise StorageUnavailableError("Outbox write failed", "outbox") from e
