"""ORM Models — SQLAlchemy declarative models for persisted state.

Invariants:
    - All models inherit from Base (db/base.py)
    - transfers and outbox_messages are independent tables (no FKs)

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from transfer_service.models.transfer import TransferRecord  # noqa: F401
from transfer_service.models.outbox_message import OutboxMessage  # noqa: F401
