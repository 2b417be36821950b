"""Add idempotency key, base amount, fee and approval deadline to transfers.

Revision ID: 003_transfer_pricing
Revises: 002_outbox_messages
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003_transfer_pricing"
down_revision: Union[str, None] = "002_outbox_messages"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("transfers", sa.Column("idempotency_key", sa.String(100), nullable=True))
    op.add_column("transfers", sa.Column("base_amount", sa.Numeric(19, 4), nullable=True))
    op.add_column("transfers", sa.Column("base_currency", sa.String(3), nullable=True))
    op.add_column("transfers", sa.Column("transaction_fee", sa.Numeric(19, 4), nullable=True))
    op.add_column(
        "transfers",
        sa.Column("approval_required_until", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_unique_constraint(
        "uq_transfers_idempotency_key", "transfers", ["idempotency_key"],
    )
    op.create_index(
        "ix_transfers_sender_created_at", "transfers",
        ["sender_customer_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_transfers_sender_created_at", table_name="transfers")
    op.drop_constraint("uq_transfers_idempotency_key", "transfers", type_="unique")
    op.drop_column("transfers", "approval_required_until")
    op.drop_column("transfers", "transaction_fee")
    op.drop_column("transfers", "base_currency")
    op.drop_column("transfers", "base_amount")
    op.drop_column("transfers", "idempotency_key")
