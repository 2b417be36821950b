"""Create transfers table.

Revision ID: 001_create_transfers
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_create_transfers"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "transfers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("transaction_code", sa.String(32), nullable=False, unique=True),
        sa.Column("sender_customer_id", UUID(as_uuid=True), nullable=False),
        sa.Column("receiver_customer_id", UUID(as_uuid=True), nullable=False),
        sa.Column("amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("converted_amount", sa.Numeric(19, 4), nullable=True),
        sa.Column("target_currency", sa.String(3), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_transfers_sender_customer_id", "transfers", ["sender_customer_id"])
    op.create_index("ix_transfers_receiver_customer_id", "transfers", ["receiver_customer_id"])
    op.create_index("ix_transfers_created_at", "transfers", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_transfers_created_at", table_name="transfers")
    op.drop_index("ix_transfers_receiver_customer_id", table_name="transfers")
    op.drop_index("ix_transfers_sender_customer_id", table_name="transfers")
    op.drop_table("transfers")
