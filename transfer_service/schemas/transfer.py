"""Transfer Schemas — Pydantic models for the transfer API boundary.

Invariants:
    - Schemas check shape only (types, enums); transfer rules such as positive
      amount, currency precision, and distinct parties belong to the core so
      the API reports them as INVALID_TRANSFER
    - Amounts are parsed as Decimal; NaN/Infinity are rejected here
    - TransferResponse mirrors TransferDto field-for-field; Decimals serialize
      as strings so no precision is lost in JSON
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from transfer_service.core.domain_types import Currency, TransferStatus


class TransferCreate(BaseModel):
    """Transfer creation request."""
    sender_customer_id: UUID
    receiver_customer_id: UUID
    amount: Decimal = Field(allow_inf_nan=False)
    currency: Currency
    target_currency: Currency | None = None


class TransferStatusUpdate(BaseModel):
    status: TransferStatus


class TransferResponse(BaseModel):
    """Public-facing transfer data (built from TransferDto)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    transaction_code: str
    sender_customer_id: UUID
    receiver_customer_id: UUID
    amount: Decimal
    currency: str
    status: str
    converted_amount: Decimal | None = None
    target_currency: str | None = None
    created_at: datetime
    updated_at: datetime
    transaction_fee: Decimal | None = None
    fee_currency: str | None = None
    approval_required_until: datetime | None = None


class DailyLimitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: UUID
    currency: str
    total_today: Decimal
    daily_limit: Decimal
    remaining: Decimal
