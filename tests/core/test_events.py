"""Domain Events — tests for routing keys and JSON-safe payloads.

Tests cover:
    - event_type() gives a stable key per case
    - event_payload() serializes decimals, ids and enums as strings
    - every event gets a distinct event_id
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from transfer_service.core.domain_types import (
    Currency, CustomerId, TransferId, TransferStatus,
)
from transfer_service.core.events import (
    TransferCreated, TransferDeleted, TransferStatusChanged,
    event_payload, event_type,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _created(**overrides):
    kwargs = dict(
        transfer_id=TransferId(uuid4()),
        transaction_code="12345678",
        sender_customer_id=CustomerId(uuid4()),
        receiver_customer_id=CustomerId(uuid4()),
        amount=Decimal("100.00"),
        currency=Currency.USD,
        converted_amount=None,
        target_currency=None,
        occurred_at=NOW,
    )
    kwargs.update(overrides)
    return TransferCreated(**kwargs)


def test_event_types():
    changed = TransferStatusChanged(
        TransferId(uuid4()), "1", TransferStatus.PENDING, TransferStatus.COMPLETED, NOW,
    )
    deleted = TransferDeleted(TransferId(uuid4()), "1", TransferStatus.FAILED, NOW)
    assert event_type(_created()) == "transfer.created"
    assert event_type(changed) == "transfer.status_changed"
    assert event_type(deleted) == "transfer.deleted"


def test_created_payload_is_json_safe():
    event = _created(converted_amount=Decimal("90.00"), target_currency=Currency.EUR)
    payload = event_payload(event)
    json.dumps(payload)
    assert payload["amount"] == "100.00"
    assert payload["currency"] == "USD"
    assert payload["converted_amount"] == "90.00"
    assert payload["target_currency"] == "EUR"
    assert payload["event_type"] == "transfer.created"


def test_created_payload_without_conversion():
    payload = event_payload(_created())
    assert payload["converted_amount"] is None
    assert payload["target_currency"] is None


def test_status_changed_payload():
    event = TransferStatusChanged(
        TransferId(uuid4()), "1", TransferStatus.PENDING, TransferStatus.FAILED, NOW,
    )
    payload = event_payload(event)
    assert payload["old_status"] == "pending"
    assert payload["new_status"] == "failed"
    assert payload["occurred_at"] == NOW.isoformat()


def test_event_ids_are_unique():
    assert _created().event_id != _created().event_id


def test_created_payload_with_fee_and_approval():
    deadline = datetime(2026, 1, 1, 0, 5, tzinfo=timezone.utc)
    payload = event_payload(_created(
        transaction_fee=Decimal("6.00"),
        fee_currency=Currency.USD,
        approval_required_until=deadline,
    ))
    assert payload["transaction_fee"] == "6.00"
    assert payload["fee_currency"] == "USD"
    assert payload["approval_required_until"] == deadline.isoformat()
