"""Domain Types — identity wrappers and the enums every layer agrees on.

Invariants:
    - TransferId, CustomerId wrap UUIDs — never use bare UUID in domain logic
    - All valid states encoded as Enums — no raw string matching
    - Enum values are the stable tokens exposed to consumers and persisted

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

TransferId = NewType("TransferId", UUID)
CustomerId = NewType("CustomerId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class TransferStatus(str, Enum):
    """Transfer lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REVERSED = "reversed"


class Currency(str, Enum):
    """ISO 4217 codes accepted by the transfer core."""
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"

    @property
    def minor_units(self) -> int:
        """Number of decimal places in the currency's smallest unit."""
        return _MINOR_UNITS[self]


_MINOR_UNITS = {
    Currency.TRY: 2,
    Currency.USD: 2,
    Currency.EUR: 2,
    Currency.GBP: 2,
    Currency.JPY: 0,
}


class CustomerStatus(str, Enum):
    """Customer status as reported by the customer service."""
    ACTIVE = "active"
    PASSIVE = "passive"
    BLOCKED = "blocked"


class TransferAction(str, Enum):
    """Actions checked against the authorization capability."""
    CREATE = "create"
    READ = "read"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"


class ErrorKind(str, Enum):
    """Typed failure kinds carried by Result.Failure."""
    INVALID_TRANSFER = "invalid_transfer"
    TRANSFER_NOT_FOUND = "transfer_not_found"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    CONVERSION_UNAVAILABLE = "conversion_unavailable"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    FORBIDDEN = "forbidden"
    CUSTOMER_NOT_FOUND = "customer_not_found"
    CUSTOMER_NOT_ACTIVE = "customer_not_active"
    CUSTOMER_SERVICE_UNAVAILABLE = "customer_service_unavailable"
    DAILY_LIMIT_EXCEEDED = "daily_limit_exceeded"
    APPROVAL_PENDING = "approval_pending"
