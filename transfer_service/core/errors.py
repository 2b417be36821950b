"""Error Hierarchy — typed, categorized exceptions for transfer-service failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; infrastructure errors (5xx) are critical
    - Handlers never let domain errors escape: they become Result.Failure values.
      Exceptions are raised only by collaborators (repository, converter, sinks)
      and at the HTTP edge via error_from_descriptor()
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TransferServiceError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from transfer_service.core.domain_types import ErrorKind
from transfer_service.core.result import ErrorDescriptor


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] | None = None


class TransferServiceError(Exception):
    """Base exception for all transfer-service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "details": self.context.details or {},
            }
        }


# ─── Domain Errors (4xx) ─────────────────────────────────────────

class InvalidTransferError(TransferServiceError):
    """Creation request violates transfer invariants."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TRANSFER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class TransferNotFoundError(TransferServiceError):
    """No live transfer matches the requested id or code."""
    def __init__(self, message: str = "Transfer not found", context: ErrorContext | None = None):
        super().__init__(
            message, "TRANSFER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class InvalidStatusTransitionError(TransferServiceError):
    """Requested status change is not in the transition graph."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STATUS_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class ConcurrentModificationError(TransferServiceError):
    """Stored status no longer matches the status the caller observed."""
    def __init__(
        self,
        message: str = "Transfer was modified concurrently; re-read and retry.",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CONCURRENT_MODIFICATION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class ForbiddenError(TransferServiceError):
    """Caller is not authorized for the action."""
    def __init__(self, message: str = "Caller is not authorized", context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class CustomerRejectedError(TransferServiceError):
    """Sender or receiver is unknown or not active."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


class DailyLimitExceededError(TransferServiceError):
    """Sender's transfers today plus this one would pass the daily limit."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "DAILY_LIMIT_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 422,
        )


class ApprovalPendingError(TransferServiceError):
    """High-amount transfer completed before its approval wait elapsed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "APPROVAL_PENDING", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (5xx) ─────────────────────────────────

class StorageUnavailableError(TransferServiceError):
    """Persistence layer failed; safe for the caller to retry."""
    def __init__(
        self, message: str, operation: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Storage {operation} failed: {message}" if operation else message,
            "STORAGE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class DuplicateTransactionCodeError(TransferServiceError):
    """Insert hit the unique constraint on transaction_code."""
    def __init__(self, transaction_code: str, context: ErrorContext | None = None):
        super().__init__(
            f"Transaction code '{transaction_code}' already exists",
            "DUPLICATE_TRANSACTION_CODE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.transaction_code = transaction_code


class DuplicateIdempotencyKeyError(TransferServiceError):
    """Insert hit the unique constraint on idempotency_key."""
    def __init__(self, idempotency_key: str, context: ErrorContext | None = None):
        super().__init__(
            "Idempotency key already used",
            "DUPLICATE_IDEMPOTENCY_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.idempotency_key = idempotency_key


class ConversionUnavailableError(TransferServiceError):
    """No rate available for the currency pair."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONVERSION_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )


class CustomerServiceUnavailableError(TransferServiceError):
    """Customer service call failed or returned garbage."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CUSTOMER_SERVICE_UNAVAILABLE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 503,
        )


class CorruptedRecordError(TransferServiceError):
    """A persisted row violates entity invariants. Fatal: never mapped to Failure."""
    def __init__(self, record_id: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Transfer record {record_id} is corrupted: {reason}",
            "CORRUPTED_RECORD", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Failure → exception (HTTP edge) ─────────────────────────────

def error_from_descriptor(error: ErrorDescriptor) -> TransferServiceError:
    """Translate a Result.Failure into the exception the API layer raises."""
    ctx = ErrorContext(details=dict(error.details) or None)
    match error.kind:
        case ErrorKind.INVALID_TRANSFER:
            return InvalidTransferError(error.message, ctx)
        case ErrorKind.TRANSFER_NOT_FOUND:
            return TransferNotFoundError(error.message, ctx)
        case ErrorKind.INVALID_STATUS_TRANSITION:
            return InvalidStatusTransitionError(error.message, ctx)
        case ErrorKind.CONVERSION_UNAVAILABLE:
            return ConversionUnavailableError(error.message, ctx)
        case ErrorKind.CONCURRENT_MODIFICATION:
            return ConcurrentModificationError(error.message, ctx)
        case ErrorKind.STORAGE_UNAVAILABLE:
            return StorageUnavailableError(error.message, context=ctx)
        case ErrorKind.FORBIDDEN:
            return ForbiddenError(error.message, ctx)
        case ErrorKind.CUSTOMER_NOT_FOUND:
            return CustomerRejectedError(error.message, "CUSTOMER_NOT_FOUND", ctx)
        case ErrorKind.CUSTOMER_NOT_ACTIVE:
            return CustomerRejectedError(error.message, "CUSTOMER_NOT_ACTIVE", ctx)
        case ErrorKind.CUSTOMER_SERVICE_UNAVAILABLE:
            return CustomerServiceUnavailableError(error.message, ctx)
        case ErrorKind.DAILY_LIMIT_EXCEEDED:
            return DailyLimitExceededError(error.message, ctx)
        case ErrorKind.APPROVAL_PENDING:
            return ApprovalPendingError(error.message, ctx)
    raise ValueError(f"Unmapped error kind: {error.kind}")
