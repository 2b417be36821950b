"""Transfer Policy — fee, daily limit, and high-amount approval rules.

Invariants:
    - All functions are PURE: the clock is passed in, nothing is read from the environment
    - Every rule is evaluated on the amount expressed in the policy's base currency
    - fee = base_fee + amount_in_base * fee_percentage, rounded half-up to minor units
    - Daily total counts the sender's PENDING and COMPLETED transfers since 00:00 UTC
    - A transfer strictly above high_amount_threshold waits approval_wait before it
      may be completed; cancel and fail are never delayed

Design Decisions:
    - One frozen policy value built from Settings and handed to handlers, so tests
      can state limits inline instead of patching configuration
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from transfer_service.core.domain_types import Currency, ErrorKind, TransferStatus
from transfer_service.core.money import Money
from transfer_service.core.result import Failure, fail
from transfer_service.core.transfer import Transfer

DAILY_TOTAL_STATUSES = frozenset({TransferStatus.PENDING, TransferStatus.COMPLETED})


@dataclass(frozen=True)
class TransferPolicy:
    base_currency: Currency
    daily_limit: Decimal
    high_amount_threshold: Decimal
    approval_wait: timedelta
    base_fee: Decimal
    fee_percentage: Decimal


def calculate_fee(amount_in_base: Money, policy: TransferPolicy) -> Money:
    total = policy.base_fee + amount_in_base.amount * policy.fee_percentage
    quantum = Decimal(1).scaleb(-amount_in_base.currency.minor_units)
    return Money(total.quantize(quantum, rounding=ROUND_HALF_UP), amount_in_base.currency)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def remaining_daily_limit(total_today: Decimal, policy: TransferPolicy) -> Decimal:
    return max(Decimal(0), policy.daily_limit - total_today)


def check_daily_limit(
    total_today: Decimal, amount_in_base: Money, policy: TransferPolicy,
) -> Failure | None:
    remaining = policy.daily_limit - total_today
    if amount_in_base.amount <= remaining:
        return None
    remaining = max(Decimal(0), remaining)
    return fail(
        ErrorKind.DAILY_LIMIT_EXCEEDED,
        f"Daily transfer limit exceeded. Remaining: {remaining:.2f} "
        f"{policy.base_currency.value}",
        daily_limit=str(policy.daily_limit),
        remaining=str(remaining),
        currency=policy.base_currency.value,
    )


def approval_deadline(
    amount_in_base: Money, policy: TransferPolicy, now: datetime,
) -> datetime | None:
    if amount_in_base.amount > policy.high_amount_threshold:
        return now + policy.approval_wait
    return None


def check_approval_window(
    transfer: Transfer, target: TransferStatus, now: datetime,
) -> Failure | None:
    """Completing a high-amount transfer before its deadline is rejected."""
    deadline = transfer.approval_required_until
    if target != TransferStatus.COMPLETED or deadline is None or deadline <= now:
        return None
    minutes = math.ceil((deadline - now).total_seconds() / 60)
    return fail(
        ErrorKind.APPROVAL_PENDING,
        f"Transfer approval required. Please wait {minutes} more minute(s).",
        approval_required_until=deadline.isoformat(),
    )
