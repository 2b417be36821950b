"""Money — exact decimal amount bound to a currency.

Invariants:
    - amount is a Decimal quantized to the currency's minor units
    - Construction never rounds: extra precision is rejected (ValueError)
    - Floats are rejected outright (binary fractions are not money)

Design Decisions:
    - Rounding happens only in explicit operations (convert_at) using ROUND_HALF_UP
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from transfer_service.core.domain_types import Currency


def _quantum(currency: Currency) -> Decimal:
    return Decimal(1).scaleb(-currency.minor_units)


def parse_amount(value: Decimal | int | str) -> Decimal:
    """Coerce int/str/Decimal to a finite Decimal. Raises ValueError otherwise."""
    if isinstance(value, float):
        raise ValueError(f"Float amounts are not accepted: {value!r}")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid amount format: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return amount


@dataclass(frozen=True)
class Money:
    """Monetary value with minor-unit precision preserved exactly."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        amount = parse_amount(self.amount)
        quantum = _quantum(self.currency)
        try:
            quantized = amount.quantize(quantum)
        except InvalidOperation as e:
            raise ValueError(f"Amount out of range: {amount}") from e
        if quantized != amount:
            raise ValueError(
                f"{self.currency.value} supports {self.currency.minor_units} "
                f"decimal places, got {amount}",
            )
        object.__setattr__(self, "amount", quantized)

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    def convert_at(self, rate: Decimal, target: Currency) -> "Money":
        """Multiply by rate, rounding half-up to the target's minor units."""
        converted = (self.amount * rate).quantize(
            _quantum(target), rounding=ROUND_HALF_UP,
        )
        return Money(converted, target)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"
