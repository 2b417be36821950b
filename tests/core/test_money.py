"""Money — tests for exact decimal amounts bound to a currency.

Tests cover:
    - Amounts are quantized to the currency's minor units
    - Extra precision, floats, and non-finite values are rejected
    - convert_at rounds half-up to the target's minor units
"""

from decimal import Decimal

import pytest

from transfer_service.core.domain_types import Currency
from transfer_service.core.money import Money, parse_amount


def test_money_quantizes_to_minor_units():
    assert Money(Decimal("100"), Currency.USD).amount == Decimal("100.00")
    assert str(Money(Decimal("100"), Currency.USD).amount) == "100.00"


def test_money_accepts_string_and_int():
    assert Money("12.50", Currency.EUR).amount == Decimal("12.50")
    assert Money(7, Currency.TRY).amount == Decimal("7.00")


def test_money_accepts_trailing_zeros_beyond_minor_units():
    # Numeric(19, 4) columns return 100.0000
    assert Money(Decimal("100.0000"), Currency.USD).amount == Decimal("100.00")


def test_money_rejects_extra_precision():
    with pytest.raises(ValueError, match="2 decimal places"):
        Money(Decimal("10.005"), Currency.USD)


def test_money_rejects_fraction_for_zero_decimal_currency():
    with pytest.raises(ValueError):
        Money(Decimal("100.5"), Currency.JPY)


def test_parse_amount_rejects_float():
    with pytest.raises(ValueError, match="Float"):
        parse_amount(0.1)


@pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", ""])
def test_parse_amount_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_is_positive():
    assert Money("0.01", Currency.USD).is_positive
    assert not Money("0", Currency.USD).is_positive
    assert not Money("-5", Currency.USD).is_positive


def test_convert_at_usd_to_eur():
    converted = Money("100", Currency.USD).convert_at(Decimal("0.9"), Currency.EUR)
    assert converted == Money(Decimal("90.00"), Currency.EUR)


def test_convert_at_rounds_half_up():
    # 0.05 * 0.5 = 0.025 → 0.03
    converted = Money("0.05", Currency.USD).convert_at(Decimal("0.5"), Currency.EUR)
    assert converted.amount == Decimal("0.03")


def test_convert_at_to_zero_decimal_currency():
    converted = Money("10.00", Currency.USD).convert_at(Decimal("151.55"), Currency.JPY)
    assert converted.amount == Decimal("1516")


def test_str_includes_currency():
    assert str(Money("5", Currency.GBP)) == "5.00 GBP"
