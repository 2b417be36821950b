"""Static Rate Converter — CurrencyConverter backed by a configured rate table.

Invariants:
    - Rates are exact Decimals > 0, keyed by (source, target)
    - Missing pair → ConversionUnavailableError; no inverse or cross-rate guessing
    - Result rounded half-up to the target currency's minor units (Money.convert_at)
"""

import logging
from decimal import Decimal

from transfer_service.core.domain_types import Currency
from transfer_service.core.errors import ConversionUnavailableError
from transfer_service.core.money import Money, parse_amount

logger = logging.getLogger(__name__)

RateTable = dict[tuple[Currency, Currency], Decimal]


def parse_rate_table(raw: dict[str, str]) -> RateTable:
    """Parse {"USD:EUR": "0.9"} into a RateTable. Raises ValueError on bad entries."""
    rates: RateTable = {}
    for pair, value in raw.items():
        source, sep, target = pair.partition(":")
        if not sep:
            raise ValueError(f"Rate key must look like 'USD:EUR', got {pair!r}")
        rate = parse_amount(value)
        if rate <= 0:
            raise ValueError(f"Rate for {pair} must be positive, got {value!r}")
        rates[(Currency(source.strip().upper()), Currency(target.strip().upper()))] = rate
    return rates


class StaticRateConverter:

    def __init__(self, rates: RateTable):
        self._rates = dict(rates)

    async def convert(self, amount: Money, target: Currency) -> Money:
        if amount.currency == target:
            return amount
        rate = self._rates.get((amount.currency, target))
        if rate is None:
            logger.warning(
                f"No rate configured for {amount.currency.value}->{target.value}",
                extra={"error_code": "CONVERSION_UNAVAILABLE"},
            )
            raise ConversionUnavailableError(
                f"No exchange rate available for "
                f"{amount.currency.value} to {target.value}.",
            )
        return amount.convert_at(rate, target)
