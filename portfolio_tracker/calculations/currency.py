"""
Currency Conversion and Formatting

CRITICAL: convert_currency is the single place amounts are rounded.
Scaling an already-converted value a second time shows INR totals in
the billions. So:
- there is one rate table (PortfolioConfig.exchange_rates)
- there is one conversion entry point (convert_currency)
- conversion rounds to an integer unit before returning
- nothing downstream re-rounds or re-scales a converted value

Formatting never raises: unknown codes and bad amounts fall back to a
base-currency rendering and log a warning.
"""

import math
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Any

import structlog

from portfolio_tracker.calculations.portfolio import PortfolioLike, _bucket_values
from portfolio_tracker.config.settings import PortfolioConfig
from portfolio_tracker.errors import InvalidInput, UnsupportedCurrency


logger = structlog.get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _check_amount(amount: Any) -> float:
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise InvalidInput(f"Invalid amount: {amount!r}", field="amount", value=amount)
    amount = float(amount)
    if not math.isfinite(amount):
        raise InvalidInput(f"Invalid amount: {amount}", field="amount", value=amount)
    if amount < 0:
        raise InvalidInput("Amount cannot be negative", field="amount", value=amount)
    return amount


def _lookup_rate(currency: str, rates: Mapping[str, float]) -> float:
    if currency not in rates:
        raise UnsupportedCurrency(currency)
    rate = rates[currency]
    if not rate or rate <= 0 or not math.isfinite(rate):
        raise InvalidInput(f"Exchange rate for {currency} must be positive", field="rate", value=rate)
    return rate


def convert_currency(
    amount: float,
    target_currency: str,
    rates: Mapping[str, float],
    base_currency: str = "SGD",
) -> int:
    """
    Convert a base-currency amount and round to the nearest integer unit.

    Args:
        amount: Non-negative amount in the base currency
        target_currency: Currency code to convert into
        rates: Multiplier from base currency to each currency
        base_currency: Code of the base currency

    Returns:
        The converted amount as an integer

    Raises:
        InvalidInput: amount is negative, non-numeric or not finite
        UnsupportedCurrency: target is neither the base nor in rates
    """
    amount = _check_amount(amount)

    if target_currency == base_currency:
        return round_half_up(amount)

    rate = _lookup_rate(target_currency, rates)
    return round_half_up(amount * rate)


def convert_to_base(
    amount: float,
    source_currency: str,
    rates: Mapping[str, float],
    base_currency: str = "SGD",
) -> float:
    """
    Convert an amount in source_currency back to the base currency.

    Exact inverse of the rate multiplication; no rounding here.
    """
    amount = _check_amount(amount)

    if source_currency == base_currency:
        return amount

    return amount / _lookup_rate(source_currency, rates)


def get_exchange_rate(
    from_currency: str,
    to_currency: str,
    rates: Mapping[str, float],
    base_currency: str = "SGD",
) -> float:
    """Rate between two currencies, crossing through the base currency."""
    if from_currency == to_currency:
        return 1.0

    from_rate = 1.0 if from_currency == base_currency else _lookup_rate(from_currency, rates)
    to_rate = 1.0 if to_currency == base_currency else _lookup_rate(to_currency, rates)

    return to_rate / from_rate


def convert_portfolio(
    portfolio: PortfolioLike,
    target_currency: str,
    config: PortfolioConfig,
) -> dict[str, int]:
    """
    Convert every bucket and the total into target_currency.

    The total is converted from the base-currency total, not summed from
    converted buckets, so it can differ from the bucket sum by rounding.
    """
    values = _bucket_values(portfolio)
    converted = {
        name: convert_currency(value, target_currency, config.exchange_rates, config.base_currency)
        for name, value in values.items()
    }
    converted["total"] = convert_currency(
        sum(values.values()),
        target_currency,
        config.exchange_rates,
        config.base_currency,
    )
    return converted


def format_currency(amount: Any, currency_code: str, config: PortfolioConfig) -> str:
    """
    Render an amount with its currency symbol and thousands separators.

    The amount is expected to already be in currency_code (i.e. to have gone
    through convert_currency); it is only formatted, never re-scaled.
    """
    base_display = config.currencies.get(config.base_currency)
    base_symbol = base_display.symbol if base_display else config.base_currency

    display = config.currencies.get(currency_code)
    if display is None:
        logger.warning(
            "unknown_currency_format",
            currency=currency_code,
            fallback=config.base_currency,
        )
        symbol, precision = base_symbol, 0
    else:
        symbol, precision = display.symbol, display.precision

    if isinstance(amount, bool) or not isinstance(amount, Real) or not math.isfinite(amount):
        logger.warning("invalid_amount_format", amount=repr(amount), currency=currency_code)
        return f"{base_symbol} 0"

    quantum = Decimal(1).scaleb(-precision)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{symbol} {value:,.{precision}f}"
