"""
Portfolio Calculations

Pure functions over explicit inputs. Nothing here reads configuration,
storage or module-level state.

IMPORTANT: These functions raise on bad input. A visible failure is
better than a silently wrong total, so callers decide what to fall back to.
"""

import math
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any, Union

from portfolio_tracker.errors import InvalidInput, MissingField
from portfolio_tracker.models.portfolio import (
    BUCKET_FIELDS,
    Allocations,
    BucketStatus,
    FIProgress,
    HistoricalEntry,
    HistoricalMetrics,
    Portfolio,
)


PortfolioLike = Union[Portfolio, Mapping[str, Any]]


def _bucket_values(portfolio: PortfolioLike) -> dict[str, float]:
    """Extract and check the four bucket values from a model or mapping."""
    if isinstance(portfolio, Portfolio):
        return portfolio.bucket_values()

    if not isinstance(portfolio, Mapping):
        raise InvalidInput(
            f"Portfolio must be a mapping, got {type(portfolio).__name__}"
        )

    values = {}
    for name in BUCKET_FIELDS:
        if name not in portfolio:
            raise MissingField(name)
        value = portfolio[name]
        # bool is a Real subclass but never a valid amount
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidInput(f"Invalid value for {name}: {value!r}", field=name, value=value)
        value = float(value)
        if not math.isfinite(value):
            raise InvalidInput(f"Invalid value for {name}: {value}", field=name, value=value)
        if value < 0:
            raise InvalidInput(f"{name} cannot be negative: {value}", field=name, value=value)
        values[name] = value
    return values


def calculate_total(portfolio: PortfolioLike) -> float:
    """
    Sum the four bucket values.

    Raises:
        MissingField: A bucket key is absent
        InvalidInput: A bucket is non-numeric, NaN, infinite or negative
    """
    return sum(_bucket_values(portfolio).values())


def calculate_allocations(portfolio: PortfolioLike) -> Allocations:
    """
    Percentage of the total held in each bucket.

    A zero total yields zero for every bucket instead of NaN.
    """
    values = _bucket_values(portfolio)
    total = sum(values.values())

    if total == 0:
        return Allocations()

    return Allocations(**{
        name: value / total * 100 for name, value in values.items()
    })


def calculate_bucket_status(current: float, target: float) -> BucketStatus:
    """Classify a bucket by how far it sits from its target amount."""
    if target <= 0:
        raise InvalidInput(f"Target must be positive, got {target}", field="target", value=target)

    percent = current / target * 100
    if 95 <= percent <= 105:
        return BucketStatus.ON_TARGET
    if 80 <= percent <= 120:
        return BucketStatus.CLOSE
    return BucketStatus.OFF_TARGET


def calculate_fi_progress(
    current: float,
    target: float,
    withdrawal_rate: float,
    assumed_growth_rate: float,
) -> FIProgress:
    """
    Progress towards a financial-independence target.

    years_to_target assumes the remaining gap is closed by simple
    (non-compounding) growth on the current value. It is an approximation
    for a dashboard, not a forecast.

    Raises:
        InvalidInput: target <= 0, or current is negative or not finite
    """
    if not math.isfinite(target) or target <= 0:
        raise InvalidInput(f"Target value must be positive, got {target}", field="target", value=target)
    if not math.isfinite(current) or current < 0:
        raise InvalidInput(
            f"Current value must be a non-negative number, got {current}",
            field="current",
            value=current,
        )

    remaining = target - current

    if remaining <= 0:
        years_to_target = 0.0
    elif current > 0:
        years_to_target = remaining / (current * assumed_growth_rate)
    else:
        # Nothing to grow from
        years_to_target = None

    return FIProgress(
        target=target,
        percentage=min(current / target * 100, 100.0),
        remaining=max(remaining, 0.0),
        monthly_passive_income=current * withdrawal_rate / 12,
        years_to_target=years_to_target,
    )


def calculate_cagr(start_value: float, end_value: float, years: float) -> float:
    """
    Compound annual growth rate, as a percentage.

    Raises:
        InvalidInput: start_value <= 0, years <= 0 or end_value < 0
    """
    if start_value <= 0:
        raise InvalidInput(
            f"CAGR start value must be positive, got {start_value}",
            field="start_value",
            value=start_value,
        )
    if years <= 0:
        raise InvalidInput(f"CAGR needs a positive span of years, got {years}", field="years", value=years)
    if end_value < 0:
        raise InvalidInput(
            f"CAGR end value cannot be negative, got {end_value}",
            field="end_value",
            value=end_value,
        )

    return ((end_value / start_value) ** (1 / years) - 1) * 100


def calculate_historical_metrics(
    current_total: float,
    history: Sequence[HistoricalEntry],
) -> HistoricalMetrics:
    """
    Derive gains, CAGR, peak and best/worst years from the history series.

    current_total is the live portfolio total, which may differ from the
    last recorded networth once the user has edited the portfolio.

    Raises:
        InvalidInput: empty history, or a series CAGR/gains are undefined for
    """
    if not history:
        raise InvalidInput("Historical data must be a non-empty sequence", field="history")

    first = history[0]
    latest = history[-1]
    years = latest.year - first.year

    total_saved = latest.total_saved
    if total_saved <= 0:
        raise InvalidInput(
            f"Total saved must be positive to compute gains, got {total_saved}",
            field="total_saved",
            value=total_saved,
        )
    actual_gains = current_total - total_saved

    cagr = calculate_cagr(first.annual_savings, current_total, years)

    # Strict comparisons keep the first entry on ties
    peak = first
    best = first
    worst = first
    for entry in history[1:]:
        if entry.networth > peak.networth:
            peak = entry
        if entry.gains_percentage > best.gains_percentage:
            best = entry
        if entry.gains_percentage < worst.gains_percentage:
            worst = entry

    if peak.networth <= 0:
        raise InvalidInput("Peak net worth must be positive", field="networth", value=peak.networth)

    return HistoricalMetrics(
        total_saved=total_saved,
        actual_gains=actual_gains,
        gains_percentage=actual_gains / total_saved * 100,
        cagr=cagr,
        years=years,
        peak_value=peak.networth,
        peak_year=peak.year,
        recovery_from_peak=(current_total - peak.networth) / peak.networth * 100,
        current_networth=current_total,
        best_year=best,
        worst_year=worst,
    )
