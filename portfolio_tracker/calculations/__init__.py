"""
Calculation Package

Pure, stateless portfolio arithmetic: totals and allocations, health
evaluation, FI progress, historical metrics and currency conversion.
"""

from portfolio_tracker.calculations.portfolio import (
    calculate_allocations,
    calculate_bucket_status,
    calculate_cagr,
    calculate_fi_progress,
    calculate_historical_metrics,
    calculate_total,
)
from portfolio_tracker.calculations.currency import (
    convert_currency,
    convert_portfolio,
    convert_to_base,
    format_currency,
    get_exchange_rate,
    round_half_up,
)
from portfolio_tracker.calculations.health import (
    check_portfolio_health,
    evaluate_health,
    summarize_health,
)

__all__ = [
    # Totals, allocations and metrics
    "calculate_allocations",
    "calculate_bucket_status",
    "calculate_cagr",
    "calculate_fi_progress",
    "calculate_historical_metrics",
    "calculate_total",
    # Currency
    "convert_currency",
    "convert_portfolio",
    "convert_to_base",
    "format_currency",
    "get_exchange_rate",
    "round_half_up",
    # Health
    "check_portfolio_health",
    "evaluate_health",
    "summarize_health",
]
