"""
Portfolio Health Evaluation

Compares allocation percentages against configured ceilings and emits
ranked HealthIssue records. An empty list means the portfolio is healthy.

Three fixed rules:
- hedge above hedge_max   → URGENT cash drag
- growth above growth_max → MEDIUM concentration risk
- crypto above crypto_max → MEDIUM crypto overweight

The hedge rule alerts at hedge_max but sizes its corrective amount to bring
the bucket down to hedge_target, which is lower. Growth and crypto correct
back to their own ceiling.
"""

from portfolio_tracker.calculations.currency import round_half_up
from portfolio_tracker.calculations.portfolio import (
    PortfolioLike,
    calculate_allocations,
    calculate_total,
)
from portfolio_tracker.config.settings import HealthThresholds
from portfolio_tracker.models.portfolio import (
    Allocations,
    HealthCategory,
    HealthIssue,
    HealthScore,
    HealthSeverity,
    HealthSummary,
)


def _corrective_amount(actual_percent: float, reference_percent: float, total: float) -> float:
    return (actual_percent - reference_percent) * total / 100


def evaluate_health(
    allocations: Allocations,
    total: float,
    thresholds: HealthThresholds,
    currency: str = "SGD",
) -> list[HealthIssue]:
    """
    Evaluate allocation percentages against thresholds.

    Args:
        allocations: Bucket percentages of the total
        total: Portfolio total in the base currency
        thresholds: Ceilings per risk category
        currency: Code used in the action text (amounts stay in base currency)

    Returns:
        Issues sorted ascending by priority (urgent first)
    """
    issues = []

    if allocations.hedge > thresholds.hedge_max:
        amount = _corrective_amount(allocations.hedge, thresholds.hedge_target, total)
        issues.append(HealthIssue(
            severity=HealthSeverity.URGENT,
            category=HealthCategory.CASH_DRAG,
            message=(
                f"Cash position: {allocations.hedge:.1f}% "
                f"(target: {thresholds.hedge_max:g}%)"
            ),
            action=f"Deploy {round_half_up(amount)} {currency}",
            suggested_amount=amount,
            priority=1,
            impact="high",
        ))

    if allocations.growth > thresholds.growth_max:
        amount = _corrective_amount(allocations.growth, thresholds.growth_max, total)
        issues.append(HealthIssue(
            severity=HealthSeverity.MEDIUM,
            category=HealthCategory.CONCENTRATION_RISK,
            message=(
                f"Single stocks: {allocations.growth:.1f}% "
                f"(target: {thresholds.growth_max:g}%)"
            ),
            action=f"Trim {round_half_up(amount)} {currency}",
            suggested_amount=amount,
            priority=2,
            impact="medium",
        ))

    if allocations.crypto > thresholds.crypto_max:
        amount = _corrective_amount(allocations.crypto, thresholds.crypto_max, total)
        issues.append(HealthIssue(
            severity=HealthSeverity.MEDIUM,
            category=HealthCategory.CRYPTO_OVERWEIGHT,
            message=(
                f"Crypto position: {allocations.crypto:.1f}% "
                f"(target: {thresholds.crypto_max:g}%)"
            ),
            action=f"Reduce crypto exposure by {round_half_up(amount)} {currency}",
            suggested_amount=amount,
            priority=2,
            impact="medium",
        ))

    # sorted() is stable, so equal priorities keep rule order
    return sorted(issues, key=lambda issue: issue.priority)


def check_portfolio_health(
    portfolio: PortfolioLike,
    thresholds: HealthThresholds,
    currency: str = "SGD",
) -> list[HealthIssue]:
    """Compute total and allocations for a portfolio, then evaluate them."""
    return evaluate_health(
        calculate_allocations(portfolio),
        calculate_total(portfolio),
        thresholds,
        currency=currency,
    )


def summarize_health(issues: list[HealthIssue]) -> HealthSummary:
    """Reduce a list of issues to the dashboard health badge."""
    urgent_count = sum(1 for issue in issues if issue.severity == HealthSeverity.URGENT)

    if not issues:
        score = HealthScore.GOOD
    elif urgent_count:
        score = HealthScore.URGENT
    else:
        score = HealthScore.MODERATE

    return HealthSummary(
        score=score,
        issue_count=len(issues),
        urgent_count=urgent_count,
    )
