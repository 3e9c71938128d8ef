"""Validation package."""

from portfolio_tracker.validation.validator import PortfolioValidator, sanitize_string

__all__ = [
    "PortfolioValidator",
    "sanitize_string",
]
