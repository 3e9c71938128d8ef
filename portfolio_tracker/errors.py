"""
Error Taxonomy

Calculation and validation code raises these; callers decide whether to
fall back or propagate.

All errors subclass ValueError so that code already guarding numeric
input with `except ValueError` keeps working.
"""

from typing import Any, Optional


class PortfolioError(ValueError):
    """Base exception for portfolio tracker errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value


class InvalidInput(PortfolioError):
    """Non-numeric, negative, NaN, or otherwise unusable input."""
    pass


class MissingField(InvalidInput):
    """A required portfolio key is absent."""

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}", field=field)


class OutOfRange(InvalidInput):
    """Value exceeds a sanity ceiling (implausible user input)."""
    pass


class UnsupportedCurrency(PortfolioError):
    """Requested currency is not in the configured rate table."""

    def __init__(self, currency: Any):
        super().__init__(f"Unsupported currency: {currency}", field="currency", value=currency)
        self.currency = currency
