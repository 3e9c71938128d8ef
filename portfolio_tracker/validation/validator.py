"""
Portfolio Input Validation

Every portfolio that becomes current passes through here: manual edits,
records loaded from storage, and imported files.

Two entry points:
- validate_portfolio() raises on the first problem (loading and importing)
- check_portfolio_edit() collects one issue per field so the UI can show
  them inline and keep the save action disabled

IMPORTANT: Validation never silently fixes a value that isn't a number.
Thousands separators and currency symbols are stripped; anything else
that doesn't parse is rejected.
"""

import math
import re
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Any

from portfolio_tracker.config.settings import PortfolioConfig
from portfolio_tracker.errors import (
    InvalidInput,
    MissingField,
    OutOfRange,
    PortfolioError,
    UnsupportedCurrency,
)
from portfolio_tracker.models.portfolio import (
    BUCKET_FIELDS,
    Portfolio,
    ValidationIssue,
    ValidationResult,
)


_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_UNSAFE_CHARS = re.compile(r"[<>{}]")


def _issue_type(error: PortfolioError) -> str:
    if isinstance(error, MissingField):
        return "missing"
    if isinstance(error, OutOfRange):
        return "out_of_range"
    if isinstance(error, UnsupportedCurrency):
        return "unsupported_currency"
    return "invalid_value"


def sanitize_string(value: Any, max_length: int = 100) -> str:
    """Strip markup characters and surrounding whitespace, then truncate."""
    if not isinstance(value, str):
        return ""
    return _UNSAFE_CHARS.sub("", value).strip()[:max_length]


class PortfolioValidator:
    """
    Validates raw portfolio input against the configured limits.
    """

    def __init__(self, config: PortfolioConfig):
        self._config = config

    def validate_input(self, value: Any, field: str = "value") -> float:
        """
        Turn one raw bucket/savings input into a validated amount.

        Empty input means zero. Strings may carry separators and symbols
        ("SGD 12,500.50"). The result is rounded to cents.

        Raises:
            InvalidInput: not a number, NaN/infinite, or negative
            OutOfRange: above the configured sanity ceiling
        """
        if value is None:
            return 0.0

        if isinstance(value, str):
            if not value.strip():
                return 0.0
            cleaned = _NON_NUMERIC.sub("", value)
            try:
                number = float(cleaned)
            except ValueError:
                raise InvalidInput(f"{field} must be a valid number", field=field, value=value)
        elif isinstance(value, Real) and not isinstance(value, bool):
            number = float(value)
        else:
            raise InvalidInput(f"{field} must be a valid number", field=field, value=value)

        if not math.isfinite(number):
            raise InvalidInput(f"{field} must be a valid number", field=field, value=value)

        if number < 0:
            raise InvalidInput(f"{field} cannot be negative", field=field, value=value)

        ceiling = self._config.max_bucket_value
        if number > ceiling:
            raise OutOfRange(
                f"{field} seems unreasonably high (over {ceiling:,.0f} {self._config.base_currency})",
                field=field,
                value=value,
            )

        cents = Decimal(str(number)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return float(cents)

    def validate_currency(self, currency: Any) -> str:
        """
        Normalize and check a currency code.

        Raises:
            InvalidInput: not a string
            UnsupportedCurrency: not a configured display currency
        """
        if not isinstance(currency, str) or not currency.strip():
            raise InvalidInput("Currency must be a string", field="currency", value=currency)

        code = currency.strip().upper()
        if code not in self._config.supported_currencies:
            raise UnsupportedCurrency(currency)
        return code

    def validate_portfolio(self, data: Any) -> Portfolio:
        """
        Validate a raw portfolio mapping and build the record.

        Extra keys (metadata such as last_updated) are ignored.

        Raises:
            MissingField: a bucket key is absent
            InvalidInput, OutOfRange, UnsupportedCurrency: a value is bad
        """
        if isinstance(data, Portfolio):
            data = data.model_dump()
        if not isinstance(data, Mapping):
            raise InvalidInput("Portfolio must be an object", value=data)

        values = {}
        for field in BUCKET_FIELDS:
            if field not in data:
                raise MissingField(field)
            values[field] = self.validate_input(data[field], field)

        for savings_key in ("monthly_savings", "savings"):
            if savings_key in data:
                values["monthly_savings"] = self.validate_input(
                    data[savings_key], "monthly_savings"
                )
                break
        else:
            values["monthly_savings"] = self._config.default_monthly_savings

        if data.get("currency") is not None:
            values["currency"] = self.validate_currency(data["currency"])
        else:
            values["currency"] = self._config.base_currency

        return Portfolio(**values)

    def check_portfolio_edit(self, values: Mapping[str, Any]) -> ValidationResult:
        """
        Validate a manual edit field by field.

        Args:
            values: Raw form values, typically every bucket plus
                    monthly_savings and currency

        Returns:
            ValidationResult with one issue per bad field, and the validated
            portfolio when there are no errors
        """
        issues = []
        validated: dict[str, Any] = {}

        for field in BUCKET_FIELDS:
            if field not in values:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field} is required",
                    severity="error",
                    suggested_fix="Enter 0 if you hold nothing in this bucket",
                ))
                continue
            try:
                validated[field] = self.validate_input(values[field], field)
            except PortfolioError as e:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type=_issue_type(e),
                    message=e.message,
                    severity="error",
                    suggested_fix="Enter a plain amount, e.g. 125000",
                ))

        savings = values.get("monthly_savings", values.get("savings"))
        if savings is None:
            validated["monthly_savings"] = self._config.default_monthly_savings
        else:
            try:
                validated["monthly_savings"] = self.validate_input(savings, "monthly_savings")
            except PortfolioError as e:
                issues.append(ValidationIssue(
                    field="monthly_savings",
                    issue_type=_issue_type(e),
                    message=e.message,
                    severity="error",
                ))

        currency = values.get("currency")
        if currency is None:
            validated["currency"] = self._config.base_currency
        else:
            try:
                validated["currency"] = self.validate_currency(currency)
            except PortfolioError as e:
                issues.append(ValidationIssue(
                    field="currency",
                    issue_type=_issue_type(e),
                    message=e.message,
                    severity="error",
                    suggested_fix=f"Use one of: {', '.join(self._config.supported_currencies)}",
                ))

        has_errors = any(issue.severity == "error" for issue in issues)

        if not has_errors and sum(validated[field] for field in BUCKET_FIELDS) == 0:
            issues.append(ValidationIssue(
                field="total",
                issue_type="empty",
                message="All buckets are zero",
                severity="warning",
                suggested_fix="Allocations and health checks need a non-zero total",
            ))

        return ValidationResult(
            is_valid=not has_errors,
            issues=issues,
            portfolio=None if has_errors else Portfolio(**validated),
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.issues:
            return "✅ All values look good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        warnings = [issue for issue in result.issues if issue.severity == "warning"]
        if warnings:
            lines.append("")
            lines.append("⚠️ Please verify:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines).strip()
