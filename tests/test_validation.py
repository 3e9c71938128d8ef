"""
Tests for portfolio input validation.
"""

import pytest

from portfolio_tracker.config import PortfolioConfig
from portfolio_tracker.errors import (
    InvalidInput,
    MissingField,
    OutOfRange,
    UnsupportedCurrency,
)
from portfolio_tracker.validation import PortfolioValidator, sanitize_string


@pytest.fixture
def validator():
    return PortfolioValidator(PortfolioConfig())


class TestValidateInput:
    """Tests for single-value validation."""

    @pytest.mark.parametrize("raw, expected", [
        (125_000, 125_000.0),
        ("125000", 125_000.0),
        ("12,500.50", 12_500.5),
        ("SGD 1,000", 1_000.0),
        ("  42 ", 42.0),
        (10.005, 10.01),
        ("", 0.0),
        ("   ", 0.0),
        (None, 0.0),
    ])
    def test_accepted_values(self, validator, raw, expected):
        """Test separators, symbols and blanks are handled."""
        assert validator.validate_input(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "1.2.3", True, [1], float("nan"), float("inf")])
    def test_not_a_number(self, validator, raw):
        """Test values that don't parse are rejected, not coerced."""
        with pytest.raises(InvalidInput, match="valid number"):
            validator.validate_input(raw, "core")

    @pytest.mark.parametrize("raw", [-1, "-500"])
    def test_negative(self, validator, raw):
        """Test negative amounts are rejected."""
        with pytest.raises(InvalidInput, match="negative"):
            validator.validate_input(raw, "core")

    def test_above_ceiling(self, validator):
        """Test the sanity ceiling."""
        with pytest.raises(OutOfRange) as excinfo:
            validator.validate_input(20_000_000, "hedge")
        assert excinfo.value.field == "hedge"

    def test_ceiling_is_inclusive(self, validator):
        """Test exactly the ceiling is allowed."""
        assert validator.validate_input(10_000_000) == 10_000_000


class TestValidateCurrency:
    """Tests for currency code validation."""

    def test_normalizes_case(self, validator):
        """Test codes are upper-cased."""
        assert validator.validate_currency(" usd ") == "USD"

    def test_unsupported(self, validator):
        """Test a code without a rate is rejected."""
        with pytest.raises(UnsupportedCurrency):
            validator.validate_currency("EUR")

    def test_not_a_string(self, validator):
        """Test non-string codes are rejected."""
        with pytest.raises(InvalidInput):
            validator.validate_currency(5)


class TestValidatePortfolio:
    """Tests for whole-record validation (load and import)."""

    def test_valid_record(self, validator):
        """Test a stored record with metadata."""
        portfolio = validator.validate_portfolio({
            "core": 1_000, "growth": "2,000", "crypto": 0, "hedge": 500.555,
            "monthly_savings": 6_000, "currency": "inr",
            "last_updated": "2025-06-01T10:00:00", "version": "2.0.0",
        })
        assert portfolio.growth == 2_000
        assert portfolio.hedge == 500.56
        assert portfolio.monthly_savings == 6_000
        assert portfolio.currency == "INR"

    def test_missing_bucket(self, validator):
        """Test a missing bucket names the field."""
        with pytest.raises(MissingField, match="Missing required field: hedge"):
            validator.validate_portfolio({"core": 1, "growth": 1, "crypto": 1})

    def test_defaults(self, validator):
        """Test savings and currency fall back to configuration."""
        portfolio = validator.validate_portfolio({"core": 1, "growth": 1, "crypto": 1, "hedge": 1})
        assert portfolio.monthly_savings == 7_000
        assert portfolio.currency == "SGD"

    def test_savings_alias(self, validator):
        """Test the older 'savings' key."""
        portfolio = validator.validate_portfolio(
            {"core": 1, "growth": 1, "crypto": 1, "hedge": 1, "savings": 3_000}
        )
        assert portfolio.monthly_savings == 3_000

    def test_not_a_mapping(self, validator):
        """Test lists and scalars are rejected."""
        with pytest.raises(InvalidInput):
            validator.validate_portfolio([1, 2, 3, 4])


class TestCheckPortfolioEdit:
    """Tests for field-by-field edit validation."""

    def test_valid_edit(self, validator):
        """Test a clean edit returns the portfolio."""
        result = validator.check_portfolio_edit(
            {"core": "100", "growth": "50", "crypto": "25", "hedge": "25"}
        )
        assert result.is_valid is True
        assert result.issues == []
        assert result.portfolio.core == 100

    def test_one_issue_per_bad_field(self, validator):
        """Test every bad field is reported, not just the first."""
        result = validator.check_portfolio_edit(
            {"core": "abc", "growth": "-1", "crypto": "100", "hedge": "100"}
        )

        assert result.is_valid is False
        assert result.portfolio is None
        errors = result.errors_by_field()
        assert set(errors) == {"core", "growth"}
        assert "negative" in errors["growth"]

    def test_issue_types(self, validator):
        """Test issue types for missing, out-of-range and currency problems."""
        result = validator.check_portfolio_edit(
            {"core": 1, "growth": 1, "crypto": 50_000_000, "currency": "EUR"}
        )

        types = {issue.field: issue.issue_type for issue in result.issues}
        assert types == {
            "hedge": "missing",
            "crypto": "out_of_range",
            "currency": "unsupported_currency",
        }

    def test_all_zero_is_a_warning(self, validator):
        """Test an all-zero portfolio is allowed but flagged."""
        result = validator.check_portfolio_edit({"core": 0, "growth": 0, "crypto": 0, "hedge": 0})

        assert result.is_valid is True
        assert result.has_errors is False
        assert [issue.field for issue in result.issues] == ["total"]

    def test_summary_text(self, validator):
        """Test the user-facing summary for good and bad edits."""
        good = validator.check_portfolio_edit({"core": 1, "growth": 1, "crypto": 1, "hedge": 1})
        bad = validator.check_portfolio_edit({"core": "x", "growth": 1, "crypto": 1, "hedge": 1})

        assert validator.get_user_friendly_summary(good) == "✅ All values look good."
        assert "core must be a valid number" in validator.get_user_friendly_summary(bad)


class TestSanitizeString:
    """Tests for sanitize_string."""

    def test_strips_markup(self):
        """Test angle and curly brackets are removed."""
        assert sanitize_string("  <b>note</b> {x} ") == "bnote/b x"

    def test_truncates(self):
        """Test the length limit."""
        assert sanitize_string("a" * 150) == "a" * 100
        assert sanitize_string("abcdef", max_length=3) == "abc"

    def test_non_string(self):
        """Test non-strings become empty."""
        assert sanitize_string(None) == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
