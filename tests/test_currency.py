"""
Tests for currency conversion and formatting.
"""

import pytest

from portfolio_tracker.calculations import (
    convert_currency,
    convert_portfolio,
    convert_to_base,
    format_currency,
    get_exchange_rate,
    round_half_up,
)
from portfolio_tracker.config import PortfolioConfig
from portfolio_tracker.data import INITIAL_BUCKETS
from portfolio_tracker.errors import InvalidInput, UnsupportedCurrency
from portfolio_tracker.models import Portfolio


RATES = {"SGD": 1.0, "USD": 0.74, "INR": 67.30}


@pytest.fixture
def config():
    return PortfolioConfig()


class TestRounding:
    """Tests for round_half_up."""

    @pytest.mark.parametrize("value, expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (2.4999, 2),
        (0, 0),
    ])
    def test_halves_round_up(self, value, expected):
        """Test halves go up rather than to even."""
        assert round_half_up(value) == expected


class TestConvertCurrency:
    """Tests for convert_currency."""

    def test_inr_example(self):
        """Test 100 SGD is 6730 INR."""
        assert convert_currency(100, "INR", {"INR": 67.30}) == 6730

    def test_usd(self):
        """Test conversion into USD."""
        assert convert_currency(476_847, "USD", RATES) == 352_867

    def test_base_currency_passthrough_rounds(self):
        """Test the base currency is returned rounded but unscaled."""
        assert convert_currency(1_234.5, "SGD", RATES) == 1_235

    def test_base_currency_needs_no_rate(self):
        """Test the base currency converts even when absent from the table."""
        assert convert_currency(100, "SGD", {"INR": 67.30}) == 100

    def test_returns_integer(self):
        """Test the converted amount is an int."""
        assert isinstance(convert_currency(10.4, "USD", RATES), int)

    def test_inr_total_stays_in_millions(self):
        """Test a realistic total converts once, not twice."""
        converted = convert_currency(476_847, "INR", RATES)
        assert converted == 32_091_803
        assert converted < 100_000_000

    @pytest.mark.parametrize("amount", [0, 1, 999, 12_345, 476_847])
    def test_conversion_is_stable(self, amount):
        """Test converting the same amount twice gives the same result."""
        for code in RATES:
            assert convert_currency(amount, code, RATES) == convert_currency(amount, code, RATES)

    @pytest.mark.parametrize("amount", [0, 1, 999, 12_345, 476_847, 10_000_000])
    def test_conversion_magnitude_is_bounded(self, amount):
        """Test no conversion exceeds the largest rate times the input."""
        ceiling = max(RATES.values()) * amount + 0.5
        for code in RATES:
            assert convert_currency(amount, code, RATES) <= ceiling

    def test_unknown_currency_raises(self):
        """Test a code missing from the table is rejected."""
        with pytest.raises(UnsupportedCurrency) as excinfo:
            convert_currency(100, "EUR", RATES)
        assert excinfo.value.currency == "EUR"

    @pytest.mark.parametrize("amount", [-1, float("nan"), float("inf"), "100", None, True])
    def test_bad_amount_raises(self, amount):
        """Test negative, non-finite and non-numeric amounts are rejected."""
        with pytest.raises(InvalidInput):
            convert_currency(amount, "USD", RATES)

    def test_non_positive_rate_raises(self):
        """Test a broken rate table is reported."""
        with pytest.raises(InvalidInput):
            convert_currency(100, "USD", {"USD": 0})


class TestConvertToBase:
    """Tests for convert_to_base and get_exchange_rate."""

    def test_inverse_of_rate(self):
        """Test converting back divides by the rate without rounding."""
        assert convert_to_base(6_730, "INR", RATES) == pytest.approx(100)
        assert convert_to_base(1, "USD", RATES) == pytest.approx(1 / 0.74)

    def test_base_is_identity(self):
        """Test the base currency is returned unchanged."""
        assert convert_to_base(123.45, "SGD", RATES) == 123.45

    def test_same_currency_rate_is_one(self):
        """Test a currency against itself."""
        assert get_exchange_rate("USD", "USD", RATES) == 1.0

    def test_cross_rate(self):
        """Test USD to INR crosses through SGD."""
        assert get_exchange_rate("USD", "INR", RATES) == pytest.approx(67.30 / 0.74)
        assert get_exchange_rate("SGD", "USD", RATES) == pytest.approx(0.74)

    def test_unknown_cross_rate_raises(self):
        """Test an unknown code on either side is rejected."""
        with pytest.raises(UnsupportedCurrency):
            get_exchange_rate("EUR", "USD", RATES)


class TestConvertPortfolio:
    """Tests for convert_portfolio."""

    def test_buckets_and_total(self, config):
        """Test every bucket and the total are converted."""
        converted = convert_portfolio(Portfolio(**INITIAL_BUCKETS), "USD", config)

        assert set(converted) == {"core", "growth", "crypto", "hedge", "total"}
        assert converted["total"] == 352_867
        assert converted["core"] == round_half_up(105_356 * 0.74)

    def test_base_currency(self, config):
        """Test converting into the base currency keeps the amounts."""
        converted = convert_portfolio(INITIAL_BUCKETS, "SGD", config)
        assert converted["total"] == 476_847


class TestFormatCurrency:
    """Tests for format_currency."""

    def test_inr(self, config):
        """Test INR symbol and thousands separator."""
        assert format_currency(6_730, "INR", config) == "₹ 6,730"

    def test_usd(self, config):
        """Test USD symbol."""
        assert format_currency(352_867, "USD", config) == "$ 352,867"

    def test_sgd(self, config):
        """Test the base currency renders with its code."""
        assert format_currency(476_847, "SGD", config) == "SGD 476,847"

    def test_formatting_does_not_rescale(self, config):
        """Test an already-converted INR amount is printed as-is."""
        converted = convert_currency(476_847, "INR", config.exchange_rates)
        assert format_currency(converted, "INR", config) == "₹ 32,091,803"

    def test_unknown_currency_falls_back(self, config, caplog):
        """Test an unknown code renders with the base symbol and logs."""
        assert format_currency(1_000, "EUR", config) == "SGD 1,000"
        assert "unknown_currency_format" in caplog.text

    @pytest.mark.parametrize("amount", ["abc", None, float("nan")])
    def test_bad_amount_falls_back(self, config, amount, caplog):
        """Test a bad amount renders as a base-currency zero and logs."""
        assert format_currency(amount, "USD", config) == "SGD 0"
        assert "invalid_amount_format" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
