"""
Tests for configuration loading and sanity checks.
"""

import pytest

from portfolio_tracker.calculations import convert_currency
from portfolio_tracker.config import (
    HealthThresholds,
    PortfolioConfig,
    StorageSettings,
    TargetAllocations,
    get_settings,
    validate_all_settings,
    validate_config,
)


class TestPortfolioConfig:
    """Tests for PortfolioConfig defaults and validation."""

    def test_defaults(self):
        """Test the shipped configuration values."""
        config = PortfolioConfig()

        assert config.base_currency == "SGD"
        assert config.exchange_rates == {"SGD": 1.0, "USD": 0.74, "INR": 67.30}
        assert config.targets.lean == 1_850_000
        assert config.targets.full == 2_500_000
        assert config.withdrawal_rate == 0.04
        assert config.max_bucket_value == 10_000_000
        assert config.currencies["INR"].symbol == "₹"

    def test_thresholds(self):
        """Test the alert ceilings and the hedge correction level."""
        thresholds = PortfolioConfig().health_thresholds
        assert (thresholds.hedge_max, thresholds.growth_max, thresholds.crypto_max) == (25, 12, 20)
        assert thresholds.hedge_target == 15

    def test_supported_currencies(self):
        """Test currencies need both a rate and a display entry."""
        assert PortfolioConfig().supported_currencies == ["INR", "SGD", "USD"]

    def test_immutable(self):
        """Test configuration cannot be changed after loading."""
        config = PortfolioConfig()
        with pytest.raises(ValueError):
            config.withdrawal_rate = 0.05

    def test_rate_table_is_read_only(self):
        """Test the rate and display tables cannot be rewritten in place."""
        config = PortfolioConfig()

        with pytest.raises(TypeError):
            config.exchange_rates["INR"] = 6730.0
        with pytest.raises(TypeError):
            config.currencies["EUR"] = config.currencies["SGD"]

        assert convert_currency(100, "INR", config.exchange_rates) == 6730

    def test_rejects_non_positive_rate(self):
        """Test a zero exchange rate is refused."""
        with pytest.raises(ValueError):
            PortfolioConfig(exchange_rates={"SGD": 1.0, "USD": 0})

    def test_hedge_target_above_alert_level(self):
        """Test the correction level must not exceed the alert level."""
        with pytest.raises(ValueError):
            HealthThresholds(hedge_max=20, hedge_target=25)

    def test_environment_override(self, monkeypatch):
        """Test values load from PORTFOLIO_ environment variables."""
        monkeypatch.setenv("PORTFOLIO_WITHDRAWAL_RATE", "0.035")
        monkeypatch.setenv("PORTFOLIO_HEALTH_THRESHOLDS__HEDGE_MAX", "30")

        config = PortfolioConfig()

        assert config.withdrawal_rate == 0.035
        assert config.health_thresholds.hedge_max == 30


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self):
        """Test the storage namespace and version."""
        settings = StorageSettings()
        assert settings.namespace == "inv2"
        assert settings.storage_version == "2.0.0"

    def test_environment_override(self, monkeypatch, tmp_path):
        """Test the data directory can be moved."""
        monkeypatch.setenv("PORTFOLIO_STORAGE_DATA_DIR", str(tmp_path))
        assert StorageSettings().data_dir == tmp_path


class TestValidateConfig:
    """Tests for configuration sanity warnings."""

    def test_defaults_are_consistent(self):
        """Test the shipped configuration has no warnings."""
        assert validate_config(PortfolioConfig()) == []

    def test_allocations_must_sum_to_100(self):
        """Test a target allocation far from 100% is flagged."""
        config = PortfolioConfig(allocations=TargetAllocations(core=10))
        warnings = validate_config(config)
        assert any("do not sum to 100%" in warning for warning in warnings)

    def test_rate_without_display(self):
        """Test a rate with no display entry is flagged."""
        config = PortfolioConfig(exchange_rates={"SGD": 1.0, "EUR": 0.68})
        assert validate_config(config) == ["Currency EUR has a rate but no display configuration"]


class TestSettings:
    """Tests for the cached settings container."""

    def test_cached(self):
        """Test get_settings returns the same object."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        """Test every section loads."""
        status = validate_all_settings()
        assert status["portfolio"] is True
        assert status["storage"] is True
        assert status["app"] is True
        assert "portfolio_warnings" not in status


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
