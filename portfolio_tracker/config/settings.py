"""
Configuration Management for Portfolio Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Configuration is an explicit, immutable value.
Calculations receive a PortfolioConfig (or the piece of it they need) as an
argument instead of reading a module-level constant, so tests can substitute
any configuration they like.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HealthThresholds(BaseModel):
    """Maximum allocation percentages before a health alert is raised."""

    model_config = ConfigDict(frozen=True)

    hedge_max: float = Field(
        default=25.0,
        ge=0,
        le=100,
        description="Max cash/hedge % before alert"
    )
    growth_max: float = Field(
        default=12.0,
        ge=0,
        le=100,
        description="Max single-stock % before alert"
    )
    crypto_max: float = Field(
        default=20.0,
        ge=0,
        le=100,
        description="Max crypto % before alert"
    )
    # Alert fires above hedge_max but the corrective amount aims for this
    # lower level (hysteresis band).
    hedge_target: float = Field(
        default=15.0,
        ge=0,
        le=100,
        description="Hedge % the corrective amount brings the portfolio back to"
    )

    @model_validator(mode='after')
    def validate_hedge_band(self) -> 'HealthThresholds':
        """The corrective target must sit at or below the alert level."""
        if self.hedge_target > self.hedge_max:
            raise ValueError("hedge_target cannot be above hedge_max")
        return self


class CurrencyDisplay(BaseModel):
    """How a currency is rendered."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, max_length=5)
    precision: int = Field(default=0, ge=0, le=4)


class FinancialTargets(BaseModel):
    """FI targets and per-bucket target amounts (base currency)."""

    model_config = ConfigDict(frozen=True)

    lean: float = Field(default=1_850_000, description="Lean FI target")
    full: float = Field(default=2_500_000, description="Full FI target")
    core: float = Field(default=222_400, description="Core growth allocation")
    growth: float = Field(default=48_700, description="Alpha growth allocation")
    crypto: float = Field(default=73_000, description="Crypto hedge allocation")
    hedge: float = Field(default=146_000, description="Stability hedge allocation")

    def for_bucket(self, bucket: str) -> float:
        return getattr(self, bucket)


class TargetAllocations(BaseModel):
    """Target allocation percentages per bucket."""

    model_config = ConfigDict(frozen=True)

    core: float = 45.6
    growth: float = 10.0
    crypto: float = 15.0
    hedge: float = 30.0

    def for_bucket(self, bucket: str) -> float:
        return getattr(self, bucket)


def _default_exchange_rates() -> dict[str, float]:
    # 1 SGD = rate units of the target currency
    return {
        "SGD": 1.0,
        "USD": 0.74,
        "INR": 67.30,
    }


def _default_currencies() -> dict[str, CurrencyDisplay]:
    return {
        "SGD": CurrencyDisplay(symbol="SGD", precision=0),
        "USD": CurrencyDisplay(symbol="$", precision=0),
        "INR": CurrencyDisplay(symbol="₹", precision=0),
    }


class PortfolioConfig(BaseSettings):
    """
    Portfolio calculation configuration.

    Immutable once loaded. Every calculation takes this (or a part of it)
    explicitly.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    base_currency: str = Field(
        default="SGD",
        description="Currency all stored amounts are denominated in"
    )
    exchange_rates: Mapping[str, float] = Field(
        default_factory=_default_exchange_rates,
        validate_default=True,
        description="Multiplier from base currency to each currency"
    )
    currencies: Mapping[str, CurrencyDisplay] = Field(
        default_factory=_default_currencies,
        validate_default=True,
        description="Display symbol and precision per currency"
    )
    targets: FinancialTargets = Field(default_factory=FinancialTargets)
    allocations: TargetAllocations = Field(default_factory=TargetAllocations)
    health_thresholds: HealthThresholds = Field(default_factory=HealthThresholds)

    withdrawal_rate: float = Field(
        default=0.04,
        gt=0,
        le=1,
        description="Safe annual withdrawal rate (4% rule)"
    )
    assumed_growth_rate: float = Field(
        default=0.07,
        gt=0,
        le=1,
        description="Assumed annual growth for the years-to-target projection"
    )

    # Sanity checking
    max_bucket_value: float = Field(
        default=10_000_000,
        gt=0,
        description="Largest plausible single bucket value (base currency)"
    )
    default_monthly_savings: float = Field(
        default=7_000,
        ge=0,
        description="Default monthly savings target"
    )

    @field_validator("base_currency")
    @classmethod
    def normalize_base_currency(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("exchange_rates")
    @classmethod
    def validate_exchange_rates(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        """Rates must be positive; codes are upper-cased. The result is read-only."""
        normalized = {}
        for code, rate in v.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive, got {rate}")
            normalized[code.strip().upper()] = rate
        return MappingProxyType(normalized)

    @field_validator("currencies")
    @classmethod
    def freeze_currencies(cls, v: Mapping[str, CurrencyDisplay]) -> Mapping[str, CurrencyDisplay]:
        return MappingProxyType({code.strip().upper(): display for code, display in v.items()})

    @property
    def supported_currencies(self) -> list[str]:
        """Currencies that can be both converted and displayed."""
        codes = {self.base_currency, *self.exchange_rates}
        return sorted(code for code in codes if code in self.currencies)


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".portfolio_data"),
        description="Directory holding one JSON file per storage key"
    )
    namespace: str = Field(
        default="inv2",
        min_length=1,
        description="Prefix for every storage key"
    )
    storage_version: str = Field(
        default="2.0.0",
        description="Version tag written with every persisted record"
    )
    app_identifier: str = Field(
        default="INV2 Investment Command Center",
        description="Application name embedded in exports"
    )
    max_audit_events: int = Field(
        default=200,
        ge=0,
        le=5000,
        description="How many audit events to keep in storage"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_name: str = Field(
        default="Investment Command Center v2.0",
        description="Name shown in the UI"
    )
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def portfolio(self) -> PortfolioConfig:
        return PortfolioConfig()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_config(config: PortfolioConfig) -> list[str]:
    """
    Sanity-check a portfolio configuration.

    Returns a list of human-readable warnings; an empty list means the
    configuration looks consistent.
    """
    warnings = []

    allocations = config.allocations
    total_allocation = (
        allocations.core + allocations.growth + allocations.crypto + allocations.hedge
    )
    if abs(total_allocation - 100) > 1:
        warnings.append(
            f"Target allocations do not sum to 100%: {total_allocation:.1f}%"
        )

    for name, value in config.targets.model_dump().items():
        if value <= 0:
            warnings.append(f"Invalid target for {name}: {value}")

    if config.base_currency not in config.currencies:
        warnings.append(
            f"Base currency {config.base_currency} has no display configuration"
        )

    for code in config.exchange_rates:
        if code not in config.currencies:
            warnings.append(f"Currency {code} has a rate but no display configuration")

    return warnings


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        config = settings.portfolio
        results["portfolio"] = True
        config_warnings = validate_config(config)
        if config_warnings:
            results["portfolio_warnings"] = config_warnings
    except Exception as e:
        results["portfolio"] = False
        results["portfolio_error"] = str(e)

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
