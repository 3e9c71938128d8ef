"""Configuration package."""

from portfolio_tracker.config.settings import (
    AppSettings,
    CurrencyDisplay,
    FinancialTargets,
    HealthThresholds,
    PortfolioConfig,
    Settings,
    StorageSettings,
    TargetAllocations,
    get_settings,
    validate_all_settings,
    validate_config,
)

__all__ = [
    "AppSettings",
    "CurrencyDisplay",
    "FinancialTargets",
    "HealthThresholds",
    "PortfolioConfig",
    "Settings",
    "StorageSettings",
    "TargetAllocations",
    "get_settings",
    "validate_all_settings",
    "validate_config",
]
