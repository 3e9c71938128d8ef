"""
Reference Data

The initial portfolio, bucket descriptions, the fixed 2018-2025 history
series and the automation checklist. Amounts are in the base currency
(SGD). Net worth figures are end-of-year values; 2025 is year-to-date.
"""

from datetime import date

from portfolio_tracker.config.settings import PortfolioConfig
from portfolio_tracker.models.portfolio import (
    AutomationStatus,
    Bucket,
    HistoricalEntry,
    PlannedAutomation,
    Portfolio,
    ScheduledTransfer,
)


INITIAL_BUCKETS = {
    "core": 105_356,     # VUAA ETF, India equities
    "growth": 100_441,   # NVDA, GOOG, TSLA and other singles
    "crypto": 101_000,   # BTC, ETH, alts
    "hedge": 170_050,    # Cash, bonds, gold
}


def default_portfolio(config: PortfolioConfig) -> Portfolio:
    """The portfolio used when nothing usable is stored."""
    return Portfolio(
        **INITIAL_BUCKETS,
        monthly_savings=config.default_monthly_savings,
        currency=config.base_currency,
    )


BUCKET_DEFINITIONS: dict[Bucket, dict] = {
    Bucket.CORE: {
        "name": "Core Growth",
        "description": "Broad market exposure through ETFs and diversified equity",
        "components": ["VUAA ETF", "India equities (ICICI)", "Diversified funds"],
        "strategy": "Buy and hold, regular DCA",
        "risk_level": "Medium",
    },
    Bucket.GROWTH: {
        "name": "Alpha Growth",
        "description": "Individual stocks for alpha generation",
        "components": ["NVDA", "GOOG", "TSLA", "UNH", "AAPL", "Other singles"],
        "strategy": "Selective stock picking, trim winners",
        "risk_level": "High",
    },
    Bucket.CRYPTO: {
        "name": "Crypto Hedge",
        "description": "Digital assets as inflation and system hedge",
        "components": ["BTC", "ETH", "ONDO", "CVX", "Other alts"],
        "strategy": "Long-term hold, rotate alts to BTC",
        "risk_level": "Very High",
    },
    Bucket.HEDGE: {
        "name": "Stability Hedge",
        "description": "Capital preservation and liquidity",
        "components": ["Cash", "T-bills", "SGS bonds", "Physical gold"],
        "strategy": "Defensive positioning, deploy on opportunities",
        "risk_level": "Low",
    },
}


HISTORICAL_DATA: tuple[HistoricalEntry, ...] = (
    HistoricalEntry(
        year=2018, networth=21_200, total_saved=20_000, annual_savings=20_000,
        annual_gains=1_200, gains_percentage=6.0,
        notes="Started journey (Jul-Dec)",
    ),
    HistoricalEntry(
        year=2019, networth=113_547, total_saved=95_303, annual_savings=75_303,
        annual_gains=17_044, gains_percentage=80.4,
        notes="Building momentum",
    ),
    HistoricalEntry(
        year=2020, networth=269_083, total_saved=173_619, annual_savings=78_316,
        annual_gains=77_220, gains_percentage=68.0,
        notes="COVID market opportunity",
    ),
    HistoricalEntry(
        year=2021, networth=578_896, total_saved=245_219, annual_savings=71_600,
        annual_gains=238_214, gains_percentage=88.5,
        notes="Bull market gains - Peak year!",
    ),
    HistoricalEntry(
        year=2022, networth=346_000, total_saved=271_219, annual_savings=26_000,
        annual_gains=-258_896, gains_percentage=-44.7,
        notes="Market correction year",
    ),
    HistoricalEntry(
        year=2023, networth=385_530, total_saved=291_219, annual_savings=20_000,
        annual_gains=19_530, gains_percentage=5.6,
        notes="Recovery begins",
    ),
    HistoricalEntry(
        year=2024, networth=491_132, total_saved=321_219, annual_savings=30_000,
        annual_gains=75_602, gains_percentage=19.6,
        notes="Strong recovery year",
    ),
    HistoricalEntry(
        year=2025, networth=491_132, total_saved=327_219, annual_savings=6_000,
        annual_gains=-6_000, gains_percentage=-1.2,
        notes="YTD - building for second half",
    ),
)


# Shown on the overview; edited here, not in the app.
AUTOMATION_STATUS = AutomationStatus(
    transfer=ScheduledTransfer(
        name="DBS → IBKR transfer",
        amount=5_000,
        frequency="monthly",
        next_date=date(2025, 7, 30),
        last_transfer=date(2025, 6, 30),
        status="working",
    ),
    auto_invest=PlannedAutomation(
        name="IBKR auto-buy",
        target="VUAA",
        priority="high",
    ),
)
