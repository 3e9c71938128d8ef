"""Reference data package."""

from portfolio_tracker.data.defaults import (
    AUTOMATION_STATUS,
    BUCKET_DEFINITIONS,
    HISTORICAL_DATA,
    INITIAL_BUCKETS,
    default_portfolio,
)

__all__ = [
    "AUTOMATION_STATUS",
    "BUCKET_DEFINITIONS",
    "HISTORICAL_DATA",
    "INITIAL_BUCKETS",
    "default_portfolio",
]
