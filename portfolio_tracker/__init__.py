"""
Portfolio Tracker - Source Package

A personal investment-portfolio dashboard for tracking allocation across
four asset buckets (core, growth, crypto, hedge).

DESIGN PRINCIPLES:
1. Calculations are pure functions over explicit inputs
2. Fail early, fail visibly (no silent wrong numbers)
3. One rate table, one conversion entry point, one rounding step
4. Persistence degrades gracefully (primary → backup → defaults)
5. Storage layer is swappable
"""

__version__ = "2.0.0"
__author__ = "Portfolio Tracker Team"

# Importing the audit package configures structlog for every entry point
from portfolio_tracker.audit import configure_logging

__all__ = ["configure_logging", "__version__"]
