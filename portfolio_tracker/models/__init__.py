"""
Data Models Package

This package contains all Pydantic models used in the Portfolio Tracker.
All data flowing through the system must conform to these schemas.
"""

from portfolio_tracker.models.portfolio import (
    BUCKET_FIELDS,
    Allocations,
    AutomationStatus,
    Bucket,
    BucketSnapshot,
    BucketStatus,
    DashboardSnapshot,
    ExportBundle,
    FIProgress,
    HealthCategory,
    HealthIssue,
    HealthScore,
    HealthSeverity,
    HealthSummary,
    HistoricalEntry,
    HistoricalMetrics,
    ImportResult,
    LoadResult,
    Portfolio,
    PortfolioSource,
    PortfolioStatus,
    PlannedAutomation,
    ScheduledTransfer,
    UserPreferences,
    ValidationIssue,
    ValidationResult,
)
from portfolio_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Portfolio models
    "BUCKET_FIELDS",
    "Allocations",
    "AutomationStatus",
    "Bucket",
    "BucketSnapshot",
    "BucketStatus",
    "DashboardSnapshot",
    "ExportBundle",
    "FIProgress",
    "HealthCategory",
    "HealthIssue",
    "HealthScore",
    "HealthSeverity",
    "HealthSummary",
    "HistoricalEntry",
    "HistoricalMetrics",
    "ImportResult",
    "LoadResult",
    "Portfolio",
    "PortfolioSource",
    "PortfolioStatus",
    "PlannedAutomation",
    "ScheduledTransfer",
    "UserPreferences",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
