"""
Core Data Models for Portfolio Tracker

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce non-negative, finite bucket values at construction time
2. Be immutable (a portfolio is replaced wholesale, never patched)
3. Be serializable for storage, export and logging

DESIGN DECISION: Records are frozen Pydantic v2 models. Anything that
needs a changed portfolio builds a new one through validation.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Bucket(str, Enum):
    """
    The four asset buckets a portfolio is split across.

    Order matters: it is the display order everywhere.
    """
    CORE = "core"
    GROWTH = "growth"
    CRYPTO = "crypto"
    HEDGE = "hedge"


BUCKET_FIELDS: tuple[str, ...] = tuple(bucket.value for bucket in Bucket)


class HealthSeverity(str, Enum):
    """Urgency tier of a health issue."""
    URGENT = "URGENT"
    MEDIUM = "MEDIUM"


class HealthCategory(str, Enum):
    """Which allocation rule a health issue comes from."""
    CASH_DRAG = "cash_drag"
    CONCENTRATION_RISK = "concentration_risk"
    CRYPTO_OVERWEIGHT = "crypto_overweight"


class HealthScore(str, Enum):
    """Overall health badge shown on the dashboard."""
    GOOD = "Good"
    MODERATE = "Moderate"
    URGENT = "Urgent"


class BucketStatus(str, Enum):
    """How close a bucket is to its target amount."""
    ON_TARGET = "on_target"   # within 95-105% of target
    CLOSE = "close"           # within 80-120% of target
    OFF_TARGET = "off_target"


class PortfolioSource(str, Enum):
    """Where a loaded portfolio came from."""
    STORED = "stored"
    BACKUP = "backup"
    DEFAULT = "default"


# =============================================================================
# CORE PORTFOLIO MODEL
# =============================================================================

class Portfolio(BaseModel):
    """
    A user's allocation across the four buckets (base currency).

    CRITICAL: total is always the sum of the four buckets. It is never
    stored on the record so it can never drift.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    core: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Core growth: broad ETFs and diversified equity"
    )
    growth: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Alpha growth: individual stocks"
    )
    crypto: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Crypto hedge: digital assets"
    )
    hedge: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Stability hedge: cash, bonds, gold"
    )

    # Older exports call this field "savings"
    monthly_savings: float = Field(
        default=7_000,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("monthly_savings", "savings"),
        description="Monthly savings target"
    )
    currency: str = Field(
        default="SGD",
        min_length=3,
        max_length=3,
        description="Display currency"
    )

    def bucket_values(self) -> dict[str, float]:
        """Bucket name → value, in display order."""
        return {name: getattr(self, name) for name in BUCKET_FIELDS}


class Allocations(BaseModel):
    """Percentage of the total held in each bucket."""
    model_config = ConfigDict(frozen=True)

    core: float = 0.0
    growth: float = 0.0
    crypto: float = 0.0
    hedge: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in BUCKET_FIELDS}

    @property
    def total_percentage(self) -> float:
        return sum(self.as_dict().values())


# =============================================================================
# HEALTH MODELS
# =============================================================================

class HealthIssue(BaseModel):
    """
    A rule violation found by the health evaluator.

    Not persisted. Lists of issues are sorted ascending by priority.
    """
    model_config = ConfigDict(frozen=True)

    severity: HealthSeverity
    category: HealthCategory
    message: str = Field(
        ...,
        description="What is wrong, e.g. 'Cash position: 30.0% (target: 25%)'"
    )
    action: str = Field(
        ...,
        description="Suggested corrective action"
    )
    suggested_amount: float = Field(
        ...,
        ge=0,
        description="Base-currency amount the action moves"
    )
    priority: int = Field(
        ...,
        ge=1,
        le=2,
        description="1 = urgent, 2 = medium"
    )
    impact: str = Field(
        ...,
        pattern="^(high|medium)$"
    )


class HealthSummary(BaseModel):
    """Aggregate view over a list of health issues."""
    model_config = ConfigDict(frozen=True)

    score: HealthScore
    issue_count: int = Field(ge=0)
    urgent_count: int = Field(ge=0)

    @property
    def is_healthy(self) -> bool:
        return self.issue_count == 0


# =============================================================================
# METRIC MODELS
# =============================================================================

class FIProgress(BaseModel):
    """
    Progress towards a financial-independence target.

    years_to_target is a rough linear projection, not a forecast. It is
    None when the target is not yet met and the current value is zero.
    """
    model_config = ConfigDict(frozen=True)

    target: float = Field(gt=0)
    percentage: float = Field(ge=0, le=100)
    remaining: float = Field(ge=0)
    monthly_passive_income: float = Field(ge=0)
    years_to_target: Optional[float] = Field(default=None, ge=0)


class HistoricalEntry(BaseModel):
    """One year of the portfolio's history. Immutable reference data."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1900, le=2200)
    networth: float = Field(..., ge=0, description="End-of-year net worth")
    total_saved: float = Field(..., ge=0, description="Cumulative amount saved")
    annual_savings: float = Field(..., description="Saved during this year")
    annual_gains: float = Field(..., description="Market gain/loss this year")
    gains_percentage: float = Field(..., description="Market return this year, %")
    notes: Optional[str] = Field(default=None, max_length=200)


class HistoricalMetrics(BaseModel):
    """Metrics derived from the history series and the live total."""
    model_config = ConfigDict(frozen=True)

    total_saved: float
    actual_gains: float
    gains_percentage: float
    cagr: float
    years: int
    peak_value: float
    peak_year: int
    recovery_from_peak: float
    current_networth: float
    best_year: HistoricalEntry
    worst_year: HistoricalEntry


# =============================================================================
# AUTOMATION MODELS - static reference data, nothing here is scheduled
# =============================================================================

class ScheduledTransfer(BaseModel):
    """A standing bank transfer into the brokerage account."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=60)
    active: bool = Field(default=True)
    amount: float = Field(..., ge=0, description="Amount per transfer (base currency)")
    frequency: str = Field(default="monthly")
    next_date: Optional[date] = None
    last_transfer: Optional[date] = None
    status: str = Field(default="working", description="Free-text status shown to the user")


class PlannedAutomation(BaseModel):
    """An automation that still needs to be set up."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=60)
    active: bool = Field(default=False)
    target: str = Field(..., description="Instrument the automation buys")
    setup_needed: bool = Field(default=True)
    priority: str = Field(default="medium", pattern="^(high|medium|low)$")


class AutomationStatus(BaseModel):
    """Money-in and money-deployed automations."""
    model_config = ConfigDict(frozen=True)

    transfer: ScheduledTransfer
    auto_invest: PlannedAutomation

    @property
    def pending_setup(self) -> list[str]:
        """Names of automations that are not running yet."""
        return [
            item.name
            for item in (self.transfer, self.auto_invest)
            if not item.active
        ]


# =============================================================================
# DASHBOARD MODELS
# =============================================================================

class BucketSnapshot(BaseModel):
    """Everything the dashboard shows for one bucket."""
    model_config = ConfigDict(frozen=True)

    bucket: Bucket
    value: float
    display_value: int
    allocation_percent: float
    target_value: float
    display_target_value: int
    target_percent: float
    status: BucketStatus


class DashboardSnapshot(BaseModel):
    """All derived values for one portfolio in one display currency."""
    model_config = ConfigDict(frozen=True)

    currency: str
    total: float
    display_total: int
    display_monthly_passive_income: int
    allocations: Allocations
    buckets: list[BucketSnapshot]
    health_issues: list[HealthIssue]
    health_summary: HealthSummary
    lean_fi: FIProgress
    full_fi: FIProgress
    metrics: Optional[HistoricalMetrics] = None


class PortfolioStatus(BaseModel):
    """Status line for the dashboard header."""

    has_error: bool
    error_message: Optional[str] = None
    last_saved: Optional[datetime] = None
    total_value: float
    health_score: HealthScore
    urgent_issues: int = Field(ge=0)
    source: PortfolioSource


# =============================================================================
# SETTINGS / PERSISTENCE MODELS
# =============================================================================

class UserPreferences(BaseModel):
    """User-editable application settings."""
    model_config = ConfigDict(extra="ignore")

    currency: str = Field(default="SGD", min_length=3, max_length=3)
    theme: str = Field(default="dark", pattern="^(dark|light)$")
    notifications: bool = True
    auto_save: bool = True


class LoadResult(BaseModel):
    """Outcome of loading the portfolio from storage."""

    portfolio: Portfolio
    source: PortfolioSource
    last_updated: Optional[datetime] = None
    error: Optional[str] = Field(
        default=None,
        description="Banner text when the primary record could not be used"
    )

    @property
    def used_fallback(self) -> bool:
        return self.source != PortfolioSource.STORED


class ExportBundle(BaseModel):
    """The single JSON document used for export and import."""

    portfolio: Optional[Portfolio] = None
    settings: Optional[UserPreferences] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str
    app_identifier: str = Field(
        validation_alias=AliasChoices("app_identifier", "app"),
    )


class ImportResult(BaseModel):
    """Outcome of importing an export bundle."""

    success: bool
    portfolio: Optional[Portfolio] = None
    settings: Optional[UserPreferences] = None
    error: Optional[str] = None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on one field."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a manual edit.

    The UI shows issues inline next to their field and keeps the save
    action disabled while is_valid is False.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    portfolio: Optional[Portfolio] = Field(
        default=None,
        description="The validated portfolio, only set when is_valid"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def errors_by_field(self) -> dict[str, str]:
        """First error message per field, for inline display."""
        errors: dict[str, str] = {}
        for issue in self.issues:
            if issue.severity == "error" and issue.field not in errors:
                errors[issue.field] = issue.message
        return errors
