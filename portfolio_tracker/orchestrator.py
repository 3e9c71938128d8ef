"""
Main Orchestrator for Portfolio Tracker

This module ties together all the components and holds the dashboard
state for one session:
1. Load (primary record → backup → defaults)
2. Edit (raw input → validate → replace portfolio → save)
3. Display (portfolio → calculations → snapshot in a display currency)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The portfolio is only ever replaced by a validated record
- Calculations raise; this layer decides what the user sees instead
- Load and save problems become a dismissible banner, never a crash
- Every step is audited

This is the "glue" the Streamlit front end talks to. It never holds a
rate or formats a number itself.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Optional

import structlog

from portfolio_tracker.audit import AuditLogger
from portfolio_tracker.calculations import (
    calculate_allocations,
    calculate_bucket_status,
    calculate_fi_progress,
    calculate_historical_metrics,
    calculate_total,
    convert_currency,
    evaluate_health,
    round_half_up,
    summarize_health,
)
from portfolio_tracker.config import PortfolioConfig, get_settings
from portfolio_tracker.data import AUTOMATION_STATUS, HISTORICAL_DATA, default_portfolio
from portfolio_tracker.errors import InvalidInput, UnsupportedCurrency
from portfolio_tracker.models.audit import AuditEvent, AuditEventBuilder
from portfolio_tracker.models.portfolio import (
    BUCKET_FIELDS,
    AutomationStatus,
    Bucket,
    BucketSnapshot,
    DashboardSnapshot,
    HistoricalEntry,
    ImportResult,
    LoadResult,
    Portfolio,
    PortfolioSource,
    PortfolioStatus,
    UserPreferences,
    ValidationResult,
)
from portfolio_tracker.services.persistence import PortfolioRepository
from portfolio_tracker.services.storage import InMemoryStore, JsonFileStore, KeyValueStore
from portfolio_tracker.validation import PortfolioValidator


logger = structlog.get_logger(__name__)


class PortfolioDashboard:
    """
    Session state for the dashboard.

    Holds the current portfolio, the user's preferences, when the
    portfolio was last saved and the current error banner (if any).
    The portfolio is immutable and replaced wholesale on every change.
    """

    def __init__(
        self,
        repository: PortfolioRepository,
        validator: PortfolioValidator,
        config: PortfolioConfig,
        history: Sequence[HistoricalEntry] = HISTORICAL_DATA,
        audit_logger: Optional[AuditLogger] = None,
        automation: AutomationStatus = AUTOMATION_STATUS,
    ):
        self._repository = repository
        self._validator = validator
        self._config = config
        self._history = tuple(history)
        self._automation = automation
        self._audit_logger = audit_logger

        self._portfolio = default_portfolio(config)
        self._preferences = UserPreferences(currency=config.base_currency)
        self._source = PortfolioSource.DEFAULT
        self._last_saved: Optional[datetime] = None
        self._error: Optional[str] = None

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def portfolio(self) -> Portfolio:
        return self._portfolio

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def last_saved(self) -> Optional[datetime]:
        return self._last_saved

    @property
    def config(self) -> PortfolioConfig:
        return self._config

    @property
    def history(self) -> tuple[HistoricalEntry, ...]:
        return self._history

    @property
    def automation(self) -> AutomationStatus:
        return self._automation

    def load(self) -> LoadResult:
        """
        Load portfolio and preferences from storage.

        Never raises: the result always carries a usable portfolio, and
        any problem ends up in the error banner.
        """
        result = self._repository.load_portfolio()

        self._portfolio = result.portfolio
        self._source = result.source
        self._last_saved = result.last_updated
        self._error = result.error
        self._preferences = self._repository.load_settings()

        return result

    def clear_error(self) -> None:
        """Dismiss the error banner."""
        self._error = None

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def preview_edit(self, updates: Mapping[str, Any]) -> ValidationResult:
        """Validate an edit against the current portfolio without applying it."""
        updates = dict(updates)
        if "savings" in updates and "monthly_savings" not in updates:
            updates["monthly_savings"] = updates.pop("savings")
        return self._validator.check_portfolio_edit({**self._portfolio.model_dump(), **updates})

    def update_portfolio(self, updates: Mapping[str, Any]) -> ValidationResult:
        """
        Apply a manual edit.

        updates may carry any subset of the bucket fields, monthly_savings
        and currency; everything else keeps its current value. The edit is
        all-or-nothing: if any field fails validation the portfolio is left
        untouched and the result lists one issue per bad field.

        When auto_save is on, a successful edit is saved immediately.
        """
        result = self.preview_edit(updates)

        if not result.is_valid:
            self._audit(AuditEventBuilder.validation_failed([
                {"field": issue.field, "type": issue.issue_type, "message": issue.message}
                for issue in result.issues
            ]))
            return result

        previous = self._portfolio
        self._portfolio = result.portfolio

        changed = [
            field
            for field in (*BUCKET_FIELDS, "monthly_savings", "currency")
            if getattr(previous, field) != getattr(self._portfolio, field)
        ]
        self._audit(AuditEventBuilder.portfolio_updated(
            changed_fields=changed,
            total=calculate_total(self._portfolio),
        ))

        if self._preferences.auto_save:
            self.save_now()

        return result

    def update_bucket(self, bucket: str, value: Any) -> ValidationResult:
        """
        Set a single bucket.

        Raises:
            InvalidInput: bucket is not one of the four bucket names
        """
        try:
            name = Bucket(bucket).value
        except ValueError:
            raise InvalidInput(f"Unknown bucket: {bucket}", field="bucket", value=bucket)
        return self.update_portfolio({name: value})

    def reset_portfolio(self) -> Portfolio:
        """Replace the portfolio with the default one."""
        self._portfolio = default_portfolio(self._config).model_copy(
            update={"currency": self._preferences.currency}
        )
        self._audit(AuditEventBuilder.portfolio_reset())

        if self._preferences.auto_save:
            self.save_now()

        return self._portfolio

    def save_now(self) -> bool:
        """
        Persist the current portfolio.

        On failure the in-memory portfolio is kept and the banner is set.
        """
        if self._repository.save_portfolio(self._portfolio):
            self._last_saved = datetime.utcnow()
            self._source = PortfolioSource.STORED
            return True

        self._error = "Failed to save portfolio. Your changes are kept for this session."
        return False

    def set_currency(self, currency: str) -> UserPreferences:
        """
        Change the display currency and persist the preference.

        Raises:
            UnsupportedCurrency: currency is not configured for display
        """
        code = self._validator.validate_currency(currency)

        self._preferences = self._preferences.model_copy(update={"currency": code})
        self._portfolio = self._portfolio.model_copy(update={"currency": code})

        if not self._repository.save_settings(self._preferences):
            self._error = "Failed to save settings."

        return self._preferences

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def _display_amount(self, amount: float, currency: str) -> int:
        """
        Convert a base-currency amount for display.

        An unknown currency is logged and the amount shown unconverted.
        """
        try:
            return convert_currency(
                amount,
                currency,
                self._config.exchange_rates,
                self._config.base_currency,
            )
        except UnsupportedCurrency:
            logger.warning(
                "display_conversion_failed",
                currency=currency,
                fallback=self._config.base_currency,
            )
            return round_half_up(amount)

    def snapshot(self, currency: Optional[str] = None) -> DashboardSnapshot:
        """
        Every derived value the dashboard shows, for one display currency.

        Base-currency figures (total, allocations, health, FI progress,
        history metrics) are computed first; display_* fields are each
        converted exactly once from their base-currency value.
        """
        currency = currency or self._preferences.currency
        config = self._config
        portfolio = self._portfolio

        total = calculate_total(portfolio)
        allocations = calculate_allocations(portfolio)
        allocation_values = allocations.as_dict()

        issues = evaluate_health(
            allocations,
            total,
            config.health_thresholds,
            currency=config.base_currency,
        )

        lean_fi = calculate_fi_progress(
            total,
            config.targets.lean,
            config.withdrawal_rate,
            config.assumed_growth_rate,
        )
        full_fi = calculate_fi_progress(
            total,
            config.targets.full,
            config.withdrawal_rate,
            config.assumed_growth_rate,
        )

        metrics = None
        if self._history:
            metrics = calculate_historical_metrics(total, self._history)

        buckets = []
        for bucket in Bucket:
            value = getattr(portfolio, bucket.value)
            target_value = config.targets.for_bucket(bucket.value)
            buckets.append(BucketSnapshot(
                bucket=bucket,
                value=value,
                display_value=self._display_amount(value, currency),
                allocation_percent=allocation_values[bucket.value],
                target_value=target_value,
                display_target_value=self._display_amount(target_value, currency),
                target_percent=config.allocations.for_bucket(bucket.value),
                status=calculate_bucket_status(value, target_value),
            ))

        return DashboardSnapshot(
            currency=currency,
            total=total,
            display_total=self._display_amount(total, currency),
            display_monthly_passive_income=self._display_amount(
                lean_fi.monthly_passive_income, currency
            ),
            allocations=allocations,
            buckets=buckets,
            health_issues=issues,
            health_summary=summarize_health(issues),
            lean_fi=lean_fi,
            full_fi=full_fi,
            metrics=metrics,
        )

    def get_status(self) -> PortfolioStatus:
        """Header status: error banner, last save and health badge."""
        issues = evaluate_health(
            calculate_allocations(self._portfolio),
            calculate_total(self._portfolio),
            self._config.health_thresholds,
            currency=self._config.base_currency,
        )
        summary = summarize_health(issues)

        return PortfolioStatus(
            has_error=self._error is not None,
            error_message=self._error,
            last_saved=self._last_saved,
            total_value=calculate_total(self._portfolio),
            health_score=summary.score,
            urgent_issues=summary.urgent_count,
            source=self._source,
        )

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_data(self) -> str:
        """Export the in-memory portfolio and preferences as JSON text."""
        return self._repository.export_data(self._portfolio, self._preferences)

    def import_data(self, text: str | bytes) -> ImportResult:
        """
        Import an exported document and make it the current state.

        A rejected document leaves the current state untouched and sets
        the banner.
        """
        result = self._repository.import_data(text)

        if not result.success:
            self._error = result.error
            return result

        if result.portfolio is not None:
            self._portfolio = result.portfolio
            self._source = PortfolioSource.STORED
            self._last_saved = datetime.utcnow()
        if result.settings is not None:
            self._preferences = result.settings
        self._error = None

        return result

    def get_recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Newest audit events first (empty without an audit logger)."""
        if self._audit_logger is None:
            return []
        return self._audit_logger.get_recent_events(limit)

    def clear_all_data(self) -> bool:
        """
        Remove everything stored and return to the default portfolio.
        """
        if not self._repository.clear_all_data():
            self._error = "Failed to clear stored data."
            return False

        self._portfolio = default_portfolio(self._config)
        self._preferences = UserPreferences(currency=self._config.base_currency)
        self._source = PortfolioSource.DEFAULT
        self._last_saved = None
        self._error = None
        return True


def create_app_components(
    use_storage: bool = True,
    store: Optional[KeyValueStore] = None,
) -> PortfolioDashboard:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the JSON file store.
                    Set to False for testing without a disk.
        store: Explicit store to use instead (overrides use_storage)

    Returns:
        A PortfolioDashboard that has not been loaded yet
    """
    settings = get_settings()
    config = settings.portfolio
    storage_settings = settings.storage

    if store is None:
        if use_storage:
            store = JsonFileStore(storage_settings.data_dir)
            if not store.is_available():
                # Storage not usable - continue in memory for this session
                logger.warning(
                    "storage_unavailable",
                    data_dir=str(storage_settings.data_dir),
                )
                store = InMemoryStore()
        else:
            store = InMemoryStore()

    audit_logger = AuditLogger(
        store,
        storage_key=f"{storage_settings.namespace}_audit",
        max_events=storage_settings.max_audit_events,
    )
    validator = PortfolioValidator(config)
    repository = PortfolioRepository(
        store,
        validator,
        config,
        storage_settings,
        audit_logger=audit_logger,
    )

    return PortfolioDashboard(
        repository,
        validator,
        config,
        audit_logger=audit_logger,
    )
