"""
Portfolio Persistence Service

Serializes portfolio and settings records into the key-value store,
keeps one prior snapshot as a backup, and handles import/export.

DESIGN DECISION: Unlike the calculations, everything here degrades
gracefully. A failed load falls back to the backup snapshot, then to the
default portfolio; a failed save returns False. The caller always gets a
usable portfolio plus an error message it can show as a banner.

Storage layout (namespace "inv2" by default):
- <ns>_portfolio: current portfolio record (JSON)
- <ns>_backup:    the previous portfolio record (JSON)
- <ns>_settings:  user preferences (JSON)
- <ns>_audit:     audit trail (owned by AuditLogger)
"""

import json
from datetime import datetime
from typing import Optional

import structlog

from portfolio_tracker.audit import AuditLogger, create_correlation_id
from portfolio_tracker.config.settings import PortfolioConfig, StorageSettings
from portfolio_tracker.data import default_portfolio
from portfolio_tracker.errors import InvalidInput
from portfolio_tracker.models.audit import AuditEventBuilder
from portfolio_tracker.models.portfolio import (
    ExportBundle,
    ImportResult,
    LoadResult,
    Portfolio,
    PortfolioSource,
    UserPreferences,
)
from portfolio_tracker.services.storage import KeyValueStore, StorageError
from portfolio_tracker.validation import PortfolioValidator


logger = structlog.get_logger(__name__)


class PortfolioRepository:
    """
    Loads and saves the portfolio and settings records.
    """

    def __init__(
        self,
        store: KeyValueStore,
        validator: PortfolioValidator,
        config: PortfolioConfig,
        storage_settings: StorageSettings,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator
        self._config = config
        self._version = storage_settings.storage_version
        self._app_identifier = storage_settings.app_identifier
        self._audit_logger = audit_logger

        namespace = storage_settings.namespace
        self.portfolio_key = f"{namespace}_portfolio"
        self.settings_key = f"{namespace}_settings"
        self.backup_key = f"{namespace}_backup"
        self.audit_key = f"{namespace}_audit"

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _metadata(self) -> dict:
        return {
            "last_updated": datetime.utcnow().isoformat(),
            "version": self._version,
        }

    # -------------------------------------------------------------------------
    # Portfolio
    # -------------------------------------------------------------------------

    def _parse_record(self, raw: str) -> tuple[Portfolio, Optional[datetime]]:
        """
        Parse and validate one stored portfolio record.

        Raises:
            ValueError: unparsable JSON, missing bucket fields, bad values
        """
        data = json.loads(raw)
        portfolio = self._validator.validate_portfolio(data)

        last_updated = None
        if isinstance(data.get("last_updated"), str):
            try:
                last_updated = datetime.fromisoformat(data["last_updated"])
            except ValueError:
                logger.warning("invalid_last_updated", value=data["last_updated"])
        return portfolio, last_updated

    def _read_record(self, key: str) -> Optional[tuple[Portfolio, Optional[datetime]]]:
        raw = self._store.get(key)
        if raw is None:
            return None
        return self._parse_record(raw)

    def save_portfolio(self, portfolio: Portfolio) -> bool:
        """
        Persist the portfolio, keeping the previous record as the backup.

        Returns:
            True if the new record was written
        """
        record = {**portfolio.model_dump(mode="json"), **self._metadata()}

        try:
            existing = self._store.get(self.portfolio_key)
            if existing is not None:
                try:
                    self._parse_record(existing)
                    self._store.set(self.backup_key, existing)
                except ValueError:
                    # Never replace a good backup with a broken record
                    logger.warning("skipping_backup_of_invalid_record", key=self.portfolio_key)
            self._store.set(self.portfolio_key, json.dumps(record))
        except StorageError as e:
            self._audit(AuditEventBuilder.save_failed(self.portfolio_key, str(e)))
            return False

        self._audit(AuditEventBuilder.portfolio_saved(
            total=sum(portfolio.bucket_values().values())
        ))
        return True

    def load_portfolio(self) -> LoadResult:
        """
        Load the current portfolio.

        Order: primary record → backup snapshot → default portfolio.
        The primary is rejected if it is missing, unparsable, lacks any of
        the four bucket fields, or fails validation.
        """
        error = None
        primary_failed = False

        try:
            loaded = self._read_record(self.portfolio_key)
        except (StorageError, ValueError) as e:
            loaded = None
            primary_failed = True
            error = f"Failed to load portfolio: {e}"
            self._audit(AuditEventBuilder.portfolio_load_failed(self.portfolio_key, str(e)))

        if loaded is not None:
            portfolio, last_updated = loaded
            self._audit(AuditEventBuilder.portfolio_loaded(
                source=PortfolioSource.STORED.value,
                total=sum(portfolio.bucket_values().values()),
            ))
            return LoadResult(
                portfolio=portfolio,
                source=PortfolioSource.STORED,
                last_updated=last_updated,
            )

        reason = error or "No stored portfolio found"

        try:
            backup = self._read_record(self.backup_key)
        except (StorageError, ValueError) as e:
            backup = None
            self._audit(AuditEventBuilder.portfolio_load_failed(self.backup_key, str(e)))

        if backup is not None:
            portfolio, last_updated = backup
            self._audit(AuditEventBuilder.backup_restored(reason))
            return LoadResult(
                portfolio=portfolio,
                source=PortfolioSource.BACKUP,
                last_updated=last_updated,
                error=f"{reason}. Restored from backup.",
            )

        self._audit(AuditEventBuilder.defaults_used(reason))
        return LoadResult(
            portfolio=default_portfolio(self._config),
            source=PortfolioSource.DEFAULT,
            error=f"{reason}. Using default portfolio." if primary_failed else None,
        )

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def save_settings(self, preferences: UserPreferences) -> bool:
        """Persist user preferences."""
        record = {**preferences.model_dump(mode="json"), **self._metadata()}
        try:
            self._store.set(self.settings_key, json.dumps(record))
        except StorageError as e:
            self._audit(AuditEventBuilder.save_failed(self.settings_key, str(e)))
            return False

        self._audit(AuditEventBuilder.settings_saved(preferences.currency))
        return True

    def load_settings(self) -> UserPreferences:
        """
        Load user preferences, with defaults for anything missing.

        Any failure yields the defaults.
        """
        defaults = UserPreferences(currency=self._config.base_currency)
        try:
            raw = self._store.get(self.settings_key)
            if raw is None:
                return defaults
            stored = json.loads(raw)
            if not isinstance(stored, dict):
                raise InvalidInput("Invalid stored settings format")
            return UserPreferences.model_validate({**defaults.model_dump(), **stored})
        except (StorageError, ValueError) as e:
            logger.warning("settings_load_failed", error=str(e))
            return defaults

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_data(
        self,
        portfolio: Optional[Portfolio] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> str:
        """
        Bundle portfolio and settings into a pretty-printed JSON document.

        Falls back to what is in storage for anything not passed in.
        """
        if portfolio is None:
            loaded = self.load_portfolio()
            if loaded.source != PortfolioSource.DEFAULT:
                portfolio = loaded.portfolio
        if preferences is None:
            preferences = self.load_settings()

        bundle = ExportBundle(
            portfolio=portfolio,
            settings=preferences,
            version=self._version,
            app_identifier=self._app_identifier,
        )

        self._audit(AuditEventBuilder.data_exported(
            has_portfolio=portfolio is not None,
            has_settings=preferences is not None,
        ))
        return bundle.model_dump_json(indent=2)

    def import_data(self, text: str | bytes) -> ImportResult:
        """
        Apply an exported document.

        The portfolio goes through the same validation as a manual edit.
        Either section may be absent. Nothing is written unless the whole
        document validates. Raw bytes are accepted as uploaded; undecodable
        bytes are reported like any other bad document.
        """
        correlation_id = create_correlation_id()

        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise InvalidInput("Invalid import data format")

            portfolio = None
            if data.get("portfolio") is not None:
                portfolio = self._validator.validate_portfolio(data["portfolio"])

            preferences = None
            if data.get("settings") is not None:
                preferences = UserPreferences.model_validate(data["settings"])
                preferences = preferences.model_copy(update={
                    "currency": self._validator.validate_currency(preferences.currency),
                })
        except (TypeError, ValueError) as e:
            self._audit(AuditEventBuilder.import_failed(str(e), correlation_id))
            return ImportResult(success=False, error=f"Import failed: {e}")

        if portfolio is not None and not self.save_portfolio(portfolio):
            message = "Import failed: could not save portfolio"
            self._audit(AuditEventBuilder.import_failed(message, correlation_id))
            return ImportResult(
                success=False,
                portfolio=portfolio,
                settings=preferences,
                error=message,
            )

        if preferences is not None and not self.save_settings(preferences):
            logger.warning("imported_settings_not_saved")

        self._audit(AuditEventBuilder.data_imported(
            has_portfolio=portfolio is not None,
            has_settings=preferences is not None,
            correlation_id=correlation_id,
        ))
        return ImportResult(success=True, portfolio=portfolio, settings=preferences)

    def clear_all_data(self) -> bool:
        """
        Remove portfolio, backup and settings. The audit trail is kept.
        """
        keys = [self.portfolio_key, self.backup_key, self.settings_key]
        try:
            for key in keys:
                self._store.remove(key)
        except StorageError as e:
            self._audit(AuditEventBuilder.system_error("clear_failed", str(e)))
            return False

        self._audit(AuditEventBuilder.data_cleared(keys))
        return True
