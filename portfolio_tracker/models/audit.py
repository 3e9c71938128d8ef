"""
Audit Models for Portfolio Tracker

Every significant action on the portfolio is logged for audit purposes.
This provides:
1. Traceability of edits, saves and restores
2. Debugging information when storage misbehaves
3. A record of which fallback (backup or defaults) was used and why

DESIGN DECISION: Audit logs are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Loading
    PORTFOLIO_LOADED = "portfolio_loaded"
    PORTFOLIO_LOAD_FAILED = "portfolio_load_failed"
    BACKUP_RESTORED = "backup_restored"
    DEFAULTS_USED = "defaults_used"

    # Editing
    PORTFOLIO_UPDATED = "portfolio_updated"
    VALIDATION_FAILED = "validation_failed"
    PORTFOLIO_RESET = "portfolio_reset"

    # Persistence
    PORTFOLIO_SAVED = "portfolio_saved"
    SAVE_FAILED = "save_failed"
    SETTINGS_SAVED = "settings_saved"
    DATA_CLEARED = "data_cleared"

    # Import / export
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_FAILED = "import_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.portfolio_saved(total=476847.0)
        event = AuditEventBuilder.backup_restored(reason="Missing fields: hedge")
    """

    @staticmethod
    def portfolio_loaded(source: str, total: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_LOADED,
            description=f"Portfolio loaded from {source}",
            details={"source": source, "total": total},
        )

    @staticmethod
    def portfolio_load_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Stored record under {key} could not be used",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def backup_restored(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            severity=AuditSeverity.WARNING,
            description="Portfolio restored from backup snapshot",
            details={"reason": reason},
        )

    @staticmethod
    def defaults_used(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULTS_USED,
            severity=AuditSeverity.WARNING,
            description="No usable stored portfolio, using defaults",
            details={"reason": reason},
        )

    @staticmethod
    def portfolio_updated(changed_fields: list[str], total: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_UPDATED,
            description=f"Portfolio updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields, "total": total},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Portfolio edit rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def portfolio_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_RESET,
            description="Portfolio reset to defaults",
            is_user_action=True,
        )

    @staticmethod
    def portfolio_saved(total: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PORTFOLIO_SAVED,
            description="Portfolio saved",
            details={"total": total},
        )

    @staticmethod
    def save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to save {key}",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def settings_saved(currency: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_SAVED,
            description="Settings saved",
            details={"currency": currency},
        )

    @staticmethod
    def data_cleared(keys: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All stored data cleared",
            details={"keys": keys},
            is_user_action=True,
        )

    @staticmethod
    def data_exported(has_portfolio: bool, has_settings: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            description="Data exported",
            details={"portfolio": has_portfolio, "settings": has_settings},
            is_user_action=True,
        )

    @staticmethod
    def data_imported(
        has_portfolio: bool,
        has_settings: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            description="Data imported",
            details={"portfolio": has_portfolio, "settings": has_settings},
            correlation_id=correlation_id,
            is_user_action=True,
        )

    @staticmethod
    def import_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            description="Import rejected",
            error_message=error_message,
            correlation_id=correlation_id,
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            correlation_id=correlation_id,
        )
