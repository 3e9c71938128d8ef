"""
Audit Logger

DESIGN DECISION: Every significant action on the portfolio is logged.
This provides:
1. Traceability of edits, saves, restores and imports
2. Debugging capability when stored data turns out to be unusable
3. A history the user can inspect on the settings page

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import json
import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog
from pydantic import ValidationError

from portfolio_tracker.models.audit import AuditEvent
from portfolio_tracker.services.storage import KeyValueStore, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stderr at level."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. A capped list in the key-value store (for the settings page)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        storage_key: str = "inv2_audit",
        max_events: int = 200,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Store for persistence. If None, only logs locally.
            storage_key: Key the event list is kept under
            max_events: Oldest events are dropped beyond this many
        """
        self._storage = storage
        self._storage_key = storage_key
        self._max_events = max_events
        self._logger = structlog.get_logger(__name__)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is None or self._max_events == 0:
            return True

        try:
            events = self._read_events()
            events.append(event.model_dump(mode="json"))
            self._storage.set(
                self._storage_key,
                json.dumps(events[-self._max_events:]),
            )
            return True
        except StorageError as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    def _read_events(self) -> list[dict]:
        raw = self._storage.get(self._storage_key)
        if not raw:
            return []
        try:
            events = json.loads(raw)
        except json.JSONDecodeError:
            self._logger.warning("audit_log_corrupt", key=self._storage_key)
            return []
        return events if isinstance(events, list) else []

    def get_recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """
        Most recent stored events, newest first.
        """
        if self._storage is None:
            return []
        try:
            events = self._read_events()
        except StorageError as e:
            self._logger.error("audit_storage_failed", error=str(e))
            return []
        recent = events[-limit:] if limit > 0 else []
        parsed = []
        for item in reversed(recent):
            try:
                parsed.append(AuditEvent.model_validate(item))
            except ValidationError as e:
                self._logger.warning(
                    "audit_event_corrupt",
                    key=self._storage_key,
                    error_count=e.error_count(),
                )
        return parsed


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step user action (e.g., an import).
    """
    return uuid4()
