"""
Audit Logger

DESIGN DECISION: Every ledger mutation and persistence step is logged.
This provides:
1. Traceability of how the stored ledger got its contents
2. Debugging capability when a load or save fails
3. A history the user can read back from audit.jsonl

The audit logger:
- Always logs locally through structlog
- Gracefully handles audit storage failures and malformed events (a
  broken audit trail never aborts a ledger mutation or save)
"""

import logging
import sys
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from budgetwise.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budgetwise.services.storage import AuditStorageInterface, StorageError


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """
    Configure structlog on top of stdlib logging.

    Logs go to stderr so command output on stdout stays clean.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if configured (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budgetwise.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def _emit(self, build: Callable[..., AuditEvent], *args) -> bool:
        """Build an event and log it. A malformed event is logged, never raised."""
        try:
            event = build(*args)
        except ValidationError as e:
            self._logger.error(
                "audit_event_invalid",
                builder=build.__name__,
                error=str(e),
            )
            return False
        return self.log(event)

    def log_ledger_created(self, location: str) -> None:
        self._emit(AuditEventBuilder.ledger_created, location)

    def log_ledger_loaded(
        self,
        location: str,
        income_count: int,
        expense_count: int,
    ) -> None:
        self._emit(AuditEventBuilder.ledger_loaded, location, income_count, expense_count)

    def log_load_failed(self, location: str, error_message: str) -> None:
        self._emit(AuditEventBuilder.load_failed, location, error_message)

    def log_income_added(self, category: str, amount) -> None:
        self._emit(AuditEventBuilder.income_added, category, amount)

    def log_expense_added(self, category: str, amount) -> None:
        self._emit(AuditEventBuilder.expense_added, category, amount)

    def log_expenses_removed(self, category: str, removed: int) -> None:
        self._emit(AuditEventBuilder.expenses_removed, category, removed)

    def log_ledger_cleared(self) -> None:
        self._emit(AuditEventBuilder.ledger_cleared)

    def log_amount_rejected(self, field: str, raw_value: str, reason: str) -> None:
        """Log a command rejected for an invalid amount."""
        self._emit(AuditEventBuilder.amount_rejected, field, raw_value, reason)

    def log_transform_completed(
        self,
        transformed: int,
        failed: int,
        transform_name: str,
    ) -> None:
        self._emit(AuditEventBuilder.transform_completed, transformed, failed, transform_name)

    def log_backup_written(self, source: str, backup: str) -> None:
        self._emit(AuditEventBuilder.backup_written, source, backup)

    def log_ledger_saved(self, location: str, backup_enabled: bool) -> None:
        self._emit(AuditEventBuilder.ledger_saved, location, backup_enabled)

    def log_save_failed(self, location: str, error_message: str) -> None:
        self._emit(AuditEventBuilder.save_failed, location, error_message)

    def log_config_materialized(self, path: str) -> None:
        self._emit(AuditEventBuilder.config_materialized, path)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self._emit(AuditEventBuilder.system_error, error_type, error_message, details)
