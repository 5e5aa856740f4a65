"""
Audit Models for BudgetWise

Every ledger mutation and every persistence step produces an audit event.
This provides:
1. Traceability of how the ledger reached its current state
2. Debugging information when a load or save fails
3. A history the user can inspect (audit.jsonl next to the ledger)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from budgetwise.models.records import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session lifecycle
    LEDGER_CREATED = "ledger_created"
    LEDGER_LOADED = "ledger_loaded"
    LOAD_FAILED = "load_failed"

    # Mutations
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    EXPENSES_REMOVED = "expenses_removed"
    LEDGER_CLEARED = "ledger_cleared"
    AMOUNT_REJECTED = "amount_rejected"
    TRANSFORM_COMPLETED = "transform_completed"

    # Persistence
    BACKUP_WRITTEN = "backup_written"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"

    # System events
    CONFIG_MATERIALIZED = "config_materialized"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


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
        default_factory=utc_now,
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

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered directly by a user command?"
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
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of the audit.jsonl file."""
        return json.dumps(self.to_log_dict(), default=str, sort_keys=True)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added("rent", Decimal("500"))
        audit_logger.log(event)
    """

    @staticmethod
    def ledger_created(location: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CREATED,
            description="No stored ledger found, starting empty",
            details={"location": location},
        )

    @staticmethod
    def ledger_loaded(
        location: str,
        income_count: int,
        expense_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            description="Ledger loaded from storage",
            details={
                "location": location,
                "income_count": income_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def load_failed(location: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.CRITICAL,
            description="Stored ledger could not be loaded",
            details={"location": location},
            error_message=error_message,
        )

    @staticmethod
    def income_added(category: str, amount: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_ADDED,
            description="Income added",
            details={"category": category, "amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def expense_added(category: str, amount: Decimal) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
            details={"category": category, "amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def expenses_removed(category: str, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_REMOVED,
            description=f"Removed {removed} expense(s) in one category",
            details={"category": category, "removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def ledger_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All ledger data cleared",
            is_user_action=True,
        )

    @staticmethod
    def amount_rejected(field: str, raw_value: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"Rejected invalid amount for {field}",
            details={"field": field, "raw_value": raw_value},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def transform_completed(
        transformed: int,
        failed: int,
        transform_name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFORM_COMPLETED,
            severity=AuditSeverity.WARNING if failed else AuditSeverity.INFO,
            description="Bulk transform applied",
            details={
                "transform": transform_name,
                "transformed": transformed,
                "failed": failed,
            },
        )

    @staticmethod
    def backup_written(source: str, backup: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_WRITTEN,
            description="Previous ledger copied to backup",
            details={"source": source, "backup": backup},
        )

    @staticmethod
    def ledger_saved(location: str, backup_enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            description="Ledger saved",
            details={"location": location, "backup_enabled": backup_enabled},
        )

    @staticmethod
    def save_failed(location: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.CRITICAL,
            description="Ledger save aborted",
            details={"location": location},
            error_message=error_message,
        )

    @staticmethod
    def config_materialized(path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIG_MATERIALIZED,
            description="Default configuration written",
            details={"path": path},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
