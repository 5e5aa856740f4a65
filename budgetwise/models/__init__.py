"""
Data Models Package

This package contains all Pydantic models used by BudgetWise.
Everything persisted or logged must conform to these schemas.
"""

from budgetwise.models.records import (
    DEFAULT_INCOME_CATEGORY,
    Budget,
    Category,
    EntryKind,
    Expense,
    Income,
    RecurringTransaction,
    Tag,
    utc_now,
)
from budgetwise.models.ledger import (
    SCHEMA_VERSION,
    LedgerSnapshot,
    LedgerSummary,
)
from budgetwise.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from budgetwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record types
    "DEFAULT_INCOME_CATEGORY",
    "Budget",
    "Category",
    "EntryKind",
    "Expense",
    "Income",
    "RecurringTransaction",
    "Tag",
    "utc_now",
    # Ledger snapshot
    "SCHEMA_VERSION",
    "LedgerSnapshot",
    "LedgerSummary",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
