"""
Main Orchestrator for BudgetWise

This module ties together the ledger, storage, bulk transform and audit
trail, and defines the one flow a process runs:

    load -> zero or more mutations/queries -> optional bulk transform
         -> save (backup first) -> terminate

DESIGN DECISION: The session enforces the boundaries:
- Nothing is mutated before the stored ledger loaded successfully, so a
  corrupt file is never overwritten with a fresh empty ledger
- A failed save leaves the stored ledger untouched and is never retried
- Every step is audited

State machine:
    UNINITIALIZED -> LOADED -> MUTATED* -> SAVED -> TERMINATED
After SAVED only another save() (or close()) is allowed.
"""

from enum import Enum
from typing import Iterable, Iterator, Optional

import structlog

from budgetwise.audit import AuditLogger
from budgetwise.config import AppSettings, LedgerConfig
from budgetwise.ledger import Ledger
from budgetwise.models.ledger import LedgerSummary
from budgetwise.models.records import DEFAULT_INCOME_CATEGORY, Expense
from budgetwise.services.storage import (
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    StorageError,
)
from budgetwise.transforms import AmountTransform, BulkTransformPass, TransformReport
from budgetwise.validation import AmountLike


logger = structlog.get_logger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    MUTATED = "mutated"
    SAVED = "saved"
    TERMINATED = "terminated"


class SessionStateError(RuntimeError):
    """An operation was attempted in a state that does not allow it."""

    def __init__(self, operation: str, state: SessionState):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state.value}")


_READABLE = {SessionState.LOADED, SessionState.MUTATED, SessionState.SAVED}
_MUTABLE = {SessionState.LOADED, SessionState.MUTATED}


class LedgerSession:
    """
    One load-mutate-save session over a stored ledger.

    Usage:
        with LedgerSession(storage, backup_enabled=True) as session:
            session.add_expense("rent", Decimal("500"))
            session.save()
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        backup_enabled: bool = True,
        audit_logger: Optional[AuditLogger] = None,
        transform_pass: Optional[BulkTransformPass] = None,
    ):
        self._storage = storage
        self._backup_enabled = backup_enabled
        self._audit_logger = audit_logger or AuditLogger()
        self._transform_pass = transform_pass or BulkTransformPass()
        self._ledger: Optional[Ledger] = None
        self._state = SessionState.UNINITIALIZED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def ledger(self) -> Ledger:
        self._require("read the ledger", _READABLE)
        return self._ledger

    def __enter__(self) -> "LedgerSession":
        if self._state == SessionState.UNINITIALIZED:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> Ledger:
        """
        Load the stored ledger.

        Raises:
            CorruptStateError: Stored data is unreadable; the session stays
                uninitialized so nothing can overwrite it
            IOFailureError: The read failed
        """
        self._require("open", {SessionState.UNINITIALIZED})
        existed = self._storage.exists()
        try:
            ledger = self._storage.load()
        except StorageError as e:
            self._audit_logger.log_load_failed(self._storage.location, str(e))
            raise

        if existed:
            self._audit_logger.log_ledger_loaded(
                self._storage.location,
                income_count=len(ledger.incomes),
                expense_count=len(ledger.expenses),
            )
        else:
            self._audit_logger.log_ledger_created(self._storage.location)

        self._ledger = ledger
        self._state = SessionState.LOADED
        return ledger

    def save(self) -> bool:
        """
        Reconcile budgets and persist the ledger.

        May be called again after a previous save; each call re-runs the
        backup-then-write sequence.

        Returns:
            True if a backup copy was made

        Raises:
            BackupFailureError, IOFailureError: save aborted, stored ledger
                untouched
        """
        self._require("save", _READABLE)
        self._ledger.reconcile_budgets()
        try:
            backed_up = self._storage.save(self._ledger, backup_enabled=self._backup_enabled)
        except StorageError as e:
            self._audit_logger.log_save_failed(self._storage.location, str(e))
            raise

        if backed_up:
            backup = getattr(self._storage, "backup_path", "backup")
            self._audit_logger.log_backup_written(self._storage.location, str(backup))
        self._audit_logger.log_ledger_saved(self._storage.location, self._backup_enabled)
        self._state = SessionState.SAVED
        return backed_up

    def close(self) -> None:
        """Discard the in-memory ledger. Unsaved changes are dropped."""
        if self._state == SessionState.MUTATED:
            logger.warning("session_closed_unsaved", location=self._storage.location)
        self._ledger = None
        self._state = SessionState.TERMINATED

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_income(
        self,
        amount: AmountLike,
        category: str = DEFAULT_INCOME_CATEGORY,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        self._require("add income", _MUTABLE)
        entry = self._ledger.add_income(amount, category=category, tags=tags)
        self._audit_logger.log_income_added(entry.category, entry.amount)
        self._state = SessionState.MUTATED

    def add_expense(
        self,
        category: str,
        amount: AmountLike,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        self._require("add expense", _MUTABLE)
        entry = self._ledger.add_expense(category, amount, tags=tags)
        self._audit_logger.log_expense_added(entry.category, entry.amount)
        self._state = SessionState.MUTATED

    def remove_expenses_by_category(self, category: str) -> int:
        self._require("remove expenses", _MUTABLE)
        removed = self._ledger.remove_expenses_by_category(category)
        self._audit_logger.log_expenses_removed(category, removed)
        self._state = SessionState.MUTATED
        return removed

    def clear(self) -> None:
        self._require("clear", _MUTABLE)
        self._ledger.clear()
        self._audit_logger.log_ledger_cleared()
        self._state = SessionState.MUTATED

    def run_transform(
        self,
        transform: AmountTransform,
        transform_name: Optional[str] = None,
    ) -> TransformReport:
        """Apply the bulk transform pass to every income and expense."""
        self._require("run a transform", _MUTABLE)
        report = self._transform_pass.run(self._ledger, transform, transform_name)
        for failure in report.failures:
            self._audit_logger.log_error(
                "transform_failure",
                failure.error,
                {
                    "kind": failure.kind.value,
                    "index": failure.index,
                    "category": failure.category,
                },
            )
        self._audit_logger.log_transform_completed(
            report.transformed,
            report.failed_count,
            report.transform_name,
        )
        self._state = SessionState.MUTATED
        return report

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_expenses(self) -> Iterator[Expense]:
        return self.ledger.list_expenses()

    def summarize_by_category(self) -> dict:
        return self.ledger.summarize_by_category()

    def summary(self) -> LedgerSummary:
        return self.ledger.summary()

    def _require(self, operation: str, allowed: set) -> None:
        if self._state not in allowed:
            raise SessionStateError(operation, self._state)


def create_session(
    config: LedgerConfig,
    settings: AppSettings,
    backup_enabled: Optional[bool] = None,
    strict_categories: bool = False,
) -> LedgerSession:
    """
    Factory function to build a session from configuration.

    Args:
        config: Persisted user configuration (paths, backup policy)
        settings: Process settings (audit log, worker count)
        backup_enabled: Overrides config.backup_enabled when given
        strict_categories: Reject entries for unregistered categories

    Returns:
        An unopened LedgerSession
    """
    storage = JsonFileLedgerStorage(config.ledger_path, strict_categories=strict_categories)

    audit_storage = None
    if settings.audit_log_enabled:
        audit_storage = JsonLinesAuditStorage(config.audit_log_path)

    return LedgerSession(
        storage=storage,
        backup_enabled=config.backup_enabled if backup_enabled is None else backup_enabled,
        audit_logger=AuditLogger(audit_storage),
        transform_pass=BulkTransformPass(max_workers=settings.transform_workers),
    )

