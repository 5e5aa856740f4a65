"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the JSON file store as the default without hard-wiring it
2. Use in-memory storage for testing
3. Add other serializations later without touching the ledger

Unlike a database-backed store, a ledger store works on whole snapshots:
load everything at session start, save everything at the save point.

Every storage exception derives from StorageError, so callers can abort a
session on any persistence failure with a single except clause.
"""

from abc import ABC, abstractmethod

from budgetwise.ledger import Ledger
from budgetwise.models.audit import AuditEvent


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the ledger lives."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """True if a previously saved ledger is present."""
        pass

    @abstractmethod
    def load(self) -> Ledger:
        """
        Load the stored ledger.

        Returns:
            The stored ledger, or a fresh empty Ledger when nothing has
            been saved yet (the expected first-run case)

        Raises:
            CorruptStateError: If stored data exists but cannot be parsed
            IOFailureError: If the underlying read fails
        """
        pass

    @abstractmethod
    def save(self, ledger: Ledger, backup_enabled: bool = True) -> bool:
        """
        Replace the stored ledger with `ledger`.

        When backup_enabled is true and a previous ledger exists, it is
        copied to the backup location before anything is written.
        Readers never observe a partially written ledger.

        Returns:
            True if a backup copy was made

        Raises:
            BackupFailureError: If the required backup could not be made;
                the stored ledger is left untouched
            IOFailureError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, location: str = ""):
        self.location = location
        super().__init__(message)


class CorruptStateError(StorageError):
    """Stored ledger exists but is not a valid ledger."""
    pass


class BackupFailureError(StorageError):
    """A required backup could not be made; the save was aborted."""
    pass


class IOFailureError(StorageError):
    """The underlying read or write failed."""
    pass
