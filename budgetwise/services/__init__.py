"""Services package."""

from budgetwise.services.storage import (
    AuditStorageInterface,
    BackupFailureError,
    CorruptStateError,
    InMemoryLedgerStorage,
    IOFailureError,
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "BackupFailureError",
    "CorruptStateError",
    "InMemoryLedgerStorage",
    "IOFailureError",
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
    "LedgerStorageInterface",
    "StorageError",
]
