"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger storage.
The JSON file store is the default backend; the in-memory store shares its
serialization and is swappable wherever a LedgerStorageInterface is expected.
"""

from budgetwise.services.storage.interface import (
    AuditStorageInterface,
    BackupFailureError,
    CorruptStateError,
    IOFailureError,
    LedgerStorageInterface,
    StorageError,
)
from budgetwise.services.storage.json_file import (
    JsonFileLedgerStorage,
    backup_path_for,
    deserialize_ledger,
    serialize_ledger,
)
from budgetwise.services.storage.memory import InMemoryLedgerStorage
from budgetwise.services.storage.audit_log import JsonLinesAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "BackupFailureError",
    "CorruptStateError",
    "IOFailureError",
    "StorageError",
    # Implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "JsonLinesAuditStorage",
    # Serialization helpers
    "backup_path_for",
    "deserialize_ledger",
    "serialize_ledger",
]
