"""
In-Memory Storage Implementation

Same contract as the JSON file store, but the "file" is a string held in
memory. Useful for tests and for embedding the ledger in another process
that owns persistence itself.
"""

from typing import Optional

from budgetwise.ledger import Ledger
from budgetwise.services.storage.interface import LedgerStorageInterface
from budgetwise.services.storage.json_file import deserialize_ledger, serialize_ledger


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Holds the serialized ledger (and its backup) in memory."""

    def __init__(
        self,
        initial: Optional[str] = None,
        strict_categories: bool = False,
    ):
        self._data = initial
        self._strict_categories = strict_categories
        self._backup: Optional[str] = None
        self.save_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def data(self) -> Optional[str]:
        return self._data

    @property
    def backup(self) -> Optional[str]:
        return self._backup

    def exists(self) -> bool:
        return self._data is not None

    def load(self) -> Ledger:
        if self._data is None:
            return Ledger(strict_categories=self._strict_categories)
        return deserialize_ledger(
            self._data,
            self.location,
            strict_categories=self._strict_categories,
        )

    def save(self, ledger: Ledger, backup_enabled: bool = True) -> bool:
        payload = serialize_ledger(ledger)
        backed_up = False
        if backup_enabled and self._data is not None:
            self._backup = self._data
            backed_up = True
        self._data = payload
        self.save_count += 1
        return backed_up
