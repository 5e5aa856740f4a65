"""
JSON File Storage Implementation

DESIGN DECISION: The primary store is one human-readable JSON file because:
1. Users can inspect (and, carefully, hand-edit) their data
2. No database setup required
3. A backup is just a second copy of the same file

TRADEOFFS:
- The whole ledger is rewritten on every save (fine for personal use)
- No locking: concurrent writers to the same file are unsupported

Save ordering is strict: backup copy first, then write the new state to a
temporary file in the same directory, then os.replace() it over the
primary. A crash mid-save leaves either the old file or the new one,
never a truncated mix.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

import structlog
from pydantic import ValidationError

from budgetwise.ledger import Ledger
from budgetwise.models.ledger import LedgerSnapshot
from budgetwise.services.storage.interface import (
    BackupFailureError,
    CorruptStateError,
    IOFailureError,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)

BACKUP_INFIX = ".backup"


def backup_path_for(path: Path) -> Path:
    """finance_data.json -> finance_data.backup.json"""
    return path.with_name(f"{path.stem}{BACKUP_INFIX}{path.suffix}")


def serialize_ledger(ledger: Ledger) -> str:
    return ledger.to_snapshot().model_dump_json(indent=2)


def deserialize_ledger(
    data: Union[str, bytes],
    location: str,
    strict_categories: bool = False,
) -> Ledger:
    """
    Parse stored JSON into a Ledger.

    Raises:
        CorruptStateError: If the data is not valid JSON or not a ledger
    """
    try:
        snapshot = LedgerSnapshot.model_validate_json(data)
    except ValidationError as e:
        raise CorruptStateError(
            f"Stored ledger at {location} is not valid: "
            f"{e.error_count()} error(s), first: {e.errors()[0]['msg']}",
            location=location,
        ) from e
    return Ledger.from_snapshot(snapshot, strict_categories=strict_categories)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """Ledger stored as one JSON file with an optional sibling backup."""

    def __init__(
        self,
        path: Union[str, Path],
        strict_categories: bool = False,
    ):
        self._path = Path(path)
        self._strict_categories = strict_categories

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return backup_path_for(self._path)

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Ledger:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("ledger_not_found", path=self.location)
            return Ledger(strict_categories=self._strict_categories)
        except OSError as e:
            raise IOFailureError(
                f"Unable to read {self.location}: {e}",
                location=self.location,
            ) from e

        ledger = deserialize_ledger(
            raw,
            self.location,
            strict_categories=self._strict_categories,
        )
        logger.info("ledger_loaded", path=self.location)
        return ledger

    def save(self, ledger: Ledger, backup_enabled: bool = True) -> bool:
        payload = serialize_ledger(ledger)

        backed_up = False
        if backup_enabled and self._path.exists():
            self._write_backup()
            backed_up = True

        self._write_atomic(payload)
        logger.info("ledger_saved", path=self.location, backed_up=backed_up)
        return backed_up

    def _write_backup(self) -> None:
        try:
            shutil.copy2(self._path, self.backup_path)
        except OSError as e:
            raise BackupFailureError(
                f"Unable to back up {self.location} to {self.backup_path}: {e}",
                location=self.location,
            ) from e
        logger.info("backup_written", source=self.location, backup=str(self.backup_path))

    def _write_atomic(self, payload: str) -> None:
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=directory,
            )
        except OSError as e:
            raise IOFailureError(
                f"Unable to prepare write to {self.location}: {e}",
                location=self.location,
            ) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise IOFailureError(
                f"Unable to write {self.location}: {e}",
                location=self.location,
            ) from e
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.exception("temp_cleanup_failed", path=tmp_path)
