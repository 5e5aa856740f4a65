"""
JSON Lines Audit Storage

Appends one JSON object per audit event to a file (audit.jsonl in the data
directory). Append-only: nothing here rewrites or truncates the file.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from budgetwise.models.audit import AuditEvent
from budgetwise.services.storage.interface import AuditStorageInterface, IOFailureError


class JsonLinesAuditStorage(AuditStorageInterface):
    """Audit events stored one per line."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(event.to_json_line() + "\n")
        except OSError as e:
            raise IOFailureError(
                f"Unable to append to audit log {self._path}: {e}",
                location=str(self._path),
            ) from e
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise IOFailureError(
                f"Unable to read audit log {self._path}: {e}",
                location=str(self._path),
            ) from e

        events = []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                # A torn last line from an interrupted append
                continue
        return events
