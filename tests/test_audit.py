"""Tests for AuditLogger."""

from decimal import Decimal

import pytest

from budgetwise.audit import AuditLogger
from budgetwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budgetwise.services.storage import JsonLinesAuditStorage


class TestAuditLogger:
    """Tests for local logging plus optional persistence."""

    def test_log_without_storage(self):
        """Test logging with no storage configured succeeds."""
        assert AuditLogger().log(AuditEventBuilder.ledger_cleared()) is True

    def test_helpers_persist_events(self, tmp_path):
        """Test helper methods write through to the audit file."""
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        audit = AuditLogger(storage)

        audit.log_expense_added("rent", Decimal("500.00"))
        audit.log_amount_rejected("income", "abc", "not a number")
        audit.log_error("transform_failure", "division by zero", {"index": 3})

        newest, rejected, added = storage.get_recent_events()
        assert added.event_type == AuditEventType.EXPENSE_ADDED
        assert rejected.event_type == AuditEventType.AMOUNT_REJECTED
        assert rejected.details["raw_value"] == "abc"
        assert newest.event_type == AuditEventType.SYSTEM_ERROR
        assert newest.severity == AuditSeverity.ERROR
        assert newest.details == {"index": 3}

    def test_storage_failure_reported_not_raised(self, tmp_path):
        """Test a broken audit file is reported through the return value."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        audit = AuditLogger(JsonLinesAuditStorage(blocker / "audit.jsonl"))

        assert audit.log(AuditEventBuilder.ledger_created("x")) is False

    def test_long_user_text_kept_in_details(self, tmp_path):
        """Test user-supplied text of any length is persisted in details."""
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        audit = AuditLogger(storage)
        category = "c" * 600

        audit.log_expense_added(category, Decimal("1"))
        audit.log_expenses_removed(category, 1)

        removed, added = storage.get_recent_events()
        assert added.details["category"] == category
        assert removed.details["category"] == category
        assert len(removed.description) <= 500

    def test_malformed_event_reported_not_raised(self, tmp_path, monkeypatch):
        """Test an event that fails validation is dropped without raising."""
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        audit = AuditLogger(storage)

        def oversized() -> AuditEvent:
            return AuditEvent(
                event_type=AuditEventType.LEDGER_CLEARED,
                description="x" * 600,
            )

        monkeypatch.setattr(AuditEventBuilder, "ledger_cleared", staticmethod(oversized))

        audit.log_ledger_cleared()

        assert storage.get_recent_events() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
