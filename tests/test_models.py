"""
Tests for BudgetWise models

Test strategy:
1. Unit tests for individual components (models, ledger, transforms)
2. Integration tests for flows (file storage in tmp_path, CLI runs)
3. No real home directory in tests (see conftest.py)
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from budgetwise.models.records import (
    Budget,
    Category,
    Expense,
    Income,
    RecurringTransaction,
    Tag,
)
from budgetwise.models.ledger import LedgerSnapshot, SCHEMA_VERSION
from budgetwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budgetwise.models.validation import ValidationIssue, ValidationResult


class TestRecordModels:
    """Tests for the record value objects."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(category="rent", amount=Decimal("500.00"))
        assert expense.category == "rent"
        assert expense.amount == Decimal("500.00")
        assert expense.tags == frozenset()
        assert expense.timestamp.tzinfo is not None

    def test_income_default_category(self):
        """Test Income falls back to the generic income category."""
        income = Income(amount=Decimal("10"))
        assert income.category == "income"

    def test_naive_timestamp_becomes_utc(self):
        """Test that naive datetimes are read as UTC."""
        expense = Expense(
            category="food",
            amount=Decimal("1"),
            timestamp=datetime(2024, 12, 1, 9, 30),
        )
        assert expense.timestamp == datetime(2024, 12, 1, 9, 30, tzinfo=timezone.utc)

    def test_negative_amount_passes_through(self):
        """Test that corrections/reversals are not rejected."""
        expense = Expense(category="refund", amount=Decimal("-25.00"))
        assert expense.amount == Decimal("-25.00")

    def test_non_finite_amount_rejected(self):
        """Test NaN and infinity are rejected at the schema boundary."""
        with pytest.raises(ValueError):
            Expense(category="rent", amount=Decimal("NaN"))
        with pytest.raises(ValueError):
            Income(amount=Decimal("Infinity"))

    def test_tags_serialized_sorted(self):
        """Test tags are written in a stable order."""
        expense = Expense(category="food", amount=Decimal("5"), tags={"b", "a", "c"})
        data = json.loads(expense.model_dump_json())
        assert data["tags"] == ["a", "b", "c"]

    def test_records_are_immutable(self):
        """Test entries cannot be edited in place."""
        expense = Expense(category="rent", amount=Decimal("500"))
        with pytest.raises(ValueError):
            expense.amount = Decimal("1")

    def test_recurring_transaction_creation(self):
        """Test RecurringTransaction stores its template fields."""
        template = RecurringTransaction(
            category="rent",
            amount=Decimal("500"),
            timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc),
            tags={"home"},
        )
        assert template.timestamp.year == 2025
        assert "home" in template.tags

    def test_budget_defaults_spent_to_zero(self):
        """Test Budget starts with nothing spent."""
        budget = Budget(category="food", allocated=Decimal("200"))
        assert budget.spent == Decimal("0")

    def test_out_of_range_amount_rejected(self):
        """Test amounts too large or too small to sum are rejected."""
        with pytest.raises(ValueError):
            Expense(category="x", amount=Decimal("1e1000000"))
        with pytest.raises(ValueError):
            Income(amount=Decimal("-1e-1000000"))
        with pytest.raises(ValueError):
            Budget(category="x", allocated=Decimal("9E+999998"))

    def test_long_names_accepted(self):
        """Test category and tag names have no length cap."""
        assert Category(name="c" * 300).name == "c" * 300
        assert Tag(name="t" * 101).name == "t" * 101

    def test_category_and_tag_names_stripped(self):
        """Test whitespace is stripped from names."""
        assert Category(name="  rent ").name == "rent"
        assert Tag(name=" home ").name == "home"

    def test_category_name_required(self):
        """Test empty category names are rejected."""
        with pytest.raises(ValueError):
            Category(name="")


class TestLedgerSnapshot:
    """Tests for the persisted ledger shape."""

    def test_optional_collections_default_empty(self):
        """Test absent collections load as empty lists."""
        snapshot = LedgerSnapshot.model_validate_json('{"expenses": []}')
        assert snapshot.schema_version == SCHEMA_VERSION
        assert snapshot.income_sources == []
        assert snapshot.budgets == []
        assert snapshot.recurring_transactions == []
        assert snapshot.categories == []
        assert snapshot.tags == []

    def test_legacy_scalar_income_upgraded(self):
        """Test the original {income, expenses} layout still loads."""
        raw = json.dumps({
            "income": 1000.0,
            "expenses": [
                {"category": "rent", "amount": 500.0},
                {"category": "food", "amount": 150.0},
            ],
        })
        snapshot = LedgerSnapshot.model_validate_json(raw)
        assert len(snapshot.income_sources) == 1
        assert snapshot.income_sources[0].amount == Decimal("1000")
        assert snapshot.income_sources[0].category == "income"
        assert [e.category for e in snapshot.expenses] == ["rent", "food"]

    def test_legacy_zero_income_has_no_entries(self):
        """Test a zero legacy income produces no income entry."""
        snapshot = LedgerSnapshot.model_validate({"income": 0.0, "expenses": []})
        assert snapshot.income_sources == []

    def test_legacy_income_must_be_numeric(self):
        """Test a garbage legacy income is a validation error."""
        with pytest.raises(ValueError):
            LedgerSnapshot.model_validate({"income": "lots", "expenses": []})

    def test_expenses_must_be_a_list(self):
        """Test a wrong shape is rejected."""
        with pytest.raises(ValueError):
            LedgerSnapshot.model_validate({"expenses": {"rent": 5}})


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            description="Ledger loaded",
        )
        assert event.event_type == AuditEventType.LEDGER_LOADED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added("rent", Decimal("500.00"))
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["details"]["amount"] == "500.00"
        assert log_dict["is_user_action"] is True

    def test_audit_event_to_json_line(self):
        """Test one event serializes to a single JSON line."""
        event = AuditEventBuilder.expenses_removed("food", 2)
        line = event.to_json_line()
        assert "\n" not in line
        assert json.loads(line)["details"]["removed"] == 2

    def test_builder_load_failed_is_critical(self):
        """Test AuditEventBuilder.load_failed severity."""
        event = AuditEventBuilder.load_failed("/tmp/x.json", "bad json")
        assert event.severity == AuditSeverity.CRITICAL
        assert event.error_message == "bad json"

    def test_builder_transform_with_failures_is_warning(self):
        """Test partial transforms are flagged."""
        assert AuditEventBuilder.transform_completed(5, 1, "scale").severity == AuditSeverity.WARNING
        assert AuditEventBuilder.transform_completed(5, 0, "scale").severity == AuditSeverity.INFO


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="expenses",
                    issue_type="broken",
                    message="Broken",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="expenses",
                    issue_type="empty_category",
                    message="No category",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.warning_count == 1

    def test_issue_severity_restricted(self):
        """Test unknown severities are rejected."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
