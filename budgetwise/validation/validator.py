"""
Ledger Integrity Checks

DESIGN DECISION: Categories are loose string keys and the ledger does not
enforce referential integrity. This validator is the opt-in way to find
the loose ends:

- Expenses with an empty category
- Entries naming a category that was never registered
  (only checked once the ledger has registered categories)
- Budgets whose cached `spent` drifted from the matching expense total

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; Ledger.reconcile_budgets() is the explicit fix for drift.
"""

from typing import TYPE_CHECKING

from budgetwise.models.validation import ValidationIssue, ValidationResult

if TYPE_CHECKING:
    from budgetwise.ledger import Ledger


class LedgerValidator:
    """Checks a ledger for loose references and stale budget caches."""

    def __init__(self, ledger: "Ledger"):
        self._ledger = ledger

    def validate(self) -> ValidationResult:
        with self._ledger.locked():
            issues = [
                *self._check_empty_categories(),
                *self._check_unknown_categories(),
                *self._check_budget_drift(),
            ]

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)

    def _check_empty_categories(self) -> list[ValidationIssue]:
        count = sum(1 for e in self._ledger.expenses if not e.category.strip())
        if not count:
            return []
        return [ValidationIssue(
            field="expenses",
            issue_type="empty_category",
            message=f"{count} expense(s) have no category",
            severity="warning",
            suggested_fix="Remove them with an empty category and add them again",
        )]

    def _check_unknown_categories(self) -> list[ValidationIssue]:
        known = {c.name for c in self._ledger.categories}
        if not known:
            return []

        issues = []
        collections = (
            ("income_sources", self._ledger.incomes),
            ("expenses", self._ledger.expenses),
            ("budgets", self._ledger.budgets),
            ("recurring_transactions", self._ledger.recurring_transactions),
        )
        for field, records in collections:
            unknown = sorted({r.category for r in records} - known)
            for name in unknown:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="unknown_category",
                    message=f"Category '{name}' is used in {field} but not registered",
                    severity="warning",
                    suggested_fix=f"Register the category '{name}'",
                ))
        return issues

    def _check_budget_drift(self) -> list[ValidationIssue]:
        totals = self._ledger.summarize_by_category()
        issues = []
        for budget in self._ledger.budgets:
            actual = totals.get(budget.category, 0)
            if budget.spent != actual:
                issues.append(ValidationIssue(
                    field="budgets",
                    issue_type="budget_drift",
                    message=(
                        f"Budget '{budget.category}' records {budget.spent} spent "
                        f"but expenses total {actual}"
                    ),
                    severity="warning",
                    suggested_fix="Run a budget reconcile",
                ))
        return issues
