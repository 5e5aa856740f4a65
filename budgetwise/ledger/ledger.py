"""
Ledger (aggregate root)

Owns the ordered collections of a ledger and exposes the mutation and
query operations the rest of the system uses.

GUARANTEES:
- Totals are recomputed from entries on every call (no cached totals)
- Insertion order is preserved for every collection
- A rejected amount never leaves a half-applied mutation behind
- All access goes through one re-entrant lock, so a ledger shared with the
  bulk transform pass is never observed mid-update

Categories are loose string keys. An expense may name a category that was
never registered unless the ledger is created with strict_categories=True.
"""

import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Iterator, Optional

import structlog

from budgetwise.models.ledger import LedgerSnapshot, LedgerSummary
from budgetwise.models.records import (
    DEFAULT_INCOME_CATEGORY,
    Budget,
    Category,
    Expense,
    Income,
    RecurringTransaction,
    Tag,
    utc_now,
)
from budgetwise.validation.amounts import AmountLike, to_amount


logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


class UnknownCategoryError(LookupError):
    """Raised in strict mode when an entry names an unregistered category."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Category is not registered: {category!r}")


class Ledger:
    """
    In-memory ledger for one session.

    Construct empty, or rebuild from storage with Ledger.from_snapshot().
    """

    def __init__(self, strict_categories: bool = False):
        self.strict_categories = strict_categories
        self._lock = threading.RLock()
        self._reset()

    def _reset(self) -> None:
        self._incomes: list[Income] = []
        self._expenses: list[Expense] = []
        self._budgets: list[Budget] = []
        self._recurring: list[RecurringTransaction] = []
        self._categories: list[Category] = []
        self._tags: list[Tag] = []

    @contextmanager
    def locked(self) -> Iterator["Ledger"]:
        """Hold the ledger lock across several operations."""
        with self._lock:
            yield self

    # -------------------------------------------------------------------------
    # Snapshot conversion
    # -------------------------------------------------------------------------

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        strict_categories: bool = False,
    ) -> "Ledger":
        ledger = cls(strict_categories=strict_categories)
        ledger._incomes = list(snapshot.income_sources)
        ledger._expenses = list(snapshot.expenses)
        ledger._budgets = list(snapshot.budgets)
        ledger._recurring = list(snapshot.recurring_transactions)
        ledger._categories = list(snapshot.categories)
        ledger._tags = list(snapshot.tags)
        return ledger

    def to_snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                income_sources=list(self._incomes),
                expenses=list(self._expenses),
                budgets=list(self._budgets),
                recurring_transactions=list(self._recurring),
                categories=list(self._categories),
                tags=list(self._tags),
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return self.to_snapshot() == other.to_snapshot()

    def __repr__(self) -> str:
        return (
            f"Ledger(incomes={len(self._incomes)}, "
            f"expenses={len(self._expenses)}, "
            f"budgets={len(self._budgets)})"
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_income(
        self,
        amount: AmountLike,
        category: str = DEFAULT_INCOME_CATEGORY,
        tags: Optional[Iterable[str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> Income:
        """
        Append an Income entry.

        Raises:
            InvalidAmountError: If amount is not a finite number
            UnknownCategoryError: In strict mode, for unregistered categories
        """
        value = to_amount(amount)
        tag_set = frozenset(tags or ())
        with self._lock:
            self._check_category(category)
            entry = Income(
                timestamp=timestamp or utc_now(),
                category=category,
                amount=value,
                tags=tag_set,
            )
            new_tags = self._unregistered_tags(tag_set)
            self._incomes.append(entry)
            self._tags.extend(new_tags)
        logger.debug("income_added", category=category, amount=str(value))
        return entry

    def add_expense(
        self,
        category: str,
        amount: AmountLike,
        tags: Optional[Iterable[str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> Expense:
        """
        Append an Expense entry.

        An empty category is accepted.

        Raises:
            InvalidAmountError: If amount is not a finite number
            UnknownCategoryError: In strict mode, for unregistered categories
        """
        value = to_amount(amount)
        tag_set = frozenset(tags or ())
        with self._lock:
            self._check_category(category)
            entry = Expense(
                timestamp=timestamp or utc_now(),
                category=category,
                amount=value,
                tags=tag_set,
            )
            new_tags = self._unregistered_tags(tag_set)
            self._expenses.append(entry)
            self._tags.extend(new_tags)
        logger.debug("expense_added", category=category, amount=str(value))
        return entry

    def remove_expenses_by_category(self, category: str) -> int:
        """
        Delete every expense whose category equals `category` exactly.

        Returns the number removed; zero matches is not an error.
        """
        with self._lock:
            kept = [e for e in self._expenses if e.category != category]
            removed = len(self._expenses) - len(kept)
            self._expenses = kept
        logger.debug("expenses_removed", category=category, removed=removed)
        return removed

    def clear(self) -> None:
        """Return to the state of a freshly constructed ledger."""
        with self._lock:
            self._reset()
        logger.debug("ledger_cleared")

    def add_budget(self, category: str, allocated: AmountLike) -> Budget:
        """
        Add or replace the budget for a category.

        `spent` is computed from the current expenses.
        """
        value = to_amount(allocated)
        with self._lock:
            self._check_category(category)
            budget = Budget(
                category=category,
                allocated=value,
                spent=self._expense_total(category),
            )
            for i, existing in enumerate(self._budgets):
                if existing.category == category:
                    self._budgets[i] = budget
                    break
            else:
                self._budgets.append(budget)
        return budget

    def add_recurring(
        self,
        category: str,
        amount: AmountLike,
        next_occurrence: Optional[datetime] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> RecurringTransaction:
        """Store a recurring transaction template (never expanded here)."""
        value = to_amount(amount)
        tag_set = frozenset(tags or ())
        with self._lock:
            self._check_category(category)
            template = RecurringTransaction(
                timestamp=next_occurrence or utc_now(),
                category=category,
                amount=value,
                tags=tag_set,
            )
            new_tags = self._unregistered_tags(tag_set)
            self._recurring.append(template)
            self._tags.extend(new_tags)
        return template

    def add_category(self, name: str) -> bool:
        """Register a category. Returns False if the name already exists."""
        category = Category(name=name)
        with self._lock:
            if any(c.name == category.name for c in self._categories):
                return False
            self._categories.append(category)
            return True

    def add_tag(self, name: str) -> bool:
        """Register a tag. Returns False if the name already exists."""
        tag = Tag(name=name)
        with self._lock:
            if any(t.name == tag.name for t in self._tags):
                return False
            self._tags.append(tag)
            return True

    def reconcile_budgets(self) -> int:
        """
        Recompute every budget's cached `spent` from the expenses.

        Returns the number of budgets whose value changed.
        """
        changed = 0
        with self._lock:
            totals = self.summarize_by_category()
            for i, budget in enumerate(self._budgets):
                actual = totals.get(budget.category, ZERO)
                if budget.spent != actual:
                    self._budgets[i] = budget.model_copy(update={"spent": actual})
                    changed += 1
        return changed

    def replace_amounts(
        self,
        income_amounts: dict[int, Decimal],
        expense_amounts: dict[int, Decimal],
    ) -> None:
        """
        Overwrite amounts by position; used by the bulk transform pass.

        Positions not present in the mappings are left untouched.
        """
        with self._lock:
            for index, amount in income_amounts.items():
                self._incomes[index] = self._incomes[index].model_copy(
                    update={"amount": amount}
                )
            for index, amount in expense_amounts.items():
                self._expenses[index] = self._expenses[index].model_copy(
                    update={"amount": amount}
                )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def total_income(self) -> Decimal:
        with self._lock:
            return sum((e.amount for e in self._incomes), ZERO)

    def total_expenses(self) -> Decimal:
        with self._lock:
            return sum((e.amount for e in self._expenses), ZERO)

    def net_income(self) -> Decimal:
        with self._lock:
            return self.total_income() - self.total_expenses()

    def summarize_by_category(self) -> dict[str, Decimal]:
        """
        Group expenses by exact category string and sum the amounts.

        Callers must not rely on the iteration order of the result.
        """
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        with self._lock:
            for expense in self._expenses:
                totals[expense.category] += expense.amount
        return dict(totals)

    def summary(self) -> LedgerSummary:
        with self._lock:
            return LedgerSummary(
                total_income=self.total_income(),
                total_expenses=self.total_expenses(),
                net_income=self.net_income(),
                by_category=self.summarize_by_category(),
                income_count=len(self._incomes),
                expense_count=len(self._expenses),
            )

    def list_expenses(self) -> Iterator[Expense]:
        """
        Iterate over expenses in insertion order.

        The iterator walks a snapshot taken when this method is called;
        later mutations do not affect it. Call again for a fresh view.
        """
        with self._lock:
            snapshot = tuple(self._expenses)
        return iter(snapshot)

    def list_incomes(self) -> Iterator[Income]:
        """Iterate over a snapshot of income entries in insertion order."""
        with self._lock:
            snapshot = tuple(self._incomes)
        return iter(snapshot)

    @property
    def incomes(self) -> tuple[Income, ...]:
        with self._lock:
            return tuple(self._incomes)

    @property
    def expenses(self) -> tuple[Expense, ...]:
        with self._lock:
            return tuple(self._expenses)

    @property
    def budgets(self) -> tuple[Budget, ...]:
        with self._lock:
            return tuple(self._budgets)

    @property
    def recurring_transactions(self) -> tuple[RecurringTransaction, ...]:
        with self._lock:
            return tuple(self._recurring)

    @property
    def categories(self) -> tuple[Category, ...]:
        with self._lock:
            return tuple(self._categories)

    @property
    def tags(self) -> tuple[Tag, ...]:
        with self._lock:
            return tuple(self._tags)

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not any((
                self._incomes,
                self._expenses,
                self._budgets,
                self._recurring,
                self._categories,
                self._tags,
            ))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _expense_total(self, category: str) -> Decimal:
        return sum(
            (e.amount for e in self._expenses if e.category == category),
            ZERO,
        )

    def _check_category(self, category: str) -> None:
        if not self.strict_categories:
            return
        if not any(c.name == category for c in self._categories):
            raise UnknownCategoryError(category)

    def _unregistered_tags(self, tags: frozenset[str]) -> list[Tag]:
        # Built before any append so a bad tag cannot leave a half-applied entry
        known = {t.name for t in self._tags}
        new_tags = []
        for name in sorted(tags):
            stripped = name.strip()
            if stripped and stripped not in known:
                new_tags.append(Tag(name=stripped))
                known.add(stripped)
        return new_tags
