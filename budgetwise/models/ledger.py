"""
Ledger Snapshot Models

LedgerSnapshot is the persisted shape of a ledger. It is what the storage
layer reads and writes; the live Ledger is rebuilt from it on load.

DESIGN DECISION: Income is stored as a list of entries, not a running total.
A list generalizes the scalar total used by the first version of the file
format, and that older shape is still accepted on load (see
`upgrade_legacy_layout`).
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, Field, model_validator

from budgetwise.models.records import (
    DEFAULT_INCOME_CATEGORY,
    Budget,
    Category,
    Expense,
    Income,
    RecurringTransaction,
    Tag,
)


SCHEMA_VERSION = 1


class LedgerSnapshot(BaseModel):
    """
    Complete serializable state of one ledger.

    Every collection except `expenses` may be absent from the stored file;
    absent collections load as empty lists.
    """

    schema_version: int = Field(default=SCHEMA_VERSION, ge=1)
    income_sources: list[Income] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    recurring_transactions: list[RecurringTransaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def upgrade_legacy_layout(cls, data: Any) -> Any:
        """
        Accept `{"income": <number>, "expenses": [...]}` files.

        A non-zero scalar income becomes a single Income entry.
        """
        if not isinstance(data, dict):
            return data
        if "income" not in data or "income_sources" in data:
            return data

        upgraded = {k: v for k, v in data.items() if k != "income"}
        income = data["income"]
        if isinstance(income, bool) or not isinstance(income, (int, float, str)):
            raise ValueError(f"Legacy income total must be a number, got {income!r}")
        try:
            total = Decimal(str(income))
        except InvalidOperation:
            raise ValueError(f"Legacy income total is not a number: {income!r}")

        if total != 0:
            upgraded["income_sources"] = [
                {"category": DEFAULT_INCOME_CATEGORY, "amount": str(total)}
            ]
        else:
            upgraded["income_sources"] = []
        return upgraded


class LedgerSummary(BaseModel):
    """Totals printed after every CLI run."""

    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    by_category: dict[str, Decimal] = Field(default_factory=dict)
    income_count: int = Field(default=0, ge=0)
    expense_count: int = Field(default=0, ge=0)
