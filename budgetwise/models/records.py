"""
Record Types for BudgetWise

These models are the value objects that make up a ledger snapshot.
They are designed to:
1. Carry data only (no ledger logic lives here)
2. Serialize losslessly to the JSON store
3. Reject non-finite and out-of-range amounts at the schema boundary

DESIGN DECISION: Amounts are Decimal, never float.
Summing float currency values drifts; Decimal keeps "500.00" as "500.00".
Negative amounts are passed through untouched (corrections/reversals).
"""

from datetime import datetime, timezone
from decimal import Decimal, DefaultContext
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


DEFAULT_INCOME_CATEGORY = "income"

# Bounds on an amount's adjusted exponent. The upper bound keeps totals over
# up to 10**17 entries inside the default decimal context.
MAX_AMOUNT_EXPONENT = DefaultContext.Emax - 18
MIN_AMOUNT_EXPONENT = DefaultContext.Emin


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def amount_in_range(amount: Decimal) -> bool:
    """True if the amount can be summed without overflowing the context."""
    if not amount:
        return True
    return MIN_AMOUNT_EXPONENT <= amount.adjusted() <= MAX_AMOUNT_EXPONENT


def _check_amount_range(v: Decimal) -> Decimal:
    if not amount_in_range(v):
        raise ValueError(f"Amount {v} is outside the supported range")
    return v


# =============================================================================
# ENUMS
# =============================================================================

class EntryKind(str, Enum):
    """Which collection an entry belongs to."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# TRANSACTION ENTRIES
# =============================================================================

class _TaggedRecord(BaseModel):
    """
    Shared shape of Income, Expense and RecurringTransaction.

    Timestamps are always zoned: naive values are read as UTC.
    Tags are written sorted so the stored file is stable between saves.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the transaction happened (timezone-aware)"
    )
    category: str = Field(
        ...,
        description="Free-text category label (exact-match grouping key)"
    )
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Transaction amount"
    )
    tags: frozenset[str] = Field(
        default_factory=frozenset,
        description="Free-form labels"
    )

    @field_validator('timestamp')
    @classmethod
    def ensure_zoned(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator('amount')
    @classmethod
    def check_amount_range(cls, v: Decimal) -> Decimal:
        return _check_amount_range(v)

    @field_serializer('tags')
    def serialize_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)


class Income(_TaggedRecord):
    """One income event."""

    category: str = Field(
        default=DEFAULT_INCOME_CATEGORY,
        description="Income source label"
    )


class Expense(_TaggedRecord):
    """
    One expense event.

    An empty category is accepted (the original program never rejected it);
    LedgerValidator flags it as a warning.
    """


class RecurringTransaction(_TaggedRecord):
    """
    Template for a transaction that repeats.

    `timestamp` is the next occurrence. The ledger only stores these;
    expanding them into Income/Expense entries belongs to a scheduler
    outside this package.
    """


# =============================================================================
# BUDGETS, CATEGORIES, TAGS
# =============================================================================

class Budget(BaseModel):
    """
    Allocation for a category.

    `spent` is a cache of the matching expense sum. It may be stale between
    mutations; Ledger.reconcile_budgets() brings it back in line.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    allocated: Decimal = Field(..., allow_inf_nan=False)
    spent: Decimal = Field(default=Decimal("0"), allow_inf_nan=False)

    @field_validator('allocated')
    @classmethod
    def check_allocated_range(cls, v: Decimal) -> Decimal:
        return _check_amount_range(v)


class Category(BaseModel):
    """A named category. Names are unique within a ledger."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)


class Tag(BaseModel):
    """A known tag. Names are unique within a ledger."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
