"""
Bulk Transform Pass

Applies one `Decimal -> Decimal` function to the amount of every income and
expense entry, e.g. interest accrual or a currency correction.

GUARANTEES:
- Each entry is transformed independently; results never depend on order
- A failing entry keeps its old amount and is reported in the result
- Every other entry still gets its new amount (partial success is visible
  through TransformReport.failed_count, never a silent drop)

Both collections are fanned out into one fixed-size thread pool, and the
ledger lock is held from snapshot to write-back.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, Optional, Sequence, Union

import structlog
from pydantic import BaseModel, Field

from budgetwise.ledger import Ledger
from budgetwise.models.records import EntryKind, Expense, Income
from budgetwise.validation.amounts import AmountLike, InvalidAmountError, to_amount


logger = structlog.get_logger(__name__)

AmountTransform = Callable[[Decimal], AmountLike]

DEFAULT_MAX_WORKERS = 4


class TransformFailure(BaseModel):
    """One entry the transform could not be applied to."""

    kind: EntryKind
    index: int = Field(..., ge=0, description="Position in its collection")
    category: str
    amount: Decimal = Field(..., description="Amount left in place")
    error: str


class TransformReport(BaseModel):
    """Outcome of one bulk pass."""

    transform_name: str
    transformed: int = Field(default=0, ge=0)
    failures: list[TransformFailure] = Field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.transformed + self.failed_count

    @property
    def succeeded(self) -> bool:
        return not self.failures


def identity(amount: Decimal) -> Decimal:
    return amount


def scale(factor: AmountLike) -> AmountTransform:
    """
    Build a multiplicative adjustment.

    scale("1.05") adds 5% to every amount.
    """
    multiplier = to_amount(factor)

    def _scale(amount: Decimal) -> Decimal:
        return amount * multiplier

    _scale.__name__ = f"scale({multiplier})"
    return _scale


class BulkTransformPass:
    """
    Runs a transform over every entry of a ledger in parallel.

    Usage:
        report = BulkTransformPass(max_workers=8).run(ledger, scale("1.01"))
        if report.failed_count:
            ...
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._max_workers = max_workers

    def run(
        self,
        ledger: Ledger,
        transform: AmountTransform,
        transform_name: Optional[str] = None,
    ) -> TransformReport:
        name = transform_name or getattr(transform, "__name__", "transform")

        with ledger.locked():
            incomes = ledger.incomes
            expenses = ledger.expenses

            with ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="bulk-transform",
            ) as pool:
                income_futures = [
                    pool.submit(_apply, transform, entry.amount)
                    for entry in incomes
                ]
                expense_futures = [
                    pool.submit(_apply, transform, entry.amount)
                    for entry in expenses
                ]
                income_results = [f.result() for f in income_futures]
                expense_results = [f.result() for f in expense_futures]

            income_amounts, income_failures = _collect(
                EntryKind.INCOME, incomes, income_results
            )
            expense_amounts, expense_failures = _collect(
                EntryKind.EXPENSE, expenses, expense_results
            )
            ledger.replace_amounts(income_amounts, expense_amounts)

        report = TransformReport(
            transform_name=name,
            transformed=len(income_amounts) + len(expense_amounts),
            failures=income_failures + expense_failures,
        )
        if report.failures:
            logger.warning(
                "bulk_transform_partial",
                transform=name,
                transformed=report.transformed,
                failed=report.failed_count,
            )
        else:
            logger.debug("bulk_transform_done", transform=name, transformed=report.transformed)
        return report


def _apply(transform: AmountTransform, amount: Decimal) -> Union[Decimal, Exception]:
    # Failures are returned, not raised, so one entry cannot cancel the rest
    try:
        return to_amount(transform(amount))
    except InvalidAmountError as e:
        return ValueError(f"transform produced {e.value!r}: {e.reason}")
    except Exception as e:
        return e


def _collect(
    kind: EntryKind,
    entries: Sequence[Union[Income, Expense]],
    results: list[Union[Decimal, Exception]],
) -> tuple[dict[int, Decimal], list[TransformFailure]]:
    amounts: dict[int, Decimal] = {}
    failures: list[TransformFailure] = []
    for index, (entry, result) in enumerate(zip(entries, results)):
        if isinstance(result, Exception):
            failures.append(TransformFailure(
                kind=kind,
                index=index,
                category=entry.category,
                amount=entry.amount,
                error=f"{type(result).__name__}: {result}",
            ))
        else:
            amounts[index] = result
    return amounts, failures
