"""Tests for the parallel bulk transform pass."""

from decimal import Decimal

import pytest

from budgetwise.ledger import Ledger
from budgetwise.models.records import EntryKind
from budgetwise.transforms import BulkTransformPass, identity, scale
from budgetwise.validation import InvalidAmountError


def _amounts(entries):
    return [e.amount for e in entries]


class TestBulkTransformPass:
    """Tests for BulkTransformPass.run."""

    def test_identity_changes_nothing(self, sample_ledger):
        """Test the identity transform leaves the ledger equal to itself."""
        before = Ledger.from_snapshot(sample_ledger.to_snapshot())
        report = BulkTransformPass().run(sample_ledger, identity)

        assert report.transformed == 4
        assert report.failed_count == 0
        assert report.succeeded is True
        assert sample_ledger == before

    def test_scale_applies_to_every_entry(self, sample_ledger):
        """Test each amount becomes f(old amount)."""
        report = BulkTransformPass(max_workers=2).run(sample_ledger, scale("2"))

        assert report.transformed == 4
        assert _amounts(sample_ledger.incomes) == [Decimal("2000.00")]
        assert _amounts(sample_ledger.expenses) == [
            Decimal("1000.00"),
            Decimal("40.00"),
            Decimal("60.00"),
        ]
        assert report.transform_name == "scale(2)"

    def test_order_and_metadata_preserved(self, sample_ledger):
        """Test categories, tags and order survive the pass."""
        BulkTransformPass().run(sample_ledger, scale("1.5"))
        expenses = sample_ledger.expenses
        assert [e.category for e in expenses] == ["rent", "food", "food"]
        assert expenses[2].tags == frozenset({"weekend", "home"})

    def test_one_failure_is_reported_and_others_applied(self):
        """Test a single failing entry keeps its amount and is reported."""
        ledger = Ledger()
        ledger.add_income(Decimal("100"))
        ledger.add_expense("rent", Decimal("500"))
        ledger.add_expense("poison", Decimal("13"))
        ledger.add_expense("food", Decimal("20"))

        def halve_unless_13(amount):
            if amount == Decimal("13"):
                raise ArithmeticError("unlucky")
            return amount / 2

        report = BulkTransformPass().run(ledger, halve_unless_13, "halve")

        assert report.transform_name == "halve"
        assert report.transformed == 3
        assert report.failed_count == 1
        assert report.total == 4
        failure = report.failures[0]
        assert failure.kind == EntryKind.EXPENSE
        assert failure.index == 1
        assert failure.category == "poison"
        assert failure.amount == Decimal("13")
        assert "unlucky" in failure.error

        assert _amounts(ledger.incomes) == [Decimal("50")]
        assert _amounts(ledger.expenses) == [
            Decimal("250"),
            Decimal("13"),
            Decimal("10"),
        ]

    def test_non_finite_result_is_a_failure(self):
        """Test a transform producing NaN is rejected for that entry only."""
        ledger = Ledger()
        ledger.add_expense("a", Decimal("1"))
        ledger.add_expense("b", Decimal("0"))

        def invert(amount):
            return Decimal("NaN") if amount == 0 else 1 / amount

        report = BulkTransformPass().run(ledger, invert)

        assert report.failed_count == 1
        assert report.failures[0].category == "b"
        assert "transform produced" in report.failures[0].error
        assert _amounts(ledger.expenses) == [Decimal("1"), Decimal("0")]

    def test_income_failures_reported_with_kind(self):
        """Test failures carry which collection they came from."""
        ledger = Ledger()
        ledger.add_income(Decimal("5"))
        ledger.add_expense("x", Decimal("5"))

        def boom(amount):
            raise RuntimeError("boom")

        report = BulkTransformPass().run(ledger, boom)

        assert report.transformed == 0
        assert sorted(f.kind.value for f in report.failures) == ["expense", "income"]
        assert ledger.total_income() == Decimal("5")

    def test_empty_ledger(self):
        """Test a pass over nothing reports nothing."""
        report = BulkTransformPass().run(Ledger(), scale(3))
        assert report.transformed == 0
        assert report.failures == []

    def test_many_entries_single_worker(self):
        """Test results are the same with one worker."""
        ledger = Ledger()
        for n in range(50):
            ledger.add_expense(f"c{n % 5}", Decimal(n))

        BulkTransformPass(max_workers=1).run(ledger, scale("10"))

        assert ledger.total_expenses() == Decimal(sum(range(50)) * 10)

    def test_max_workers_validated(self):
        """Test a pool needs at least one worker."""
        with pytest.raises(ValueError):
            BulkTransformPass(max_workers=0)


class TestScale:
    """Tests for the scale() factory."""

    def test_scale_rejects_bad_factor(self):
        """Test a non-numeric factor is refused up front."""
        with pytest.raises(InvalidAmountError):
            scale("abc")

    def test_scale_float_factor(self):
        """Test float factors go through their decimal text."""
        assert scale(1.1)(Decimal("10")) == Decimal("11.0")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
