"""Ledger package."""

from budgetwise.ledger.ledger import Ledger, UnknownCategoryError

__all__ = ["Ledger", "UnknownCategoryError"]
