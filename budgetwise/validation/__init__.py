"""Validation package."""

from budgetwise.validation.amounts import (
    AmountLike,
    InvalidAmountError,
    parse_amount,
    to_amount,
)
from budgetwise.validation.validator import LedgerValidator

__all__ = [
    "AmountLike",
    "InvalidAmountError",
    "LedgerValidator",
    "parse_amount",
    "to_amount",
]
