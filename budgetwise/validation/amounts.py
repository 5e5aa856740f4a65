"""
Amount Parsing and Normalization

DESIGN DECISION: Every fallible numeric conversion happens here and raises
InvalidAmountError. Nothing in the ledger parses user text itself, and
nothing aborts the process on a bad number: the caller rejects the single
offending command and carries on.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from budgetwise.models.records import amount_in_range


AmountLike = Union[Decimal, int, float, str]


class InvalidAmountError(ValueError):
    """A value supplied for an amount field is not a finite number."""

    def __init__(self, value: object, reason: str = "not a finite number"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount {value!r}: {reason}")


def parse_amount(raw: str) -> Decimal:
    """
    Parse a user-supplied amount string.

    Surrounding whitespace is ignored. Empty strings, non-numeric text,
    NaN, infinities and magnitudes the decimal context cannot
    sum are rejected.

    Raises:
        InvalidAmountError: If the text is not a finite number
    """
    if not isinstance(raw, str):
        raise InvalidAmountError(raw, "expected text")

    text = raw.strip()
    if not text:
        raise InvalidAmountError(raw, "empty value")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidAmountError(raw, "not a number")

    if not amount.is_finite():
        raise InvalidAmountError(raw, "not a finite number")
    if not amount_in_range(amount):
        raise InvalidAmountError(raw, "out of range")
    return amount


def to_amount(value: AmountLike) -> Decimal:
    """
    Normalize a numeric value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not the binary
    expansion. Booleans are rejected even though they are ints.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value, "booleans are not amounts")
    if isinstance(value, str):
        return parse_amount(value)
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        raise InvalidAmountError(value, f"unsupported type {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(value, "not a finite number")
    if not amount_in_range(amount):
        raise InvalidAmountError(value, "out of range")
    return amount
