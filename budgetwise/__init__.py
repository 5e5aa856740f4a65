"""
BudgetWise - Personal Finance Ledger

Records income and expense transactions, groups them by category,
computes totals, and keeps the ledger in a JSON file between runs.

DESIGN PRINCIPLES:
1. Totals are always derived from entries, never cached
2. Fail early, fail visibly (a bad amount is rejected, never guessed)
3. Never overwrite data we could not read
4. Back up before overwrite; write atomically
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetWise Team"
