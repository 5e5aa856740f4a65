"""Shared fixtures: keep every test away from the real ~/.budgetwise."""

from decimal import Decimal

import pytest

from budgetwise.audit import configure_logging
from budgetwise.config import get_settings
from budgetwise.ledger import Ledger


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temp dir and reset the settings cache."""
    monkeypatch.setenv("BUDGETWISE_CONFIG_PATH", str(tmp_path / "home" / "config.json"))
    monkeypatch.setenv("BUDGETWISE_DATA_DIRECTORY", str(tmp_path / "home"))
    monkeypatch.setenv("BUDGETWISE_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    configure_logging("WARNING")
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_ledger() -> Ledger:
    """Ledger with one income and three expenses across two categories."""
    ledger = Ledger()
    ledger.add_income(Decimal("1000.00"), category="salary", tags=["work"])
    ledger.add_expense("rent", Decimal("500.00"), tags=["home"])
    ledger.add_expense("food", Decimal("20.00"))
    ledger.add_expense("food", Decimal("30.00"), tags=["weekend", "home"])
    return ledger
