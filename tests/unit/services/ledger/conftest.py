"""Shared fixtures for ledger tests."""

from decimal import Decimal

import pytest

from papertrader.services.ledger import InMemoryLedgerStore, LedgerService, SqlLedgerStore


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every ledger test runs against both store backends."""
    if request.param == "memory":
        yield InMemoryLedgerStore()
    else:
        sql_store = SqlLedgerStore("sqlite://")
        yield sql_store
        sql_store.dispose()


@pytest.fixture
def ledger(store, market_data) -> LedgerService:
    """Ledger with the default 10000.00 initial balance."""
    return LedgerService(store, market_data, initial_balance=Decimal("10000.00"))


@pytest.fixture
def alice(ledger: LedgerService) -> str:
    """Funded account id."""
    ledger.open_account("alice")
    return "alice"
