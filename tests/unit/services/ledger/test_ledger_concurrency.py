"""Concurrency tests for per-account trade serialization."""

import threading
from decimal import Decimal

from papertrader.services.ledger import InsufficientFunds, InsufficientShares, LedgerService


def _race(ledger: LedgerService, orders: list[tuple]) -> tuple[list, list]:
    """Run orders simultaneously; return (results, errors)."""
    barrier = threading.Barrier(len(orders))
    results: list = []
    errors: list = []
    guard = threading.Lock()

    def worker(order):
        barrier.wait()
        try:
            result = ledger.execute_trade(*order)
        except Exception as e:
            with guard:
                errors.append(e)
        else:
            with guard:
                results.append(result)

    threads = [threading.Thread(target=worker, args=(order,)) for order in orders]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    return results, errors


class TestConcurrentTrades:
    """Test jointly unaffordable trades cannot both succeed."""

    def test_two_buys_one_succeeds(self, ledger, alice):
        """Each buy costs 6000 of 10000: exactly one fills."""
        order = (alice, "AAPL", 60, "buy", Decimal("100.00"))

        results, errors = _race(ledger, [order, order])

        assert len(results) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientFunds)
        assert ledger.get_account(alice).cash == Decimal("4000.00")
        assert ledger.get_position(alice, "AAPL").quantity == 60
        assert len(ledger.get_transactions(alice)) == 1

    def test_two_sells_one_succeeds(self, ledger, alice):
        ledger.execute_trade(alice, "AAPL", 10, "buy", Decimal("100.00"))
        order = (alice, "AAPL", 7, "sell", Decimal("100.00"))

        results, errors = _race(ledger, [order, order])

        assert len(results) == 1
        assert isinstance(errors[0], InsufficientShares)
        assert ledger.get_position(alice, "AAPL").quantity == 3

    def test_many_small_buys_never_overdraw(self, ledger, alice):
        """Twelve 1000-dollar buys against 10000: exactly ten fill."""
        orders = [(alice, "AAPL", 10, "buy", Decimal("100.00")) for _ in range(12)]

        results, errors = _race(ledger, orders)

        assert len(results) == 10
        assert len(errors) == 2
        assert all(isinstance(e, InsufficientFunds) for e in errors)
        assert ledger.get_account(alice).cash == Decimal("0")
        assert ledger.get_position(alice, "AAPL").quantity == 100

    def test_accounts_independent(self, ledger):
        ledger.open_account("alice")
        ledger.open_account("bob")
        orders = [
            ("alice", "AAPL", 60, "buy", Decimal("100.00")),
            ("bob", "AAPL", 60, "buy", Decimal("100.00")),
        ]

        results, errors = _race(ledger, orders)

        assert len(results) == 2
        assert errors == []
