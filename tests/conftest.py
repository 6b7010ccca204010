"""Root conftest for all tests - sys.path setup and shared fakes."""

import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Add src/ to sys.path so tests run without an editable install
src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from papertrader.services.market_data.errors import QuoteUnavailable  # noqa: E402
from papertrader.services.market_data.models import PriceBar, Quote, SearchResult  # noqa: E402


class FakeMarketData:
    """
    In-memory market data provider.

    Attributes:
        prices: Symbol → last price
        failures: Symbol → number of upcoming get_quote calls that fail
            (-1 fails forever)
        history: Symbol → bars returned by get_history
        results: Search hits returned by search
        calls: Every (method, args) received
    """

    def __init__(self) -> None:
        self.prices: dict[str, Decimal] = {}
        self.failures: dict[str, int] = {}
        self.history: dict[str, list[PriceBar]] = {}
        self.results: list[SearchResult] = []
        self.calls: list[tuple] = []

    def set_price(self, symbol: str, price: str) -> None:
        self.prices[symbol] = Decimal(price)

    def fail(self, symbol: str, times: int = -1) -> None:
        self.failures[symbol] = times

    def get_quote(self, symbol: str) -> Quote:
        self.calls.append(("get_quote", symbol))
        remaining = self.failures.get(symbol, 0)
        if remaining != 0:
            if remaining > 0:
                self.failures[symbol] = remaining - 1
            raise QuoteUnavailable(symbol, "simulated outage")
        if symbol not in self.prices:
            raise QuoteUnavailable(symbol)
        return Quote(symbol=symbol, price=self.prices[symbol])

    def get_history(self, symbol: str, start: datetime, interval: str) -> list[PriceBar]:
        self.calls.append(("get_history", symbol, start, interval))
        if symbol not in self.history:
            raise QuoteUnavailable(symbol, "no price history returned")
        return self.history[symbol]

    def search(self, query: str) -> list[SearchResult]:
        self.calls.append(("search", query))
        return list(self.results)


def make_bars(closes: list[float], start: datetime = datetime(2024, 1, 2)) -> list[PriceBar]:
    """Daily bars with the given closes and a one-dollar high/low band."""
    return [
        PriceBar(
            date=start + timedelta(days=i),
            open=close,
            high=close + 1.0,
            low=close - 1.0,
            close=close,
            volume=1_000_000 + i,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def market_data() -> FakeMarketData:
    """Fresh fake provider with AAPL at 100.00 and MSFT at 200.00."""
    provider = FakeMarketData()
    provider.set_price("AAPL", "100.00")
    provider.set_price("MSFT", "200.00")
    return provider


@pytest.fixture
def bar_factory():
    """Factory turning a close series into PriceBars."""
    return make_bars
