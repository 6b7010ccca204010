"""Market data provider interface (Protocol).

Defines the contract every market data provider must satisfy. The ledger,
chart service and trading desk depend on this protocol only, so tests can
substitute a fake provider.
"""

from datetime import datetime
from typing import Protocol

from papertrader.services.market_data.models import PriceBar, Quote, SearchResult


class IMarketDataProvider(Protocol):
    """
    Market data provider interface.

    Every method may fail per call; failures are raised as QuoteUnavailable.

    Example:
        >>> provider: IMarketDataProvider = YahooMarketDataProvider()
        >>> quote = provider.get_quote("AAPL")
        >>> print(f"AAPL: ${quote.price}")
    """

    def get_quote(self, symbol: str) -> Quote:
        """
        Get the current quote for a symbol.

        Raises:
            QuoteUnavailable: If no price can be obtained
        """
        ...

    def get_history(self, symbol: str, start: datetime, interval: str) -> list[PriceBar]:
        """
        Get bars from start until now, ordered ascending by date.

        Args:
            symbol: Ticker symbol
            start: First bar time (inclusive)
            interval: Bar interval ("5m", "15m", "1d", ...)

        Raises:
            QuoteUnavailable: If the provider fails or returns nothing
        """
        ...

    def search(self, query: str) -> list[SearchResult]:
        """
        Look up equities by name or symbol.

        Raises:
            QuoteUnavailable: If the provider fails
        """
        ...
