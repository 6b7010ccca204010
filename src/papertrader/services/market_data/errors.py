"""Market data errors."""


class MarketDataError(Exception):
    """Base class for market data failures."""


class QuoteUnavailable(MarketDataError):
    """
    Provider could not supply data for a symbol.

    Raised on vendor exceptions, timeouts, empty payloads or missing prices.

    Attributes:
        symbol: Symbol that failed
        reason: Human-readable cause
    """

    def __init__(self, symbol: str, reason: str = "no data returned") -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Quote unavailable for {symbol}: {reason}")
