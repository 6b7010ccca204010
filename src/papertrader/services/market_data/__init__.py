"""Market data service.

Vendor-agnostic quotes, price history and symbol search.

Key components:
- IMarketDataProvider: Protocol interface
- YahooMarketDataProvider: yfinance-backed implementation
- Models: Quote, PriceBar, SearchResult, ChartRange
- Errors: MarketDataError, QuoteUnavailable
"""

from papertrader.services.market_data.errors import MarketDataError, QuoteUnavailable
from papertrader.services.market_data.interface import IMarketDataProvider
from papertrader.services.market_data.models import ChartRange, PriceBar, Quote, SearchResult
from papertrader.services.market_data.yahoo import YahooMarketDataProvider

__all__ = [
    "IMarketDataProvider",
    "YahooMarketDataProvider",
    "Quote",
    "PriceBar",
    "SearchResult",
    "ChartRange",
    "MarketDataError",
    "QuoteUnavailable",
]
