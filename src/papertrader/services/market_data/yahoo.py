"""
Yahoo Finance market data provider.

Fetches quotes, price history and symbol search results with yfinance and
converts them to the vendor-agnostic models in market_data.models.

Every vendor failure (exception, timeout, empty frame, missing or NaN
price) surfaces as QuoteUnavailable so callers handle one error type.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import pandas as pd
import yfinance as yf  # type: ignore[import-untyped]

from papertrader.services.market_data.errors import QuoteUnavailable
from papertrader.services.market_data.models import PriceBar, Quote, SearchResult
from papertrader.system import LoggerFactory
from papertrader.system.config import MarketDataSettings

logger = LoggerFactory.get_logger()

CENTS = Decimal("0.01")


def to_price(value: Any) -> Optional[Decimal]:
    """
    Convert a vendor number to a cent-quantized Decimal.

    Floats go through str() so 187.44 stays 187.44 rather than its binary
    expansion. Returns None for missing or NaN values.
    """
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return None
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


class YahooMarketDataProvider:
    """
    Market data provider backed by Yahoo Finance.

    Attributes:
        timeout: Network timeout in seconds for history and search calls
        search_limit: Max search results returned

    Example:
        >>> provider = YahooMarketDataProvider(timeout=10)
        >>> provider.get_quote("AAPL").price
        Decimal('187.44')
    """

    def __init__(self, timeout: float = 10.0, search_limit: int = 10) -> None:
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")
        if search_limit < 1:
            raise ValueError(f"Search limit must be >= 1, got {search_limit}")
        self.timeout = timeout
        self.search_limit = search_limit

    @classmethod
    def from_config(cls, settings: MarketDataSettings) -> "YahooMarketDataProvider":
        """Factory method to create provider from market data settings."""
        return cls(timeout=settings.timeout_seconds, search_limit=settings.search_limit)

    def get_quote(self, symbol: str) -> Quote:
        """
        Get the current quote for a symbol.

        Read from the last five daily bars so the network timeout applies:
        the latest bar gives price, day range and volume, the bar before it
        the previous close.

        Raises:
            QuoteUnavailable: If yfinance fails or reports no last price
        """
        symbol = symbol.strip().upper()
        try:
            hist = yf.Ticker(symbol).history(period="5d", interval="1d", auto_adjust=False, timeout=self.timeout)
        except Exception as e:
            logger.warning("market_data.quote.failed", symbol=symbol, error=str(e))
            raise QuoteUnavailable(symbol, str(e)) from e

        if hist is None or "Close" not in hist:
            bars = pd.DataFrame()
        else:
            bars = hist.sort_index().dropna(subset=["Close"])
        price = to_price(bars["Close"].iloc[-1]) if not bars.empty else None

        if price is None or price <= 0:
            logger.warning("market_data.quote.failed", symbol=symbol, error="no last price")
            raise QuoteUnavailable(symbol, "no last price")

        latest = bars.iloc[-1]
        previous_close = to_price(bars["Close"].iloc[-2]) if len(bars) > 1 else None

        change = None
        change_percent = None
        if previous_close is not None and previous_close > 0:
            change = price - previous_close
            change_percent = (change / previous_close * 100).quantize(CENTS, rounding=ROUND_HALF_UP)

        quote = Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=None if pd.isna(latest["Volume"]) else int(latest["Volume"]),
            day_high=to_price(latest["High"]),
            day_low=to_price(latest["Low"]),
            previous_close=previous_close,
        )
        logger.debug("market_data.quote.fetched", symbol=symbol, price=str(price))
        return quote

    def get_history(self, symbol: str, start: datetime, interval: str) -> list[PriceBar]:
        """
        Get OHLCV bars from start until now.

        Rows without a close are dropped; missing volume counts as zero.

        Raises:
            QuoteUnavailable: If yfinance fails or returns an empty frame
        """
        symbol = symbol.strip().upper()
        try:
            hist = yf.Ticker(symbol).history(
                start=start,
                interval=interval,
                auto_adjust=False,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("market_data.history.failed", symbol=symbol, interval=interval, error=str(e))
            raise QuoteUnavailable(symbol, str(e)) from e

        if hist is None or hist.empty:
            logger.warning("market_data.history.failed", symbol=symbol, interval=interval, error="empty history")
            raise QuoteUnavailable(symbol, "no price history returned")

        bars = []
        for timestamp, row in hist.sort_index().iterrows():
            if pd.isna(row["Close"]):
                continue
            close = float(row["Close"])
            bars.append(
                PriceBar(
                    date=pd.Timestamp(timestamp).to_pydatetime(),
                    open=_float_or(row["Open"], close),
                    high=_float_or(row["High"], close),
                    low=_float_or(row["Low"], close),
                    close=close,
                    volume=0 if pd.isna(row["Volume"]) else int(row["Volume"]),
                )
            )

        logger.debug("market_data.history.fetched", symbol=symbol, interval=interval, bars=len(bars))
        return bars

    def search(self, query: str) -> list[SearchResult]:
        """
        Look up equities by name or symbol.

        Keeps EQUITY results only, at most search_limit of them. The name is
        the long name when Yahoo has one, otherwise the short name.

        Raises:
            QuoteUnavailable: If the search request fails
        """
        try:
            quotes = yf.Search(query, max_results=max(self.search_limit, 10), timeout=self.timeout).quotes
        except Exception as e:
            logger.warning("market_data.search.failed", query=query, error=str(e))
            raise QuoteUnavailable(query, str(e)) from e

        results = [
            SearchResult(
                symbol=item["symbol"],
                name=item.get("longname") or item.get("shortname"),
                exchange=item.get("exchange"),
            )
            for item in quotes or []
            if item.get("quoteType") == "EQUITY" and item.get("symbol")
        ][: self.search_limit]

        logger.debug("market_data.search.completed", query=query, results=len(results))
        return results


def _float_or(value: Any, fallback: float) -> float:
    return fallback if pd.isna(value) else float(value)
