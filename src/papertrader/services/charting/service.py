"""Chart service.

Combines a current quote, the price history for a chart range, and the
SMA(20) / SMA(50) / RSI(14) indicator series computed over its closes.
"""

from datetime import datetime, timezone

from pydantic import BaseModel

from papertrader.libraries.indicators import TechnicalIndicators, compute_technical_indicators
from papertrader.services.market_data.interface import IMarketDataProvider
from papertrader.services.market_data.models import ChartRange, PriceBar, Quote
from papertrader.system import LoggerFactory

logger = LoggerFactory.get_logger()


class ChartData(BaseModel):
    """
    Quote, history and indicators for one symbol.

    Attributes:
        symbol: Ticker symbol
        range: Chart range the history covers
        quote: Current quote
        history: Bars ordered ascending by date
        technical: Indicator series aligned with history
    """

    symbol: str
    range: ChartRange
    quote: Quote
    history: list[PriceBar]
    technical: TechnicalIndicators

    model_config = {"frozen": True}


class ChartService:
    """
    Chart data service.

    Example:
        >>> charts = ChartService(YahooMarketDataProvider())
        >>> chart = charts.get_chart("AAPL", "1mo")
        >>> chart.technical.rsi[-1]
    """

    def __init__(self, market_data: IMarketDataProvider) -> None:
        self.market_data = market_data

    def get_chart(
        self,
        symbol: str,
        range: str | ChartRange = ChartRange.SIX_MONTHS,
        now: datetime | None = None,
    ) -> ChartData:
        """
        Build chart data for a symbol.

        Args:
            symbol: Ticker symbol
            range: Chart range; unknown values fall back to 6mo
            now: End of the lookback window (defaults to current UTC time)

        Returns:
            ChartData with quote, history and technical indicators

        Raises:
            QuoteUnavailable: If the quote or history cannot be fetched
        """
        symbol = symbol.strip().upper()
        chart_range = ChartRange.parse(range)
        start = chart_range.start_date(now or datetime.now(timezone.utc))

        quote = self.market_data.get_quote(symbol)
        history = self.market_data.get_history(symbol, start, chart_range.interval)
        technical = compute_technical_indicators([bar.close for bar in history])

        logger.debug(
            "chart.built",
            symbol=symbol,
            range=chart_range.value,
            interval=chart_range.interval,
            bars=len(history),
        )
        return ChartData(symbol=symbol, range=chart_range, quote=quote, history=history, technical=technical)
