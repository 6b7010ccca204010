"""Trading desk: quote-then-execute market orders."""

from papertrader.services.trading.desk import TradingDesk

__all__ = ["TradingDesk"]
