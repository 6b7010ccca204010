"""Chart service: quote, price history and technical indicators for a symbol."""

from papertrader.services.charting.service import ChartData, ChartService

__all__ = ["ChartService", "ChartData"]
