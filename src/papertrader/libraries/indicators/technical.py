"""Chart indicator bundle: SMA(20), SMA(50) and RSI(14) over one close series."""

from typing import Sequence

from pydantic import BaseModel, Field

from papertrader.libraries.indicators.momentum import compute_rsi
from papertrader.libraries.indicators.moving_averages import compute_sma

SHORT_SMA_PERIOD = 20
LONG_SMA_PERIOD = 50
RSI_PERIOD = 14


class TechnicalIndicators(BaseModel):
    """Indicator series aligned index-for-index with the history they were computed from."""

    sma20: list[float | None] = Field(default_factory=list)
    sma50: list[float | None] = Field(default_factory=list)
    rsi: list[float | None] = Field(default_factory=list)

    model_config = {"frozen": True}


def compute_technical_indicators(closes: Sequence[float]) -> TechnicalIndicators:
    """
    Compute the chart indicator bundle.

    Example:
        >>> technical = compute_technical_indicators([bar.close for bar in history])
        >>> len(technical.sma20) == len(history)
        True
    """
    prices = [float(price) for price in closes]
    return TechnicalIndicators(
        sma20=compute_sma(prices, SHORT_SMA_PERIOD),
        sma50=compute_sma(prices, LONG_SMA_PERIOD),
        rsi=compute_rsi(prices, RSI_PERIOD),
    )
