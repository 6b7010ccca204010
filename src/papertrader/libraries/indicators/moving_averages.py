"""
Moving Average Indicators.

- compute_sma: pure function over a close series
- SMA: Simple Moving Average indicator (stateful and stateless modes)
"""

import math
from collections import deque
from typing import Any, Sequence

from papertrader.libraries.indicators.base import BaseIndicator, IndicatorPlacement, closes_of, validate_period
from papertrader.services.market_data.models import PriceBar


def compute_sma(closes: Sequence[float], period: int) -> list[float | None]:
    """
    Trailing simple moving average aligned with the input.

    Output index i is None for i < period - 1, otherwise the arithmetic
    mean of closes[i - period + 1 .. i]. Output length equals input length,
    so an input shorter than period yields all None.

    Each window is summed afresh with math.fsum, so no rounding error
    survives from prices that have left it.

    Args:
        closes: Close prices (oldest first)
        period: Window length

    Returns:
        SMA series aligned with closes

    Raises:
        ValueError: If period < 1

    Example:
        >>> compute_sma([10, 20, 30, 40, 50], 3)
        [None, None, 20.0, 30.0, 40.0]
    """
    validate_period(period)

    prices = [float(price) for price in closes]
    result: list[float | None] = [None] * min(period - 1, len(prices))
    for end in range(period, len(prices) + 1):
        result.append(math.fsum(prices[end - period : end]) / period)
    return result


class SMA(BaseIndicator):
    """
    Simple Moving Average over the last `period` prices.

    Drawn on the price chart. calculate() delegates to compute_sma; update()
    keeps the last `period` prices and averages them with math.fsum, giving
    the same values as compute_sma.

    Example:
        >>> sma = SMA(period=3)
        >>> [sma.update_value(p) for p in (10.0, 20.0, 30.0, 40.0)]
        [None, None, 20.0, 30.0]
    """

    placement = IndicatorPlacement.OVERLAY

    def __init__(self, period: int, price_field: str = "close", **params: Any):
        self.period = validate_period(period)
        self._price_field = price_field
        self._window: deque[float] = deque(maxlen=self.period)

    def calculate(self, bars: Sequence[PriceBar]) -> list[float | None]:
        return compute_sma(closes_of(bars, self._price_field), self.period)

    def update_value(self, value: float) -> float | None:
        self._window.append(float(value))
        return self.value

    def reset(self) -> None:
        self._window.clear()

    @property
    def value(self) -> float | None:
        return math.fsum(self._window) / self.period if self.is_ready else None

    @property
    def is_ready(self) -> bool:
        return len(self._window) == self.period
