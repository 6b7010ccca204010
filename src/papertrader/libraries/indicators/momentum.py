"""
Momentum Indicators.

- compute_rsi: pure function over a close series
- RSI: Relative Strength Index indicator (stateful and stateless modes)
"""

from typing import Any, Sequence

from papertrader.libraries.indicators.base import BaseIndicator, IndicatorPlacement, closes_of, validate_period
from papertrader.services.market_data.models import PriceBar


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def compute_rsi(closes: Sequence[float], period: int = 14) -> list[float | None]:
    """
    Relative Strength Index aligned with the input.

    The first `period` differences seed the average gain and loss (mean of
    positive diffs and of absolute negative diffs over `period`). The first
    defined value sits at index `period`; later values use Wilder smoothing:

        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        RSI = 100                                  if avg_loss == 0
        RSI = 100 - 100 / (1 + avg_gain / avg_loss) otherwise

    Indices before `period` are None; len(closes) <= period yields all None.

    Args:
        closes: Close prices (oldest first)
        period: Lookback length (default: 14)

    Returns:
        RSI series aligned with closes

    Raises:
        ValueError: If period < 1
    """
    validate_period(period)

    prices = [float(price) for price in closes]
    result: list[float | None] = [None] * len(prices)
    if len(prices) <= period:
        return result

    gain_sum = 0.0
    loss_sum = 0.0
    for i in range(1, period + 1):
        change = prices[i] - prices[i - 1]
        gain_sum += max(change, 0.0)
        loss_sum += max(-change, 0.0)

    avg_gain = gain_sum / period
    avg_loss = loss_sum / period
    result[period] = _rsi_from_averages(avg_gain, avg_loss)

    for i in range(period + 1, len(prices)):
        change = prices[i] - prices[i - 1]
        avg_gain = (avg_gain * (period - 1) + max(change, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-change, 0.0)) / period
        result[i] = _rsi_from_averages(avg_gain, avg_loss)

    return result


class RSI(BaseIndicator):
    """
    Relative Strength Index, bounded in [0, 100] and drawn below the price chart.

    Streaming counterpart of compute_rsi: the first `period` price changes
    seed the average gain and loss, later changes are Wilder-smoothed.
    Readings above 70 are conventionally read as overbought, below 30 as
    oversold.
    """

    placement = IndicatorPlacement.SUBPLOT
    value_range = (0.0, 100.0)

    def __init__(self, period: int = 14, price_field: str = "close", **params: Any):
        self.period = validate_period(period)
        self._price_field = price_field
        self.reset()

    def calculate(self, bars: Sequence[PriceBar]) -> list[float | None]:
        return compute_rsi(closes_of(bars, self._price_field), self.period)

    def update_value(self, value: float) -> float | None:
        last, self._last = self._last, value
        if last is None:
            return None

        delta = value - last
        up, down = max(delta, 0.0), max(-delta, 0.0)

        if self._averages is not None:
            avg_up, avg_down = self._averages
            self._averages = (
                (avg_up * (self.period - 1) + up) / self.period,
                (avg_down * (self.period - 1) + down) / self.period,
            )
        else:
            self._seed.append((up, down))
            if len(self._seed) == self.period:
                self._averages = (
                    sum(u for u, _ in self._seed) / self.period,
                    sum(d for _, d in self._seed) / self.period,
                )
                self._seed = []
        return self.value

    def reset(self) -> None:
        self._last: float | None = None
        self._seed: list[tuple[float, float]] = []
        self._averages: tuple[float, float] | None = None

    @property
    def value(self) -> float | None:
        if self._averages is None:
            return None
        return _rsi_from_averages(*self._averages)

    @property
    def is_ready(self) -> bool:
        return self._averages is not None
