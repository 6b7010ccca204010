"""
Indicator base class and shared helpers.

An indicator turns an ordered price series into a series of the same
length, with None wherever its lookback window is not yet filled. Each one
works in two modes that agree value for value:

- calculate(bars): whole-series, no state kept
- update(bar) / update_value(price): one step at a time

Indicators do no I/O and no logging.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence

from papertrader.services.market_data.models import PriceBar


class IndicatorPlacement(str, Enum):
    """Where a chart draws the indicator: on the price pane or in its own pane."""

    OVERLAY = "overlay"
    SUBPLOT = "subplot"


def validate_period(period: int) -> int:
    """
    Return period if it is a usable lookback.

    Raises:
        ValueError: If period is not an int >= 1 (bools rejected)
    """
    if isinstance(period, bool) or not isinstance(period, int):
        raise ValueError(f"Period must be an integer, got {period!r}")
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")
    return period


def closes_of(bars: Sequence[PriceBar], price_field: str = "close") -> list[float]:
    """Pull one price field out of each bar."""
    return [float(getattr(bar, price_field)) for bar in bars]


class BaseIndicator(ABC):
    """
    Contract shared by SMA and RSI.

    Subclasses set `placement` (and `value_range` when bounded), store their
    price field as `_price_field`, and implement the abstract members below.
    """

    placement: IndicatorPlacement = IndicatorPlacement.SUBPLOT
    value_range: tuple[float | None, float | None] = (None, None)

    @abstractmethod
    def __init__(self, **params: Any): ...

    @abstractmethod
    def calculate(self, bars: Sequence[PriceBar]) -> list[float | None]:
        """Values for every bar (oldest first), None during warmup."""

    def update(self, bar: PriceBar) -> float | None:
        """Feed one bar; returns the latest value or None while warming up."""
        return self.update_value(float(getattr(bar, self.price_field)))

    @abstractmethod
    def update_value(self, value: float) -> float | None: ...

    @abstractmethod
    def reset(self) -> None:
        """Forget all fed prices; parameters are kept."""

    @property
    @abstractmethod
    def value(self) -> float | None: ...

    @property
    @abstractmethod
    def is_ready(self) -> bool: ...

    @property
    def price_field(self) -> str:
        return getattr(self, "_price_field", "close")

    @property
    def name(self) -> str:
        """snake_case class name without an "Indicator" suffix (SMA -> "sma")."""
        words = self.__class__.__name__.removesuffix("Indicator")
        if words.isupper():
            return words.lower()
        return "".join(f"_{c.lower()}" if c.isupper() else c for c in words).lstrip("_")
