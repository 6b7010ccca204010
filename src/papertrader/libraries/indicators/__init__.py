"""
Indicators Library.

Trailing technical indicators over ordered price series:
- Moving Averages: SMA
- Momentum: RSI
- Chart bundle: SMA(20), SMA(50), RSI(14)
"""

from papertrader.libraries.indicators.base import BaseIndicator, IndicatorPlacement
from papertrader.libraries.indicators.momentum import RSI, compute_rsi
from papertrader.libraries.indicators.moving_averages import SMA, compute_sma
from papertrader.libraries.indicators.technical import TechnicalIndicators, compute_technical_indicators

__all__ = [
    # Base
    "BaseIndicator",
    "IndicatorPlacement",
    # Moving Averages
    "SMA",
    "compute_sma",
    # Momentum
    "RSI",
    "compute_rsi",
    # Chart bundle
    "TechnicalIndicators",
    "compute_technical_indicators",
]
