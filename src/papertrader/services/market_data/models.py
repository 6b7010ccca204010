"""
Market Data Contract - Published Data Models.

Vendor-agnostic models returned by market data providers. Adapters must
convert vendor payloads to these shapes.

Published Data Models:
- Quote: Current market snapshot for a symbol
- PriceBar: OHLCV bar for one trading interval
- SearchResult: Symbol lookup hit
- ChartRange: Supported chart ranges with their start offsets and intervals

Design Principles:
- Immutability: All models frozen=True (quotes and bars are facts)
- Execution prices are Decimal (they flow into the ledger)
- Bar prices are float (they flow into indicators)
"""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Quote(BaseModel):
    """
    Current market quote for a symbol.

    Attributes:
        symbol: Ticker symbol
        price: Last traded price (execution price for trades)
        change: Absolute change versus previous close
        change_percent: Percent change versus previous close
        volume: Session volume
        day_high: Session high
        day_low: Session low
        previous_close: Previous session close

    Example:
        >>> quote = Quote(symbol="AAPL", price=Decimal("187.44"))
    """

    symbol: str = Field(..., description="Ticker symbol")
    price: Decimal = Field(..., gt=0, description="Last traded price")
    change: Optional[Decimal] = Field(default=None, description="Change versus previous close")
    change_percent: Optional[Decimal] = Field(default=None, description="Percent change versus previous close")
    volume: Optional[int] = Field(default=None, ge=0, description="Session volume")
    day_high: Optional[Decimal] = Field(default=None, description="Session high")
    day_low: Optional[Decimal] = Field(default=None, description="Session low")
    previous_close: Optional[Decimal] = Field(default=None, description="Previous session close")

    model_config = {"frozen": True}


class PriceBar(BaseModel):
    """
    OHLCV price bar for one trading interval.

    Bars are supplied ordered ascending by date.

    Attributes:
        date: Bar timestamp
        open: Opening price
        high: High price (>= low)
        low: Low price
        close: Closing price
        volume: Trading volume

    Example:
        >>> bar = PriceBar(
        ...     date=datetime(2024, 1, 2, 16, 0),
        ...     open=150.0,
        ...     high=151.0,
        ...     low=149.5,
        ...     close=150.5,
        ...     volume=1000000
        ... )
    """

    date: datetime = Field(..., description="Bar timestamp")
    open: float = Field(..., description="Open price")
    high: float = Field(..., description="High price")
    low: float = Field(..., description="Low price")
    close: float = Field(..., description="Close price")
    volume: int = Field(default=0, ge=0, description="Volume")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_ohlc(self) -> "PriceBar":
        """
        Validate OHLC relationships.

        Raises:
            ValueError: If High < Low
        """
        if self.high < self.low:
            raise ValueError(f"[{self.date}] OHLC violation: High ({self.high}) < Low ({self.low})")
        return self


class SearchResult(BaseModel):
    """Symbol search hit."""

    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None

    model_config = {"frozen": True}


class ChartRange(str, Enum):
    """
    Supported chart ranges.

    Each range maps to a lookback window and a bar interval:
    - 1d → 5m bars
    - 5d → 15m bars
    - 1mo, 3mo, 6mo, 1y → daily bars
    """

    ONE_DAY = "1d"
    FIVE_DAYS = "5d"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    ONE_YEAR = "1y"

    @classmethod
    def parse(cls, value: "str | ChartRange | None") -> "ChartRange":
        """Parse a range string; unknown or missing values fall back to 6mo."""
        if isinstance(value, ChartRange):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.SIX_MONTHS

    @property
    def interval(self) -> str:
        """Bar interval used when fetching history for this range."""
        if self is ChartRange.ONE_DAY:
            return "5m"
        if self is ChartRange.FIVE_DAYS:
            return "15m"
        return "1d"

    def start_date(self, now: datetime) -> datetime:
        """Start of the lookback window ending at ``now``."""
        if self is ChartRange.ONE_DAY:
            return now - timedelta(days=1)
        if self is ChartRange.FIVE_DAYS:
            return now - timedelta(days=5)
        if self is ChartRange.ONE_YEAR:
            return _shift_months(now, -12)
        months = {ChartRange.ONE_MONTH: 1, ChartRange.THREE_MONTHS: 3, ChartRange.SIX_MONTHS: 6}[self]
        return _shift_months(now, -months)


def _shift_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    # Last day of target month
    next_month_first = datetime(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month_first - timedelta(days=1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))
