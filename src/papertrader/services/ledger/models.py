"""Data models for the ledger service.

Defines all core entities for paper-trading accounting:
- TradeSide: Buy or sell
- Account: Cash holder
- Position: Average-cost holding of one symbol
- Transaction: Immutable record of an executed trade
- TradeResult: Outcome of execute_trade
- HoldingSummary / PortfolioSummary: Valuation read model
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Decimal places kept for cash and prices, and for average costs
MONEY_SCALE = 4
COST_SCALE = 10

MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)
COST_QUANTUM = Decimal(1).scaleb(-COST_SCALE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value: Decimal) -> Decimal:
    """Round a cash amount or price to MONEY_SCALE places (half up)."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_cost(value: Decimal) -> Decimal:
    """Round an average cost to COST_SCALE places (half up)."""
    return value.quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)


class TradeSide(str, Enum):
    """Side of a trade."""

    BUY = "buy"
    SELL = "sell"


class Account(BaseModel):
    """
    Account holding virtual cash.

    Attributes:
        account_id: Unique identifier
        cash: Cash balance (never negative)
        created_at: Registration time

    Example:
        >>> account = Account(account_id="alice", cash=Decimal("10000.00"))
    """

    account_id: str
    cash: Decimal
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("cash")
    @classmethod
    def validate_cash(cls, v: Decimal) -> Decimal:
        """Validate cash is non-negative."""
        if v < 0:
            raise ValueError(f"Cash cannot be negative, got {v}")
        return v

    model_config = ConfigDict(frozen=True)


class Position(BaseModel):
    """
    Holding of one symbol for one account.

    Average cost is the weighted mean purchase price of the shares held.
    It is recomputed on buys only; sells leave it unchanged. A position
    driven to zero quantity is retained but is no longer a holding.

    Attributes:
        account_id: Owning account
        symbol: Ticker symbol
        quantity: Shares held (>= 0)
        average_cost: Weighted average purchase price (meaningful when quantity > 0)
        updated_at: Last change time
    """

    account_id: str
    symbol: str
    quantity: int = 0
    average_cost: Decimal = Decimal("0")
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        """Validate quantity is non-negative."""
        if v < 0:
            raise ValueError(f"Position quantity cannot be negative, got {v}")
        return v

    @field_validator("average_cost")
    @classmethod
    def validate_average_cost(cls, v: Decimal) -> Decimal:
        """Validate average cost is non-negative."""
        if v < 0:
            raise ValueError(f"Average cost cannot be negative, got {v}")
        return v

    @property
    def is_open(self) -> bool:
        return self.quantity > 0

    @property
    def cost_basis(self) -> Decimal:
        """Average cost × quantity."""
        return self.average_cost * self.quantity

    model_config = ConfigDict(frozen=True)


class Transaction(BaseModel):
    """
    Immutable record of an executed trade.

    Attributes:
        transaction_id: Unique identifier
        account_id: Owning account
        symbol: Ticker symbol
        quantity: Shares traded (positive; direction given by side)
        price: Execution price per share
        side: Buy or sell
        timestamp: Execution time (UTC)
    """

    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    account_id: str
    symbol: str
    quantity: int = Field(gt=0)
    price: Decimal = Field(gt=0)
    side: TradeSide
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def notional(self) -> Decimal:
        return self.price * self.quantity

    @property
    def cash_flow(self) -> Decimal:
        """Signed cash impact (negative for buys)."""
        return -self.notional if self.side == TradeSide.BUY else self.notional

    model_config = ConfigDict(frozen=True)


class TradeResult(BaseModel):
    """Outcome of a successful trade."""

    new_cash: Decimal
    new_position: Position
    transaction: Transaction

    model_config = ConfigDict(frozen=True)


class HoldingSummary(BaseModel):
    """
    Open position valued at a freshly fetched price.

    Attributes:
        profit: Unrealized profit = market_value - average_cost × quantity
    """

    symbol: str
    quantity: int
    average_cost: Decimal
    current_price: Decimal
    market_value: Decimal
    profit: Decimal

    model_config = ConfigDict(frozen=True)


class PortfolioSummary(BaseModel):
    """
    Point-in-time valuation of an account.

    Attributes:
        cash: Cash balance
        holdings: Priced open positions
        total_value: cash + Σ holding market values
        profit: total_value - initial balance
        skipped_symbols: Open positions left out because no quote was available
    """

    account_id: str
    cash: Decimal
    holdings: list[HoldingSummary] = Field(default_factory=list)
    total_value: Decimal
    profit: Decimal
    skipped_symbols: list[str] = Field(default_factory=list)
    as_of: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(frozen=True)
