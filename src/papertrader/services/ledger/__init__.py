"""Ledger service for paper-trading accounts.

Tracks virtual cash, average-cost positions and an append-only transaction
log per account. Trades apply atomically: the funds/shares check, cash
update, position update and transaction append commit together or not at
all.

Key components:
- LedgerService: Main service implementation
- ILedgerService / ILedgerStore: Protocol interfaces
- InMemoryLedgerStore / SqlLedgerStore: Storage backends
- Models: Account, Position, Transaction, TradeResult, PortfolioSummary

Example:
    >>> from decimal import Decimal
    >>> from papertrader.services.ledger import InMemoryLedgerStore, LedgerService
    >>>
    >>> ledger = LedgerService(InMemoryLedgerStore(), provider)
    >>> ledger.open_account("alice")
    >>> ledger.execute_trade("alice", "AAPL", 10, "buy", Decimal("100.00"))
    >>> ledger.get_summary("alice").total_value
"""

from papertrader.services.ledger.errors import (
    AccountExists,
    AccountNotFound,
    InsufficientFunds,
    InsufficientShares,
    InvalidInput,
    LedgerError,
    PersistenceError,
)
from papertrader.services.ledger.interface import ILedgerService, ILedgerStore, ILedgerUnitOfWork
from papertrader.services.ledger.locks import AccountLocks
from papertrader.services.ledger.models import (
    Account,
    HoldingSummary,
    PortfolioSummary,
    Position,
    TradeResult,
    TradeSide,
    Transaction,
)
from papertrader.services.ledger.service import LedgerService, build_ledger_store
from papertrader.services.ledger.sql_store import SqlLedgerStore
from papertrader.services.ledger.store import InMemoryLedgerStore

__all__ = [
    # Service
    "ILedgerService",
    "LedgerService",
    "AccountLocks",
    # Stores
    "ILedgerStore",
    "ILedgerUnitOfWork",
    "InMemoryLedgerStore",
    "SqlLedgerStore",
    "build_ledger_store",
    # Models
    "Account",
    "Position",
    "Transaction",
    "TradeSide",
    "TradeResult",
    "HoldingSummary",
    "PortfolioSummary",
    # Errors
    "LedgerError",
    "InvalidInput",
    "AccountNotFound",
    "AccountExists",
    "InsufficientFunds",
    "InsufficientShares",
    "PersistenceError",
]
