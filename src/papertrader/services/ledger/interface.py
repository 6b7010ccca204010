"""Ledger interfaces (Protocols).

Defines the contracts for the ledger service and its storage backends.
Enables dependency injection and makes the service independently testable.
"""

from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Protocol

from papertrader.services.ledger.models import (
    Account,
    PortfolioSummary,
    Position,
    TradeResult,
    TradeSide,
    Transaction,
)


class ILedgerUnitOfWork(Protocol):
    """
    Atomic read-check-write-append scope for one account.

    Obtained from ILedgerStore.unit_of_work(). Writes become visible only
    when the enclosing `with` block exits normally; an exception discards
    every write made inside the block.
    """

    def get_account(self) -> Account | None:
        """Current account state, or None if the account does not exist."""
        ...

    def get_position(self, symbol: str) -> Position | None:
        """Current position for symbol, or None if never traded."""
        ...

    def save_account(self, account: Account) -> None:
        """Stage the updated account."""
        ...

    def save_position(self, position: Position) -> None:
        """Stage the created or updated position."""
        ...

    def append_transaction(self, transaction: Transaction) -> None:
        """Stage a transaction for append."""
        ...


class ILedgerStore(Protocol):
    """
    Storage backend for accounts, positions and the transaction log.

    Implementations:
    - InMemoryLedgerStore: dict-backed, for tests and single-process use
    - SqlLedgerStore: SQLAlchemy-backed, durable
    """

    def unit_of_work(self, account_id: str) -> AbstractContextManager[ILedgerUnitOfWork]:
        """
        Open an atomic unit of work scoped to one account.

        Raises:
            PersistenceError: If the backend fails to begin or commit
        """
        ...

    def create_account(self, account: Account) -> None:
        """
        Insert a new account.

        Raises:
            AccountExists: If the id is taken
        """
        ...

    def get_account(self, account_id: str) -> Account | None:
        """Account by id, or None."""
        ...

    def snapshot(self, account_id: str) -> tuple[Account | None, list[Position]]:
        """
        Account and its open positions read as of one instant.

        No committed unit of work is ever half visible in the result. The
        account is None (and the list empty) when the account does not exist.
        """
        ...

    def list_positions(self, account_id: str) -> list[Position]:
        """Positions with quantity > 0, ordered by symbol."""
        ...

    def get_position(self, account_id: str, symbol: str) -> Position | None:
        """Position by (account, symbol), including flat ones, or None."""
        ...

    def list_transactions(
        self,
        account_id: str,
        limit: int,
        side: TradeSide | None = None,
        symbol: str | None = None,
    ) -> list[Transaction]:
        """Most recent transactions first, at most `limit`."""
        ...


class ILedgerService(Protocol):
    """
    Ledger service interface.

    Core responsibilities:
    - Open accounts with the configured initial balance
    - Apply trades atomically with average-cost accounting
    - Provide summaries valued at fresh market prices
    - Serve the transaction history

    Example:
        >>> ledger: ILedgerService = LedgerService(store, provider)
        >>> ledger.open_account("alice")
        >>> ledger.execute_trade("alice", "AAPL", 10, "buy", Decimal("100.00"))
    """

    def open_account(self, account_id: str, initial_cash: Decimal | None = None) -> Account:
        """Create an account credited with the initial balance."""
        ...

    def get_or_open_account(self, account_id: str) -> Account:
        """Existing account, or a new one with the initial balance."""
        ...

    def execute_trade(
        self,
        account_id: str,
        symbol: str,
        quantity: int,
        side: TradeSide | str,
        price: Decimal,
    ) -> TradeResult:
        """
        Apply a market trade at the given execution price.

        Raises:
            InvalidInput: If quantity/side/price/symbol invalid
            AccountNotFound: If the account does not exist
            InsufficientFunds: If a buy costs more than cash
            InsufficientShares: If a sell exceeds the shares held
            PersistenceError: If storage fails
        """
        ...

    def get_summary(self, account_id: str) -> PortfolioSummary:
        """Cash, priced holdings and profit relative to the initial balance."""
        ...

    def get_transactions(
        self,
        account_id: str,
        limit: int | None = None,
        side: TradeSide | str | None = None,
        symbol: str | None = None,
    ) -> list[Transaction]:
        """Transaction history, newest first."""
        ...
