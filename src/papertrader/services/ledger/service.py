"""Ledger service implementation.

Applies trades to account cash and average-cost positions, appends the
transaction log, and values accounts at fresh market prices.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from papertrader.services.ledger.errors import (
    AccountExists,
    AccountNotFound,
    InsufficientFunds,
    InsufficientShares,
    InvalidInput,
    LedgerError,
)
from papertrader.services.ledger.interface import ILedgerStore
from papertrader.services.ledger.locks import AccountLocks
from papertrader.services.ledger.models import (
    Account,
    HoldingSummary,
    PortfolioSummary,
    Position,
    TradeResult,
    TradeSide,
    Transaction,
    to_cost,
    to_money,
    utc_now,
)
from papertrader.services.ledger.sql_store import SqlLedgerStore
from papertrader.services.ledger.store import InMemoryLedgerStore
from papertrader.services.market_data.errors import QuoteUnavailable
from papertrader.services.market_data.interface import IMarketDataProvider
from papertrader.services.market_data.models import Quote
from papertrader.system import LoggerFactory, SystemConfig
from papertrader.system.config import LedgerSettings

logger = LoggerFactory.get_logger()

DEFAULT_INITIAL_BALANCE = Decimal("10000.00")
DEFAULT_TRANSACTION_LIMIT = 50


def normalize_symbol(symbol: Any) -> str:
    """Strip and upper-case a ticker symbol."""
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidInput(f"Symbol must be a non-empty string, got {symbol!r}")
    return symbol.strip().upper()


def normalize_quantity(quantity: Any) -> int:
    """Validate a share quantity is a positive integer."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInput(f"Quantity must be a positive integer, got {quantity!r}")
    if quantity <= 0:
        raise InvalidInput(f"Quantity must be a positive integer, got {quantity}")
    return quantity


def normalize_side(side: Any) -> TradeSide:
    """Parse a trade side from TradeSide or its string value."""
    if isinstance(side, TradeSide):
        return side
    if isinstance(side, str):
        try:
            return TradeSide(side.strip().lower())
        except ValueError:
            pass
    raise InvalidInput(f"Side must be 'buy' or 'sell', got {side!r}")


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce a money value to Decimal (floats go through str)."""
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidInput(f"{field} must be a number, got {value!r}") from e
    if not result.is_finite():
        raise InvalidInput(f"{field} must be finite, got {value!r}")
    return result


def normalize_money(value: Any, field: str) -> Decimal:
    """Coerce a cash amount or price to Decimal rounded to the ledger's money scale."""
    amount = to_decimal(value, field)
    try:
        return to_money(amount)
    except InvalidOperation as e:
        raise InvalidInput(f"{field} is out of range, got {value!r}") from e


class LedgerService:
    """
    Ledger service for paper-trading accounts.

    Trade execution is serialized per account: the funds/shares check, cash
    update, position update and transaction append run under the account's
    lock inside one store unit of work, so they apply all-or-nothing and a
    concurrent trade can never pass its check against a stale balance.

    Attributes:
        store: Storage backend
        market_data: Quote provider used by get_summary
        initial_balance: Cash credited to new accounts and the profit baseline
        transaction_limit: Max transactions returned by get_transactions

    Example:
        >>> ledger = LedgerService(InMemoryLedgerStore(), provider)
        >>> ledger.open_account("alice")
        >>> result = ledger.execute_trade("alice", "AAPL", 10, "buy", Decimal("100.00"))
        >>> result.new_cash
        Decimal('9000.0000')
    """

    def __init__(
        self,
        store: ILedgerStore,
        market_data: IMarketDataProvider | None = None,
        initial_balance: Decimal = DEFAULT_INITIAL_BALANCE,
        transaction_limit: int = DEFAULT_TRANSACTION_LIMIT,
        quote_retries: int = 0,
        locks: AccountLocks | None = None,
    ) -> None:
        """
        Initialize ledger service.

        Args:
            store: Storage backend
            market_data: Quote provider (required for get_summary)
            initial_balance: Cash for new accounts
            transaction_limit: History cap
            quote_retries: Extra quote attempts per symbol during summaries
            locks: Shared per-account lock registry (one per process)

        Raises:
            ValueError: If initial_balance <= 0, transaction_limit < 1 or quote_retries < 0
        """
        if initial_balance <= 0:
            raise ValueError(f"Initial balance must be positive, got {initial_balance}")
        if transaction_limit < 1:
            raise ValueError(f"Transaction limit must be >= 1, got {transaction_limit}")
        if quote_retries < 0:
            raise ValueError(f"Quote retries cannot be negative, got {quote_retries}")

        self.store = store
        self.market_data = market_data
        self.initial_balance = to_money(initial_balance)
        self.transaction_limit = transaction_limit
        self.quote_retries = quote_retries
        self._locks = locks or AccountLocks()

    # ==================== Accounts ====================

    def open_account(self, account_id: str, initial_cash: Decimal | None = None) -> Account:
        """
        Create an account credited with the initial balance.

        Args:
            account_id: New account id
            initial_cash: Override for the configured initial balance

        Returns:
            Created account

        Raises:
            InvalidInput: If account_id is blank or initial_cash is negative
            AccountExists: If the id is taken
        """
        account_id = self._normalize_account_id(account_id)
        cash = self.initial_balance if initial_cash is None else normalize_money(initial_cash, "Initial cash")
        if cash < 0:
            raise InvalidInput(f"Initial cash cannot be negative, got {cash}")

        account = Account(account_id=account_id, cash=cash)
        self.store.create_account(account)

        logger.info("ledger.account.opened", account_id=account_id, cash=str(cash))
        return account

    def get_or_open_account(self, account_id: str) -> Account:
        """Return the account, creating it with the initial balance if missing."""
        account_id = self._normalize_account_id(account_id)
        account = self.store.get_account(account_id)
        if account is not None:
            return account
        try:
            return self.open_account(account_id)
        except AccountExists:
            # Lost a creation race; the winner's row is authoritative
            existing = self.store.get_account(account_id)
            if existing is None:
                raise
            return existing

    def get_account(self, account_id: str) -> Account:
        """
        Get account by id.

        Raises:
            AccountNotFound: If no such account
        """
        account_id = self._normalize_account_id(account_id)
        account = self.store.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        return account

    # ==================== Trade Execution ====================

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

        Processing (one unit of work under the account lock):
        1. Validate inputs (before touching state)
        2. Load account and position
        3. Check funds (buy) or shares (sell)
        4. Update cash and position (average cost moves on buys only)
        5. Append transaction

        Args:
            account_id: Trading account
            symbol: Ticker symbol
            quantity: Shares (positive integer)
            side: "buy" or "sell"
            price: Execution price per share

        Returns:
            TradeResult with new cash, new position and the transaction

        Raises:
            InvalidInput: If any input is invalid
            AccountNotFound: If the account does not exist
            InsufficientFunds: If a buy costs more than cash
            InsufficientShares: If a sell exceeds the shares held
            PersistenceError: If storage fails (nothing applied)
        """
        account_id = self._normalize_account_id(account_id)
        symbol = normalize_symbol(symbol)
        quantity = normalize_quantity(quantity)
        trade_side = normalize_side(side)
        price = normalize_money(price, "Price")
        if price <= 0:
            raise InvalidInput(f"Price must be positive, got {price}")

        notional = price * quantity

        try:
            with self._locks.hold(account_id):
                with self.store.unit_of_work(account_id) as uow:
                    account = uow.get_account()
                    if account is None:
                        raise AccountNotFound(account_id)

                    position = uow.get_position(symbol) or Position(account_id=account_id, symbol=symbol)
                    now = utc_now()

                    if trade_side == TradeSide.BUY:
                        if account.cash < notional:
                            raise InsufficientFunds(account_id, required=notional, available=account.cash)
                        new_cash = account.cash - notional
                        new_position = self._apply_buy(position, quantity, price, now)
                    else:
                        if position.quantity < quantity:
                            raise InsufficientShares(account_id, symbol, requested=quantity, held=position.quantity)
                        new_cash = account.cash + notional
                        new_position = position.model_copy(
                            update={"quantity": position.quantity - quantity, "updated_at": now}
                        )

                    transaction = Transaction(
                        account_id=account_id,
                        symbol=symbol,
                        quantity=quantity,
                        price=price,
                        side=trade_side,
                        timestamp=now,
                    )

                    uow.save_account(account.model_copy(update={"cash": new_cash}))
                    uow.save_position(new_position)
                    uow.append_transaction(transaction)
        except LedgerError as e:
            logger.warning(
                "ledger.trade.rejected",
                account_id=account_id,
                symbol=symbol,
                side=trade_side.value,
                quantity=quantity,
                price=str(price),
                reason=type(e).__name__,
                error=str(e),
            )
            raise

        logger.info(
            "ledger.trade.executed",
            account_id=account_id,
            symbol=symbol,
            side=trade_side.value,
            quantity=quantity,
            price=str(price),
            cash=str(new_cash),
            position_quantity=new_position.quantity,
            average_cost=str(new_position.average_cost),
        )

        return TradeResult(new_cash=new_cash, new_position=new_position, transaction=transaction)

    @staticmethod
    def _apply_buy(position: Position, quantity: int, price: Decimal, now: Any) -> Position:
        """Weighted-average the new fill into the position."""
        new_quantity = position.quantity + quantity
        if position.quantity == 0:
            average_cost = price
        else:
            average_cost = to_cost((position.quantity * position.average_cost + quantity * price) / new_quantity)
        return position.model_copy(update={"quantity": new_quantity, "average_cost": average_cost, "updated_at": now})

    # ==================== Queries ====================

    def get_position(self, account_id: str, symbol: str) -> Position | None:
        """
        Get the open position for symbol.

        Returns None when never traded or when the position is flat.
        """
        position = self.store.get_position(self._normalize_account_id(account_id), normalize_symbol(symbol))
        if position is None or position.quantity == 0:
            return None
        return position

    def get_positions(self, account_id: str) -> list[Position]:
        """Open positions (quantity > 0), ordered by symbol."""
        return self.store.list_positions(self._normalize_account_id(account_id))

    def get_transactions(
        self,
        account_id: str,
        limit: int | None = None,
        side: TradeSide | str | None = None,
        symbol: str | None = None,
    ) -> list[Transaction]:
        """
        Transaction history, newest first.

        Args:
            account_id: Account
            limit: Max rows (capped at transaction_limit)
            side: Only buys or only sells
            symbol: Only this symbol

        Raises:
            InvalidInput: If limit < 1 or side invalid
        """
        account_id = self._normalize_account_id(account_id)
        if limit is None:
            limit = self.transaction_limit
        elif isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidInput(f"Limit must be a positive integer, got {limit!r}")

        return self.store.list_transactions(
            account_id,
            limit=min(limit, self.transaction_limit),
            side=normalize_side(side) if side is not None else None,
            symbol=normalize_symbol(symbol) if symbol is not None else None,
        )

    def get_summary(self, account_id: str) -> PortfolioSummary:
        """
        Value an account at fresh market prices.

        Takes no account lock. Cash and positions come from one store
        snapshot, so a trade committing meanwhile is either wholly in the
        result or wholly out of it; prices are fetched afterwards. A symbol whose quote
        cannot be fetched is logged and skipped; the rest still aggregate.

        Returns:
            PortfolioSummary with cash, holdings, total value and profit
            relative to the initial balance

        Raises:
            AccountNotFound: If the account does not exist
            RuntimeError: If no market data provider is configured
        """
        market_data = self.market_data
        if market_data is None:
            raise RuntimeError("LedgerService.get_summary requires a market data provider")

        account_id = self._normalize_account_id(account_id)
        account, positions = self.store.snapshot(account_id)
        if account is None:
            raise AccountNotFound(account_id)

        holdings: list[HoldingSummary] = []
        skipped: list[str] = []
        total_value = account.cash

        for position in positions:
            quote = self._fetch_quote(market_data, position.symbol)
            if quote is None:
                skipped.append(position.symbol)
                continue

            market_value = quote.price * position.quantity
            holdings.append(
                HoldingSummary(
                    symbol=position.symbol,
                    quantity=position.quantity,
                    average_cost=position.average_cost,
                    current_price=quote.price,
                    market_value=market_value,
                    profit=market_value - position.cost_basis,
                )
            )
            total_value += market_value

        summary = PortfolioSummary(
            account_id=account.account_id,
            cash=account.cash,
            holdings=holdings,
            total_value=total_value,
            profit=total_value - self.initial_balance,
            skipped_symbols=skipped,
        )

        logger.debug(
            "ledger.summary.built",
            account_id=account.account_id,
            holdings=len(holdings),
            skipped=len(skipped),
            total_value=str(total_value),
        )
        return summary

    def _fetch_quote(self, market_data: IMarketDataProvider, symbol: str) -> Quote | None:
        attempts = self.quote_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return market_data.get_quote(symbol)
            except QuoteUnavailable as e:
                logger.warning(
                    "ledger.summary.quote_failed",
                    symbol=symbol,
                    attempt=attempt,
                    attempts=attempts,
                    error=e.reason,
                )
        return None

    @staticmethod
    def _normalize_account_id(account_id: Any) -> str:
        if not isinstance(account_id, str) or not account_id.strip():
            raise InvalidInput(f"Account id must be a non-empty string, got {account_id!r}")
        return account_id.strip()

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        market_data: IMarketDataProvider | None = None,
        store: ILedgerStore | None = None,
    ) -> "LedgerService":
        """
        Factory method to create service from system configuration.

        Args:
            config: System configuration (ledger and market_data sections)
            market_data: Quote provider
            store: Storage backend; built from config.ledger when omitted

        Returns:
            Configured LedgerService instance
        """
        return cls(
            store=store or build_ledger_store(config.ledger),
            market_data=market_data,
            initial_balance=config.ledger.initial_balance,
            transaction_limit=config.ledger.transaction_limit,
            quote_retries=config.market_data.quote_retries,
        )


def build_ledger_store(settings: LedgerSettings) -> ILedgerStore:
    """Create the store backend named by settings.store."""
    if settings.store == "sql":
        return SqlLedgerStore(settings.database_url)
    return InMemoryLedgerStore()
