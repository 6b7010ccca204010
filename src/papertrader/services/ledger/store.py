"""In-memory ledger store.

Dict-backed storage for accounts, positions and the append-only transaction
log. A unit of work stages its writes and applies them in one step when the
block exits normally; an exception discards the staged writes.
"""

from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from papertrader.services.ledger.errors import AccountExists
from papertrader.services.ledger.models import Account, Position, TradeSide, Transaction


class _InMemoryUnitOfWork:
    """Staged view over one account's committed state."""

    def __init__(self, store: "InMemoryLedgerStore", account_id: str) -> None:
        self._store = store
        self.account_id = account_id
        self.account: Account | None = None
        self.positions: dict[str, Position] = {}
        self.transactions: list[Transaction] = []

    def get_account(self) -> Account | None:
        if self.account is not None:
            return self.account
        return self._store.get_account(self.account_id)

    def get_position(self, symbol: str) -> Position | None:
        if symbol in self.positions:
            return self.positions[symbol]
        return self._store.get_position(self.account_id, symbol)

    def save_account(self, account: Account) -> None:
        if account.account_id != self.account_id:
            raise ValueError(f"Unit of work for {self.account_id} cannot save account {account.account_id}")
        self.account = account

    def save_position(self, position: Position) -> None:
        if position.account_id != self.account_id:
            raise ValueError(f"Unit of work for {self.account_id} cannot save position of {position.account_id}")
        self.positions[position.symbol] = position

    def append_transaction(self, transaction: Transaction) -> None:
        if transaction.account_id != self.account_id:
            raise ValueError(
                f"Unit of work for {self.account_id} cannot append transaction of {transaction.account_id}"
            )
        self.transactions.append(transaction)


class InMemoryLedgerStore:
    """
    Dict-backed ledger store.

    Example:
        >>> store = InMemoryLedgerStore()
        >>> store.create_account(Account(account_id="alice", cash=Decimal("10000")))
        >>> with store.unit_of_work("alice") as uow:
        ...     account = uow.get_account()
        ...     uow.save_account(account.model_copy(update={"cash": Decimal("9000")}))
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._accounts: dict[str, Account] = {}
        self._positions: dict[tuple[str, str], Position] = {}
        self._transactions: dict[str, list[Transaction]] = defaultdict(list)

    @contextmanager
    def unit_of_work(self, account_id: str) -> Iterator[_InMemoryUnitOfWork]:
        uow = _InMemoryUnitOfWork(self, account_id)
        yield uow
        self._commit(uow)

    def _commit(self, uow: _InMemoryUnitOfWork) -> None:
        with self._lock:
            if uow.account is not None:
                self._accounts[uow.account_id] = uow.account
            for symbol, position in uow.positions.items():
                self._positions[(uow.account_id, symbol)] = position
            self._transactions[uow.account_id].extend(uow.transactions)

    def create_account(self, account: Account) -> None:
        with self._lock:
            if account.account_id in self._accounts:
                raise AccountExists(account.account_id)
            self._accounts[account.account_id] = account

    def get_account(self, account_id: str) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def get_position(self, account_id: str, symbol: str) -> Position | None:
        with self._lock:
            return self._positions.get((account_id, symbol))

    def snapshot(self, account_id: str) -> tuple[Account | None, list[Position]]:
        with self._lock:
            return self._accounts.get(account_id), self.list_positions(account_id)

    def list_positions(self, account_id: str) -> list[Position]:
        with self._lock:
            positions = [
                position
                for (owner, _), position in self._positions.items()
                if owner == account_id and position.quantity > 0
            ]
        return sorted(positions, key=lambda p: p.symbol)

    def list_transactions(
        self,
        account_id: str,
        limit: int,
        side: TradeSide | None = None,
        symbol: str | None = None,
    ) -> list[Transaction]:
        with self._lock:
            entries = list(self._transactions.get(account_id, []))

        if side is not None:
            entries = [t for t in entries if t.side == side]
        if symbol is not None:
            entries = [t for t in entries if t.symbol == symbol]

        # Newest first; stable sort keeps later appends ahead on equal timestamps
        entries = sorted(reversed(entries), key=lambda t: t.timestamp, reverse=True)
        return entries[:limit]
