"""SQL ledger store.

SQLAlchemy-backed storage for accounts, positions and the transaction log.

Schema:
- accounts(account_id PK, cash >= 0, created_at)
  (cash and prices keep MONEY_SCALE places, average costs COST_SCALE)
- positions(account_id, symbol) unique, quantity >= 0, average_cost
- transactions append-only, indexed by (account_id, timestamp)

A unit of work is one database transaction. The account row is read with
SELECT ... FOR UPDATE on backends that support row locks; the ledger service
additionally serializes writers per account in-process.
"""

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from threading import RLock

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    and_,
    create_engine,
    event,
    select,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from papertrader.services.ledger.errors import AccountExists, PersistenceError
from papertrader.services.ledger.models import COST_SCALE, MONEY_SCALE, Account, Position, TradeSide, Transaction
from papertrader.system import LoggerFactory

logger = LoggerFactory.get_logger()


class Base(DeclarativeBase):
    pass


class AccountRow(Base):
    """Account cash balance."""

    __tablename__ = "accounts"

    account_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    cash: Mapped[Decimal] = mapped_column(Numeric(20, MONEY_SCALE), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (CheckConstraint("cash >= 0", name="ck_accounts_cash_non_negative"),)


class PositionRow(Base):
    """Average-cost holding of one symbol."""

    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.account_id"), nullable=False)
    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_cost: Mapped[Decimal] = mapped_column(Numeric(28, COST_SCALE), nullable=False, default=Decimal("0"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("account_id", "symbol", name="uq_positions_account_symbol"),
        CheckConstraint("quantity >= 0", name="ck_positions_quantity_non_negative"),
    )


class TransactionRow(Base):
    """Executed trade (append-only)."""

    __tablename__ = "transactions"

    # Surrogate key doubles as insertion order for equal timestamps
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    account_id: Mapped[str] = mapped_column(ForeignKey("accounts.account_id"), nullable=False)
    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(20, MONEY_SCALE), nullable=False)
    side: Mapped[str] = mapped_column(String(4), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
        CheckConstraint("side IN ('buy', 'sell')", name="ck_transactions_side"),
        Index("ix_transactions_account_timestamp", "account_id", "timestamp"),
    )


def _as_utc(moment: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _to_account(row: AccountRow) -> Account:
    return Account(account_id=row.account_id, cash=Decimal(row.cash), created_at=_as_utc(row.created_at))


def _to_position(row: PositionRow) -> Position:
    return Position(
        account_id=row.account_id,
        symbol=row.symbol,
        quantity=row.quantity,
        average_cost=Decimal(row.average_cost),
        updated_at=_as_utc(row.updated_at),
    )


def _to_transaction(row: TransactionRow) -> Transaction:
    return Transaction(
        transaction_id=row.transaction_id,
        account_id=row.account_id,
        symbol=row.symbol,
        quantity=row.quantity,
        price=Decimal(row.price),
        side=TradeSide(row.side),
        timestamp=_as_utc(row.timestamp),
    )


class _SqlUnitOfWork:
    """Unit of work bound to one open database transaction."""

    def __init__(self, session: Session, account_id: str) -> None:
        self._session = session
        self.account_id = account_id

    def get_account(self) -> Account | None:
        row = self._session.execute(
            select(AccountRow).where(AccountRow.account_id == self.account_id).with_for_update()
        ).scalar_one_or_none()
        return _to_account(row) if row is not None else None

    def get_position(self, symbol: str) -> Position | None:
        row = self._position_row(symbol)
        return _to_position(row) if row is not None else None

    def save_account(self, account: Account) -> None:
        if account.account_id != self.account_id:
            raise ValueError(f"Unit of work for {self.account_id} cannot save account {account.account_id}")
        row = self._session.get(AccountRow, account.account_id)
        if row is None:
            raise ValueError(f"Account row missing: {account.account_id}")
        row.cash = account.cash

    def save_position(self, position: Position) -> None:
        if position.account_id != self.account_id:
            raise ValueError(f"Unit of work for {self.account_id} cannot save position of {position.account_id}")
        row = self._position_row(position.symbol)
        if row is None:
            row = PositionRow(account_id=position.account_id, symbol=position.symbol)
            self._session.add(row)
        row.quantity = position.quantity
        row.average_cost = position.average_cost
        row.updated_at = position.updated_at

    def append_transaction(self, transaction: Transaction) -> None:
        if transaction.account_id != self.account_id:
            raise ValueError(
                f"Unit of work for {self.account_id} cannot append transaction of {transaction.account_id}"
            )
        self._session.add(
            TransactionRow(
                transaction_id=transaction.transaction_id,
                account_id=transaction.account_id,
                symbol=transaction.symbol,
                quantity=transaction.quantity,
                price=transaction.price,
                side=transaction.side.value,
                timestamp=transaction.timestamp,
            )
        )

    def _position_row(self, symbol: str) -> PositionRow | None:
        return self._session.execute(
            select(PositionRow)
            .where(PositionRow.account_id == self.account_id, PositionRow.symbol == symbol)
            .with_for_update()
        ).scalar_one_or_none()


def create_ledger_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the ledger.

    SQLite file databases get their parent directory created; in-memory
    SQLite shares one connection across threads. Foreign keys are enabled
    on every SQLite connection.
    """
    url = make_url(database_url)
    kwargs: dict = {"echo": echo, "future": True}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, **kwargs)

    if url.get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

    return engine


class SqlLedgerStore:
    """
    SQLAlchemy-backed ledger store.

    Example:
        >>> store = SqlLedgerStore("sqlite:///data/papertrader.db")
        >>> store.create_account(Account(account_id="alice", cash=Decimal("10000")))
    """

    def __init__(self, database_url: str | None = None, engine: Engine | None = None, echo: bool = False) -> None:
        """
        Initialize store and create the schema if missing.

        Args:
            database_url: SQLAlchemy URL (ignored when engine is given)
            engine: Pre-built engine
            echo: Log SQL statements

        Raises:
            ValueError: If neither database_url nor engine is provided
            PersistenceError: If the schema cannot be created
        """
        if engine is None:
            if database_url is None:
                raise ValueError("SqlLedgerStore requires database_url or engine")
            engine = create_ledger_engine(database_url, echo=echo)

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        # One shared connection (in-memory SQLite): sessions must not interleave
        self._shared_connection_lock = RLock() if isinstance(engine.pool, StaticPool) else None

        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize ledger schema: {e}") from e

        logger.debug("sql_store.initialized", url=engine.url.render_as_string(hide_password=True))

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def unit_of_work(self, account_id: str) -> Iterator[_SqlUnitOfWork]:
        with self._exclusive():
            session = self._session_factory()
            try:
                with session.begin():
                    yield _SqlUnitOfWork(session, account_id)
            except SQLAlchemyError as e:
                logger.error("sql_store.unit_of_work.failed", account_id=account_id, error=str(e))
                raise PersistenceError(f"Ledger update failed for {account_id}: {e}") from e
            finally:
                session.close()

    def create_account(self, account: Account) -> None:
        with self._exclusive():
            session = self._session_factory()
            try:
                with session.begin():
                    if session.get(AccountRow, account.account_id) is not None:
                        raise AccountExists(account.account_id)
                    session.add(
                        AccountRow(account_id=account.account_id, cash=account.cash, created_at=account.created_at)
                    )
            except IntegrityError as e:
                raise AccountExists(account.account_id) from e
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to create account {account.account_id}: {e}") from e
            finally:
                session.close()

    def get_account(self, account_id: str) -> Account | None:
        with self._read_session() as session:
            row = session.get(AccountRow, account_id)
            return _to_account(row) if row is not None else None

    def get_position(self, account_id: str, symbol: str) -> Position | None:
        with self._read_session() as session:
            row = session.execute(
                select(PositionRow).where(PositionRow.account_id == account_id, PositionRow.symbol == symbol)
            ).scalar_one_or_none()
            return _to_position(row) if row is not None else None

    def snapshot(self, account_id: str) -> tuple[Account | None, list[Position]]:
        # One statement, so a concurrent commit is either fully in or fully out
        query = (
            select(AccountRow, PositionRow)
            .outerjoin(
                PositionRow,
                and_(PositionRow.account_id == AccountRow.account_id, PositionRow.quantity > 0),
            )
            .where(AccountRow.account_id == account_id)
            .order_by(PositionRow.symbol)
        )
        with self._read_session() as session:
            rows = session.execute(query).all()
            if not rows:
                return None, []
            account = _to_account(rows[0][0])
            return account, [_to_position(position) for _, position in rows if position is not None]

    def list_positions(self, account_id: str) -> list[Position]:
        with self._read_session() as session:
            rows = session.execute(
                select(PositionRow)
                .where(PositionRow.account_id == account_id, PositionRow.quantity > 0)
                .order_by(PositionRow.symbol)
            ).scalars()
            return [_to_position(row) for row in rows]

    def list_transactions(
        self,
        account_id: str,
        limit: int,
        side: TradeSide | None = None,
        symbol: str | None = None,
    ) -> list[Transaction]:
        query = select(TransactionRow).where(TransactionRow.account_id == account_id)
        if side is not None:
            query = query.where(TransactionRow.side == side.value)
        if symbol is not None:
            query = query.where(TransactionRow.symbol == symbol)
        query = query.order_by(TransactionRow.timestamp.desc(), TransactionRow.id.desc()).limit(limit)

        with self._read_session() as session:
            return [_to_transaction(row) for row in session.execute(query).scalars()]

    def _exclusive(self) -> AbstractContextManager:
        if self._shared_connection_lock is None:
            return nullcontext()
        return self._shared_connection_lock

    @contextmanager
    def _read_session(self) -> Iterator[Session]:
        with self._exclusive():
            session = self._session_factory()
            try:
                yield session
            except SQLAlchemyError as e:
                raise PersistenceError(f"Ledger read failed: {e}") from e
            finally:
                session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
