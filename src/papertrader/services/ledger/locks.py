"""Per-account mutex registry.

All mutations of one account's cash and positions run under that account's
lock, so a funds or shares check can never be made against a stale balance.
Different accounts proceed in parallel.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from weakref import WeakValueDictionary


class AccountLocks:
    """
    Registry of one lock per account id.

    Entries are weak: a lock lives only while some caller references it, so
    the registry does not grow with every account ever traded. A lock that
    is held is referenced by its holder and therefore stays registered.

    Example:
        >>> locks = AccountLocks()
        >>> with locks.hold("alice"):
        ...     ...  # check-then-act on alice's state
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: WeakValueDictionary[str, Lock] = WeakValueDictionary()

    def get(self, account_id: str) -> Lock:
        """Lock for account_id, created on first use."""
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = Lock()
                self._locks[account_id] = lock
            return lock

    @contextmanager
    def hold(self, account_id: str) -> Iterator[None]:
        """Hold the account's lock for the duration of the block."""
        lock = self.get(account_id)
        with lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
