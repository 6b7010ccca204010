"""Ledger error taxonomy.

- InvalidInput: rejected before touching state
- InsufficientFunds / InsufficientShares: business-rule violations, no state change
- AccountNotFound / AccountExists: account lifecycle violations
- PersistenceError: unexpected storage failure, trade not applied
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for ledger failures."""


class InvalidInput(LedgerError, ValueError):
    """Trade or account parameters failed validation."""


class AccountNotFound(LedgerError):
    """No account exists for the given id."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class AccountExists(LedgerError):
    """An account with the given id already exists."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account already exists: {account_id}")


class InsufficientFunds(LedgerError):
    """
    Buy costs more than available cash.

    Attributes:
        required: Cost of the buy (price × quantity)
        available: Cash at the time of the check
    """

    def __init__(self, account_id: str, required: Decimal, available: Decimal) -> None:
        self.account_id = account_id
        self.required = required
        self.available = available
        super().__init__(f"Insufficient funds for {account_id}: required {required}, available {available}")


class InsufficientShares(LedgerError):
    """
    Sell requests more shares than held.

    Attributes:
        symbol: Symbol being sold
        requested: Shares requested
        held: Shares held at the time of the check
    """

    def __init__(self, account_id: str, symbol: str, requested: int, held: int) -> None:
        self.account_id = account_id
        self.symbol = symbol
        self.requested = requested
        self.held = held
        super().__init__(f"Insufficient shares of {symbol} for {account_id}: requested {requested}, held {held}")


class PersistenceError(LedgerError):
    """Storage backend failed; the operation was not applied."""
