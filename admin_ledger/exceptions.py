"""
Ledger error taxonomy.

Every failure the engine reports is one of these. The API layer
maps each kind to a status code and a message the console can show;
raw storage errors never reach the caller.
"""


class LedgerError(Exception):
    """Base class for all engine errors."""

    kind = "ledger_error"


class InvalidArgument(LedgerError, ValueError):
    """Malformed or contradictory input (same account, bad amount)."""

    kind = "invalid_argument"


class NotFound(LedgerError, ValueError):
    """A referenced user or account does not exist."""

    kind = "not_found"


class AccountFrozen(LedgerError):
    """The operation is blocked because an account is frozen."""

    kind = "account_frozen"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Account {user_id} is frozen")


class InsufficientFunds(LedgerError):
    """The operation would drive a balance below zero."""

    kind = "insufficient_funds"

    def __init__(self, user_id: str, available, requested):
        self.user_id = user_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance on account {user_id}: "
            f"available={available}, requested={requested}"
        )


class Busy(LedgerError):
    """Lock contention exceeded the configured wait. Safe to retry."""

    kind = "busy"


class StorageError(LedgerError):
    """The durable store failed. Safe to retry; nothing was written."""

    kind = "storage_error"
