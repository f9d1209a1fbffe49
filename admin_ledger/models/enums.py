"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. An unknown action or
transfer status is caught at the database level, not just
in Python validation.
"""

import enum


class UserRole(str, enum.Enum):
    """Role assigned by the identity provider."""
    ADMIN = "admin"
    CUSTOMER = "customer"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ActivityAction(str, enum.Enum):
    """Kinds of administrative mutation recorded in the activity log."""
    BALANCE_UPDATE = "balance_update"
    TRANSFER_CREATED = "transfer_created"
    ACCOUNT_FROZEN = "account_frozen"
    ACCOUNT_UNFROZEN = "account_unfrozen"


class TransferStatus(str, enum.Enum):
    """
    Lifecycle of a transfer record.

    The engine only ever writes COMPLETED. The other values are
    reserved for asynchronous or reviewed transfers.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
