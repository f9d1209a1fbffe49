"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from admin_ledger.models.base import Base
from admin_ledger.models.enums import (
    UserRole,
    UserStatus,
    ActivityAction,
    TransferStatus,
)
from admin_ledger.models.profile import UserProfile
from admin_ledger.models.account import Account
from admin_ledger.models.activity_record import ActivityRecord
from admin_ledger.models.transfer import TransferRecord
from admin_ledger.models.types import Money

__all__ = [
    "Base",
    "UserRole",
    "UserStatus",
    "ActivityAction",
    "TransferStatus",
    "UserProfile",
    "Account",
    "ActivityRecord",
    "TransferRecord",
    "Money",
]
