"""Ledger engine services."""

from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.services.transfer_ledger import TransferLedger
from admin_ledger.services.balance_service import BalanceMutationService
from admin_ledger.services.transfer_service import TransferService
from admin_ledger.services.reconciliation_service import ReconciliationService
from admin_ledger.services.user_directory import UserDirectory

__all__ = [
    "AccountStore",
    "ActivityLog",
    "TransferLedger",
    "BalanceMutationService",
    "TransferService",
    "ReconciliationService",
    "UserDirectory",
]
