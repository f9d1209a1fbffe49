"""
Reconciliation service: checks balances against their history.

Every stored balance must be reproducible by replaying the activity
log from zero: a balance_update sets the balance outright, and each
transfer_created moves its amount out of the source and into the
destination. A mismatch means a balance changed without an audit
record (or the other way round).
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from admin_ledger.models.account import Account
from admin_ledger.models.enums import ActivityAction, TransferStatus
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.services.transfer_ledger import TransferLedger

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class ReconciliationService:
    """
    Read-only checks of stored balances against their history.

    Every balance change is in the activity log, so replaying it
    from the first record must land on the stored balance. Any
    difference means a write bypassed the mutation services.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountStore(db)
        self.activity = ActivityLog(db)
        self.ledger = TransferLedger(db)

    def replay_balance(self, user_id: str) -> Decimal:
        """Rebuild a balance from the user's activity history."""
        balance = ZERO
        for record in self.activity.history_for(user_id):
            details = record.details
            if record.action == ActivityAction.BALANCE_UPDATE:
                balance = Decimal(details["new_balance"])
            elif record.action == ActivityAction.TRANSFER_CREATED:
                amount = Decimal(details["amount"])
                if details["from_user_id"] == user_id:
                    balance -= amount
                if details["to_user_id"] == user_id:
                    balance += amount
        return balance

    def check_account(self, user_id: str) -> dict:
        account = self.accounts.get(user_id)
        stored = Decimal(account.balance)
        replayed = self.replay_balance(user_id)
        return {
            "user_id": user_id,
            "stored_balance": stored,
            "replayed_balance": replayed,
            "is_consistent": stored == replayed,
        }

    def check_integrity(self) -> dict:
        """
        Check every account, and that each completed transfer has
        exactly one transfer_created activity record.
        """
        user_ids = self.db.execute(
            select(Account.user_id).order_by(Account.user_id)
        ).scalars().all()

        mismatched = []
        for user_id in user_ids:
            result = self.check_account(user_id)
            if not result["is_consistent"]:
                mismatched.append(result)

        completed_transfers = self.ledger.count(TransferStatus.COMPLETED)
        transfer_records = self.activity.count(ActivityAction.TRANSFER_CREATED)

        is_consistent = (
            not mismatched and completed_transfers == transfer_records
        )
        if not is_consistent:
            logger.error(
                "Ledger drift: %d mismatched accounts, "
                "%d completed transfers vs %d transfer records",
                len(mismatched), completed_transfers, transfer_records,
            )

        return {
            "is_consistent": is_consistent,
            "accounts_checked": len(user_ids),
            "mismatched_accounts": mismatched,
            "completed_transfers": completed_transfers,
            "transfer_activity_records": transfer_records,
        }
