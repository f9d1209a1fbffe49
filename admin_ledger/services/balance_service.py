"""
Balance mutation service: direct balance overrides and freezes.

Each operation is one atomic unit: the account change and the
activity record documenting it are committed together under the
account's lock, or rolled back together. The admin identity comes
from the caller; authorization happens before this service is
called.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from admin_ledger.exceptions import InvalidArgument
from admin_ledger.models.account import Account
from admin_ledger.models.enums import ActivityAction
from admin_ledger.money import to_money
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.services.atomic import atomic
from admin_ledger.services.locking import AccountLockRegistry

logger = logging.getLogger(__name__)


class BalanceMutationService:

    def __init__(self, db: Session, locks: AccountLockRegistry | None = None):
        self.db = db
        self.locks = locks
        self.accounts = AccountStore(db)
        self.activity = ActivityLog(db)

    def set_balance(
        self, admin_id: str, target_user_id: str, new_balance
    ) -> Account:
        """
        Overwrite an account's balance.

        The new value must be a non-negative cent amount. Unlike a
        transfer, an override may move the balance anywhere: it is
        the administrative ground truth.
        """
        new_balance = to_money(new_balance, "new_balance")
        if new_balance < 0:
            raise InvalidArgument("new_balance must not be negative")

        with atomic(self.db, [target_user_id], "set_balance", self.locks):
            account = self.accounts.get_for_update(target_user_id)
            previous_balance = account.balance

            account = self.accounts.set_balance(target_user_id, new_balance)
            self.activity.record(
                admin_id,
                ActivityAction.BALANCE_UPDATE,
                target_user_id,
                {
                    "new_balance": str(new_balance),
                    "previous_balance": str(Decimal(previous_balance)),
                },
            )

        logger.info(
            "Admin %s set balance of %s from %s to %s",
            admin_id, target_user_id, previous_balance, new_balance,
        )
        return account

    def set_frozen(
        self, admin_id: str, target_user_id: str, frozen: bool
    ) -> Account:
        """
        Freeze or unfreeze an account.

        A frozen account can be neither the source nor the destination
        of a transfer. Re-applying the current state is still a logged
        admin action.
        """
        if not isinstance(frozen, bool):
            raise InvalidArgument("frozen must be a boolean")

        with atomic(self.db, [target_user_id], "set_frozen", self.locks):
            account = self.accounts.get_for_update(target_user_id)
            previous_frozen = account.is_frozen

            account = self.accounts.set_frozen(target_user_id, frozen)
            self.activity.record(
                admin_id,
                ActivityAction.ACCOUNT_FROZEN if frozen
                else ActivityAction.ACCOUNT_UNFROZEN,
                target_user_id,
                {"frozen": frozen, "previous_frozen": previous_frozen},
            )

        logger.info(
            "Admin %s %s account %s",
            admin_id, "froze" if frozen else "unfroze", target_user_id,
        )
        return account
