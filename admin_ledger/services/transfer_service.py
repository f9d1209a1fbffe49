"""
Transfer processing service: moving funds between two accounts.

Each transfer:
1. Returns the earlier result if its idempotency key was used before
   (checked again once the locks are held)
2. Rejects malformed input (same account, non-positive amount)
3. Locks both accounts in ascending user id order
4. Re-reads both rows under the lock and checks existence, frozen
   state, currency and available funds
5. Debits the source, credits the destination, writes the transfer
   record and the activity record
6. Commits all of it as one unit

Steps 3-6 are a single atomic unit. The checks in step 4 run on the
same locked rows that step 5 writes, so a concurrent freeze or
withdrawal can't slip in between check and write.
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admin_ledger.exceptions import (
    InvalidArgument,
    AccountFrozen,
    InsufficientFunds,
    StorageError,
)
from admin_ledger.models.enums import ActivityAction, TransferStatus
from admin_ledger.models.transfer import TransferRecord
from admin_ledger.money import to_money
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.services.atomic import atomic
from admin_ledger.services.locking import AccountLockRegistry
from admin_ledger.services.transfer_ledger import TransferLedger

logger = logging.getLogger(__name__)


class TransferService:
    """Moves funds between two accounts as one audited atomic unit."""

    def __init__(self, db: Session, locks: AccountLockRegistry | None = None):
        self.db = db
        self.locks = locks
        self.accounts = AccountStore(db)
        self.activity = ActivityLog(db)
        self.ledger = TransferLedger(db)

    def transfer(
        self,
        admin_id: str,
        from_user_id: str,
        to_user_id: str,
        amount,
        description: str | None = None,
        idempotency_key: str | None = None,
    ) -> TransferRecord:
        """
        Move amount from one account to another.

        Returns the completed TransferRecord. Raises InvalidArgument,
        NotFound, AccountFrozen, InsufficientFunds, Busy or
        StorageError; on any of them nothing has been written.
        """
        if idempotency_key:
            existing = self.ledger.find_by_idempotency_key(idempotency_key)
            if existing:
                logger.info(
                    "Transfer with key %s already processed as %s",
                    idempotency_key, existing.id,
                )
                return existing

        if from_user_id == to_user_id:
            raise InvalidArgument("Cannot transfer to the same account")

        amount = to_money(amount, "amount")
        if amount <= 0:
            raise InvalidArgument("amount must be positive")

        try:
            transfer = self._apply(
                admin_id, from_user_id, to_user_id, amount,
                description, idempotency_key,
            )
        except StorageError as e:
            # The same key used concurrently on a different pair of
            # accounts is only caught by the unique index
            if not (idempotency_key and isinstance(e.__cause__, IntegrityError)):
                raise
            existing = self.ledger.find_by_idempotency_key(idempotency_key)
            if not existing:
                raise
            logger.info(
                "Transfer with key %s was committed concurrently as %s",
                idempotency_key, existing.id,
            )
            return existing
        return transfer

    def _apply(
        self,
        admin_id: str,
        from_user_id: str,
        to_user_id: str,
        amount: Decimal,
        description: str | None,
        idempotency_key: str | None,
    ) -> TransferRecord:
        """The locked, atomic part of a transfer."""
        with atomic(
            self.db, [from_user_id, to_user_id], "transfer", self.locks
        ):
            # A concurrent retry of the same request may have won the lock
            if idempotency_key:
                existing = self.ledger.find_by_idempotency_key(idempotency_key)
                if existing:
                    return existing

            # Re-checked under the locks, against the rows we will write
            source = self.accounts.get_for_update(from_user_id)
            destination = self.accounts.get_for_update(to_user_id)

            if source.is_frozen:
                raise AccountFrozen(from_user_id)
            if destination.is_frozen:
                raise AccountFrozen(to_user_id)

            if source.currency != destination.currency:
                raise InvalidArgument(
                    f"Currency mismatch: {from_user_id} holds {source.currency}, "
                    f"{to_user_id} holds {destination.currency}"
                )

            if source.balance < amount:
                raise InsufficientFunds(from_user_id, source.balance, amount)

            self.accounts.adjust(from_user_id, -amount)
            self.accounts.adjust(to_user_id, amount)

            transfer = self.ledger.record(
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                amount=amount,
                currency=source.currency,
                description=description,
                status=TransferStatus.COMPLETED,
                idempotency_key=idempotency_key or None,
            )
            self.activity.record(
                admin_id,
                ActivityAction.TRANSFER_CREATED,
                from_user_id,
                {
                    "from_user_id": from_user_id,
                    "to_user_id": to_user_id,
                    "amount": str(amount),
                    "currency": transfer.currency,
                    "transfer_id": transfer.id,
                },
            )

        logger.info(
            "Admin %s transferred %s %s from %s to %s (transfer %s)",
            admin_id, amount, transfer.currency,
            from_user_id, to_user_id, transfer.id,
        )
        return transfer
