"""
Account store: the balance row of every user.

The store reads and writes account rows through the caller's
session. It flushes but never commits: the atomic unit around it
decides whether the change becomes durable. Mutations are expected
to run while the caller holds the account's lock (see atomic()).
"""

from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from admin_ledger.config import get_settings
from admin_ledger.exceptions import InvalidArgument, NotFound, InsufficientFunds
from admin_ledger.models.account import Account
from admin_ledger.models.base import utcnow
from admin_ledger.services.user_directory import UserDirectory
from admin_ledger.money import MAX_MONEY, to_money


class AccountStore:
    """
    Reads and writes the account rows.

    The store takes the caller's session and never commits. The
    caller, normally an atomic() block, owns the transaction
    boundary and decides whether a change becomes durable.
    """

    def __init__(self, db: Session):
        self.db = db

    def open(self, user_id: str, currency: str | None = None) -> Account:
        """
        Create the zero-balance account for a newly provisioned user.

        Raises NotFound if the user isn't in the directory and
        InvalidArgument if the user already has an account.
        """
        if not UserDirectory(self.db).exists(user_id):
            raise NotFound(f"User {user_id} not found")

        if self.db.get(Account, user_id):
            raise InvalidArgument(f"User {user_id} already has an account")

        account = Account(
            user_id=user_id,
            balance=Decimal("0.00"),
            currency=(currency or get_settings().DEFAULT_CURRENCY).upper(),
            is_frozen=False,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def get(self, user_id: str) -> Account:
        """Get an account by user id."""
        account = self.db.get(Account, user_id)
        if not account:
            raise NotFound(f"Account for user {user_id} not found")
        return account

    def get_for_update(self, user_id: str) -> Account:
        """
        Read an account row for modification.

        Locks the row on databases that support FOR UPDATE and
        refreshes any copy already in the session, so checks made
        on the result see the state this unit will write over.
        """
        account = self.db.execute(
            select(Account)
            .where(Account.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if not account:
            raise NotFound(f"Account for user {user_id} not found")
        return account

    def set_balance(self, user_id: str, new_balance: Decimal) -> Account:
        """
        Overwrite the balance.

        An administrative override is ground truth, so there is no
        funds check here. Callers validate the value itself.
        """
        account = self.get_for_update(user_id)
        account.balance = to_money(new_balance, "new_balance")
        account.updated_at = utcnow()
        self.db.flush()
        return account

    def set_frozen(self, user_id: str, frozen: bool) -> Account:
        account = self.get_for_update(user_id)
        account.is_frozen = bool(frozen)
        account.updated_at = utcnow()
        self.db.flush()
        return account

    def adjust(self, user_id: str, delta: Decimal) -> Account:
        """
        Add delta (which may be negative) to the balance.

        Raises InsufficientFunds if the result would go below zero and
        InvalidArgument if it would exceed the largest storable balance.
        """
        delta = to_money(delta, "delta")
        account = self.get_for_update(user_id)

        new_balance = account.balance + delta
        if new_balance < 0:
            raise InsufficientFunds(user_id, account.balance, -delta)
        if new_balance >= MAX_MONEY:
            raise InvalidArgument(
                f"Balance of account {user_id} would exceed the maximum"
            )

        account.balance = new_balance
        account.updated_at = utcnow()
        self.db.flush()
        return account

    def list_accounts(
        self,
        limit: int,
        offset: int = 0,
        frozen: bool | None = None,
    ) -> tuple[list[Account], int]:
        """Return one page of accounts, newest first, and the total count."""
        query = select(Account)
        count_query = select(func.count()).select_from(Account)
        if frozen is not None:
            query = query.where(Account.is_frozen == frozen)
            count_query = count_query.where(Account.is_frozen == frozen)

        accounts = self.db.execute(
            query
            .order_by(Account.created_at.desc(), Account.user_id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        total = self.db.execute(count_query).scalar_one()
        return list(accounts), total
