"""
Balance account model.

One row per user holding the custodial balance. The row is only
ever written by the balance mutation and transfer services, each
inside a single atomic unit together with its audit record.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admin_ledger.models.base import Base, utcnow
from admin_ledger.models.types import Money


class Account(Base):
    __tablename__ = "accounts"

    # The user id is the account identity: exactly one account per user
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Exact cents on every backend, never a float
    balance: Mapped[Decimal] = mapped_column(
        Money(), nullable=False, default=Decimal("0.00")
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    is_frozen: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped["UserProfile"] = relationship(back_populates="account")

    def __repr__(self) -> str:
        state = "frozen" if self.is_frozen else "open"
        return (
            f"<Account {self.user_id} "
            f"{self.balance} {self.currency} ({state})>"
        )
