"""
Transfer model.

Records a movement of value from one account to another. The row
is inserted in the same atomic unit as the two balance changes it
describes, so a transfer record always has its balance effects
and vice versa.

Idempotency is enforced via the idempotency_key unique constraint.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, CheckConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from admin_ledger.models.base import Base, utcnow
from admin_ledger.models.types import Money
from admin_ledger.models.enums import TransferStatus
from admin_ledger.models.profile import enum_values


class TransferRecord(Base):
    __tablename__ = "transfers"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
        CheckConstraint(
            "from_user_id <> to_user_id", name="ck_transfers_distinct_parties"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(100), unique=True, nullable=True, index=True
    )
    from_user_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True
    )
    to_user_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Money(), nullable=False
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    status: Mapped[TransferStatus] = mapped_column(
        SAEnum(
            TransferStatus,
            name="transfer_status_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=TransferStatus.COMPLETED,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<TransferRecord {self.from_user_id} -> {self.to_user_id} "
            f"{self.amount} {self.currency} ({self.status.value})>"
        )
