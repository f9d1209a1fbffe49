"""
Transfer ledger: append-only record of value movements.

Like the activity log, record() must run inside the atomic unit
that applies the two balance changes it describes.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from admin_ledger.models.enums import TransferStatus
from admin_ledger.models.transfer import TransferRecord


def _as_utc(value: datetime) -> datetime:
    # Columns hold naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TransferLedger:

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        from_user_id: str,
        to_user_id: str,
        amount: Decimal,
        currency: str,
        description: str | None,
        status: TransferStatus,
        idempotency_key: str | None = None,
    ) -> TransferRecord:
        transfer = TransferRecord(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            amount=amount,
            currency=currency,
            description=description,
            status=status,
            idempotency_key=idempotency_key,
        )
        self.db.add(transfer)
        self.db.flush()
        return transfer

    def find_by_idempotency_key(self, key: str) -> TransferRecord | None:
        """Return the transfer already made under this key, if any."""
        return self.db.execute(
            select(TransferRecord).where(TransferRecord.idempotency_key == key)
        ).scalar_one_or_none()

    def list_transfers(
        self,
        limit: int,
        offset: int = 0,
        user_id: str | None = None,
        status: TransferStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> tuple[list[TransferRecord], int]:
        """
        Return one page of transfers, newest first, and the total count.

        user_id matches either side of the transfer. The date range
        is inclusive of created_from and exclusive of created_to.
        """
        conditions = []
        if user_id is not None:
            conditions.append(or_(
                TransferRecord.from_user_id == user_id,
                TransferRecord.to_user_id == user_id,
            ))
        if status is not None:
            conditions.append(TransferRecord.status == status)
        if created_from is not None:
            conditions.append(TransferRecord.created_at >= _as_utc(created_from))
        if created_to is not None:
            conditions.append(TransferRecord.created_at < _as_utc(created_to))

        transfers = self.db.execute(
            select(TransferRecord)
            .where(*conditions)
            .order_by(TransferRecord.created_at.desc(), TransferRecord.id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        total = self.db.execute(
            select(func.count()).select_from(TransferRecord).where(*conditions)
        ).scalar_one()
        return list(transfers), total

    def count(self, status: TransferStatus | None = None) -> int:
        query = select(func.count()).select_from(TransferRecord)
        if status is not None:
            query = query.where(TransferRecord.status == status)
        return self.db.execute(query).scalar_one()
