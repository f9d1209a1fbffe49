"""
Activity log: append-only audit trail of admin mutations.

record() only adds rows to the caller's session. It must be called
inside the same atomic unit as the mutation it documents, so that
either both the change and its record are committed or neither is.
"""

from typing import Any

from sqlalchemy import select, func, or_, and_
from sqlalchemy.orm import Session

from admin_ledger.models.activity_record import ActivityRecord
from admin_ledger.models.enums import ActivityAction


class ActivityLog:

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        admin_id: str,
        action: ActivityAction,
        target_user_id: str | None,
        details: dict[str, Any],
    ) -> ActivityRecord:
        """Append one activity record. Never updates existing rows."""
        entry = ActivityRecord(
            admin_id=admin_id,
            action=action,
            target_user_id=target_user_id,
            details=dict(details),
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_records(
        self,
        limit: int,
        offset: int = 0,
        admin_id: str | None = None,
        target_user_id: str | None = None,
        action: ActivityAction | None = None,
    ) -> tuple[list[ActivityRecord], int]:
        """Return one page of records, newest first, and the total count."""
        conditions = []
        if admin_id is not None:
            conditions.append(ActivityRecord.admin_id == admin_id)
        if target_user_id is not None:
            conditions.append(ActivityRecord.target_user_id == target_user_id)
        if action is not None:
            conditions.append(ActivityRecord.action == action)

        records = self.db.execute(
            select(ActivityRecord)
            .where(*conditions)
            .order_by(ActivityRecord.created_at.desc(), ActivityRecord.id.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        total = self.db.execute(
            select(func.count()).select_from(ActivityRecord).where(*conditions)
        ).scalar_one()
        return list(records), total

    def history_for(self, user_id: str) -> list[ActivityRecord]:
        """
        Every record that changed this user's balance or state, oldest first.

        Transfers are recorded against the source account, so incoming
        transfers are matched on the destination stored in details.
        """
        records = self.db.execute(
            select(ActivityRecord)
            .where(
                or_(
                    ActivityRecord.target_user_id == user_id,
                    and_(
                        ActivityRecord.action == ActivityAction.TRANSFER_CREATED,
                        ActivityRecord.details["to_user_id"].as_string() == user_id,
                    ),
                )
            )
            .order_by(ActivityRecord.id)
        ).scalars().all()
        return list(records)

    def count(self, action: ActivityAction | None = None) -> int:
        query = select(func.count()).select_from(ActivityRecord)
        if action is not None:
            query = query.where(ActivityRecord.action == action)
        return self.db.execute(query).scalar_one()
