"""
Activity log model.

Records every administrative mutation for compliance and for
rebuilding balances. Auditability is not optional: every balance
override, freeze, unfreeze and transfer must be traceable to the
admin who performed it.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import String, DateTime, JSON, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from admin_ledger.models.base import Base, utcnow
from admin_ledger.models.enums import ActivityAction
from admin_ledger.models.profile import enum_values


class ActivityRecord(Base):
    """
    Immutable record of one administrative mutation.

    Append-only: you never update or delete an activity record.
    The integer id doubles as the replay order for reconciliation.
    """

    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    admin_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True
    )
    action: Mapped[ActivityAction] = mapped_column(
        SAEnum(
            ActivityAction,
            name="activity_action_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    target_user_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, index=True
    )
    # Monetary values inside details are stored as strings
    details: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<ActivityRecord {self.id} {self.action.value} "
            f"by {self.admin_id} on {self.target_user_id}>"
        )
