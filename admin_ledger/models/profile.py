"""
User profile model.

Local copy of the user directory owned by the identity provider.
The ledger only needs to know that a user exists; the API layer
also reads the role and status for its admin capability check.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admin_ledger.models.base import Base, utcnow
from admin_ledger.models.enums import UserRole, UserStatus


def enum_values(enum_cls) -> list[str]:
    """Persist enum values ("admin") rather than member names ("ADMIN")."""
    return [member.value for member in enum_cls]


class UserProfile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    status: Mapped[UserStatus] = mapped_column(
        SAEnum(
            UserStatus,
            name="user_status_enum",
            create_constraint=True,
            values_callable=enum_values,
        ),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    # Exactly one balance account per user, removed with the user
    account: Mapped["Account | None"] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_active_admin(self) -> bool:
        return self.role == UserRole.ADMIN and self.status == UserStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<UserProfile {self.email} ({self.role.value})>"
