"""
User directory: read model of the identity provider's users.

The ledger trusts the identity provider for who a user is. It only
asks this directory whether a referenced user exists; the API layer
additionally reads role and status for the admin capability check.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from admin_ledger.exceptions import InvalidArgument, NotFound
from admin_ledger.models.enums import UserRole, UserStatus
from admin_ledger.models.profile import UserProfile


class UserDirectory:

    def __init__(self, db: Session):
        self.db = db

    def create_user(
        self,
        email: str,
        display_name: str,
        role: UserRole = UserRole.CUSTOMER,
        status: UserStatus = UserStatus.ACTIVE,
        user_id: str | None = None,
    ) -> UserProfile:
        """Register a user, as provisioning does when a user signs up."""
        existing = self.db.execute(
            select(UserProfile).where(UserProfile.email == email)
        ).scalar_one_or_none()

        if existing:
            raise InvalidArgument(f"User with email '{email}' already exists")

        user = UserProfile(
            email=email,
            display_name=display_name,
            role=role,
            status=status,
        )
        if user_id is not None:
            user.id = user_id
        self.db.add(user)
        self.db.flush()
        return user

    def get_user(self, user_id: str) -> UserProfile:
        user = self.db.get(UserProfile, user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")
        return user

    def exists(self, user_id: str) -> bool:
        return self.db.get(UserProfile, user_id) is not None
