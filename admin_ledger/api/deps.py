"""
Request dependencies shared by the admin routers.

The admin capability check lives here, in front of the engine,
not inside it. The resolved admin identity is handed to the
services explicitly on every call.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from admin_ledger.config import get_settings
from admin_ledger.models.base import get_db
from admin_ledger.exceptions import NotFound
from admin_ledger.services.user_directory import UserDirectory


@dataclass(frozen=True)
class AdminContext:
    """Who is acting, as established by the capability check."""
    admin_id: str
    email: str


def require_admin(
    x_admin_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> AdminContext:
    """
    Resolve the caller and make sure they are an active admin.

    401 when the caller is missing or unknown, 403 when they are
    known but not allowed to administer balances.
    """
    if not x_admin_id:
        raise HTTPException(status_code=401, detail="Missing X-Admin-Id header")

    try:
        profile = UserDirectory(db).get_user(x_admin_id)
    except NotFound:
        raise HTTPException(status_code=401, detail="Unknown caller")

    if not profile.is_active_admin:
        raise HTTPException(status_code=403, detail="Admin role required")

    return AdminContext(admin_id=profile.id, email=profile.email)


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int


def pagination(
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> Pagination:
    """Page size defaults from settings and is capped at MAX_PAGE_SIZE."""
    settings = get_settings()
    size = limit or settings.DEFAULT_PAGE_SIZE
    return Pagination(limit=min(size, settings.MAX_PAGE_SIZE), offset=offset)
