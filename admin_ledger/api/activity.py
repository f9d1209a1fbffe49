"""
Activity log API endpoints (read-only).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from admin_ledger.api.deps import AdminContext, Pagination, pagination, require_admin
from admin_ledger.models.base import get_db
from admin_ledger.models.enums import ActivityAction
from admin_ledger.services.activity_log import ActivityLog
from admin_ledger.schemas.activity import ActivityRecordResponse
from admin_ledger.schemas.common import Page

router = APIRouter(prefix="/admin/activity", tags=["Activity"])


@router.get("", response_model=Page[ActivityRecordResponse])
def list_activity(
    admin_id: str | None = None,
    target_user_id: str | None = None,
    action: ActivityAction | None = None,
    page: Pagination = Depends(pagination),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List activity records, newest first."""
    records, total = ActivityLog(db).list_records(
        page.limit,
        page.offset,
        admin_id=admin_id,
        target_user_id=target_user_id,
        action=action,
    )
    return Page[ActivityRecordResponse](
        items=[ActivityRecordResponse.model_validate(r) for r in records],
        total=total,
        limit=page.limit,
        offset=page.offset,
    )
