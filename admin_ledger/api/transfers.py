"""
Transfer API endpoints.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from admin_ledger.api.deps import AdminContext, Pagination, pagination, require_admin
from admin_ledger.models.base import get_db
from admin_ledger.models.enums import TransferStatus
from admin_ledger.services.transfer_ledger import TransferLedger
from admin_ledger.services.transfer_service import TransferService
from admin_ledger.schemas.common import ErrorResponse, Page
from admin_ledger.schemas.transfer import TransferRequest, TransferResponse

router = APIRouter(prefix="/admin/transfers", tags=["Transfers"])


@router.post(
    "",
    response_model=TransferResponse,
    status_code=201,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 409, 422, 503)},
)
def create_transfer(
    request: TransferRequest,
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Move funds between two accounts.

    Retrying with the same idempotency_key returns the original
    transfer instead of moving the funds twice.
    """
    service = TransferService(db)
    return service.transfer(
        admin.admin_id,
        request.from_user_id,
        request.to_user_id,
        request.amount,
        description=request.description,
        idempotency_key=request.idempotency_key,
    )


@router.get("", response_model=Page[TransferResponse])
def list_transfers(
    user_id: str | None = None,
    status: TransferStatus | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    page: Pagination = Depends(pagination),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List transfers, newest first, optionally filtered."""
    transfers, total = TransferLedger(db).list_transfers(
        page.limit,
        page.offset,
        user_id=user_id,
        status=status,
        created_from=created_from,
        created_to=created_to,
    )
    return Page[TransferResponse](
        items=[TransferResponse.model_validate(t) for t in transfers],
        total=total,
        limit=page.limit,
        offset=page.offset,
    )
