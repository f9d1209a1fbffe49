"""
Account API endpoints.

Reads go straight to the account store. Overrides and freezes go
through the balance mutation service, which commits its own
atomic unit; the routes never commit.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from admin_ledger.api.deps import AdminContext, Pagination, pagination, require_admin
from admin_ledger.models.base import get_db
from admin_ledger.services.account_store import AccountStore
from admin_ledger.services.balance_service import BalanceMutationService
from admin_ledger.services.reconciliation_service import ReconciliationService
from admin_ledger.schemas.account import (
    AccountResponse,
    SetBalanceRequest,
    SetFrozenRequest,
    ReconciliationResponse,
)
from admin_ledger.schemas.common import ErrorResponse, Page

router = APIRouter(prefix="/admin", tags=["Accounts"])


@router.get("/accounts", response_model=Page[AccountResponse])
def list_accounts(
    frozen: bool | None = None,
    page: Pagination = Depends(pagination),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List accounts, newest first."""
    accounts, total = AccountStore(db).list_accounts(
        page.limit, page.offset, frozen=frozen
    )
    return Page[AccountResponse](
        items=[AccountResponse.model_validate(a) for a in accounts],
        total=total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/accounts/{user_id}", response_model=AccountResponse)
def get_account(
    user_id: str,
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Get one account."""
    return AccountStore(db).get(user_id)


@router.put(
    "/accounts/{user_id}/balance",
    response_model=AccountResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 503)},
)
def set_balance(
    user_id: str,
    request: SetBalanceRequest,
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Override an account's balance.

    Recorded in the activity log as balance_update.
    """
    service = BalanceMutationService(db)
    return service.set_balance(admin.admin_id, user_id, request.new_balance)


@router.put("/accounts/{user_id}/frozen", response_model=AccountResponse)
def set_frozen(
    user_id: str,
    request: SetFrozenRequest,
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Freeze or unfreeze an account."""
    service = BalanceMutationService(db)
    return service.set_frozen(admin.admin_id, user_id, request.frozen)


@router.get("/reconciliation", response_model=ReconciliationResponse)
def reconcile(
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Rebuild every balance from the activity log and compare."""
    return ReconciliationService(db).check_integrity()
