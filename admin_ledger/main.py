"""
Admin Ledger: FastAPI Application.

This is the entry point for the admin console back end.
All routers and the error-kind to HTTP mapping are registered here.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from admin_ledger.config import get_settings
from admin_ledger.logging import setup_logging
from admin_ledger.exceptions import (
    LedgerError,
    InvalidArgument,
    NotFound,
    AccountFrozen,
    InsufficientFunds,
    Busy,
    StorageError,
)
from admin_ledger.api.health import router as health_router
from admin_ledger.api.accounts import router as accounts_router
from admin_ledger.api.transfers import router as transfers_router
from admin_ledger.api.activity import router as activity_router

settings = get_settings()

setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Balance and transfer ledger for the admin console",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transfers_router)
app.include_router(activity_router)


# Each error kind gets its own status. Busy and storage faults
# carry a fixed message: driver text is never shown to operators.
ERROR_STATUS = {
    InvalidArgument: 400,
    NotFound: 404,
    AccountFrozen: 409,
    InsufficientFunds: 422,
    Busy: 503,
    StorageError: 503,
}

FIXED_MESSAGES = {
    Busy: "The account is busy. Please retry in a moment.",
    StorageError: "The ledger is temporarily unavailable. Please retry.",
}

RETRY_AFTER_SECONDS = "1"


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    error_type = type(exc)
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    detail = next(
        (msg for cls, msg in FIXED_MESSAGES.items() if isinstance(exc, cls)),
        str(exc) if status_code != 500 else "Unexpected ledger error",
    )
    headers = (
        {"Retry-After": RETRY_AFTER_SECONDS}
        if issubclass(error_type, (Busy, StorageError)) else None
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "detail": detail},
        headers=headers,
    )
