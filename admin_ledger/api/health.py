"""
Health check endpoint.

Unauthenticated. Reports whether the process is up and whether
the ledger database answers.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admin_ledger.config import get_settings
from admin_ledger.models.base import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Liveness plus database connectivity.

    Returns 503 when the database can't be reached, so a load
    balancer stops routing mutations to this instance.
    """
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database", exc_info=True)
        db_status = "unhealthy"

    body = {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "admin-ledger",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
    }
    return JSONResponse(body, status_code=200 if db_status == "healthy" else 503)
