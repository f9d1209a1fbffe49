"""
Engine, sessions and the declarative base for the ledger tables.

Request handlers receive a session from get_db(). Services never
open sessions of their own; they work through the one handed in.
"""

from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from admin_ledger.config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> dict:
    """
    Driver options for an engine on the given URL.

    SQLite connections are shared across request threads, and a
    writer waiting on the database file gives up after the same
    bound the account locks use.
    """
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.LOCK_TIMEOUT_SECONDS,
            },
        }
    # Drop stale pooled connections after a database restart
    return {"pool_pre_ping": True}


# --- Engine ---
engine = create_engine(
    settings.DATABASE_URL,
    **engine_options(settings.DATABASE_URL),
)

# --- Session Factory ---
# Nothing is written until the atomic unit commits, and nothing is
# sent to the database before an explicit flush.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
