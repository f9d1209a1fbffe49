"""
Ledger configuration.

Every setting comes from the environment (or a local .env file).
Connection strings and credentials never live in code.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings for the ledger service, read once from the environment."""

    APP_NAME: str = os.getenv("APP_NAME", "Admin Ledger")
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # HTTP listener
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # SQLite for local work. Deployments use PostgreSQL, where account
    # rows are also locked with SELECT ... FOR UPDATE.
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./admin_ledger.db")

    # Accounts opened without an explicit currency get this one
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "USD")
    # Upper bound on waiting for an account lock before giving up with Busy
    LOCK_TIMEOUT_SECONDS: float = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "200"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str | None = os.getenv("LOG_FILE") or None


# Cents
MONEY_QUANTUM = Decimal("0.01")


@lru_cache()
def get_settings() -> Settings:
    """Settings are built on first use and shared afterwards."""
    return Settings()
