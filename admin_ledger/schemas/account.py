"""
Pydantic schemas for account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


# --- Request Schemas ---

class SetBalanceRequest(BaseModel):
    """Administrative balance override."""
    new_balance: Decimal


class SetFrozenRequest(BaseModel):
    frozen: bool


# --- Response Schemas ---

class AccountResponse(BaseModel):
    user_id: str
    balance: Decimal
    currency: str
    is_frozen: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountCheckResponse(BaseModel):
    """Stored balance against the balance rebuilt from history."""
    user_id: str
    stored_balance: Decimal
    replayed_balance: Decimal
    is_consistent: bool


class ReconciliationResponse(BaseModel):
    is_consistent: bool
    accounts_checked: int
    mismatched_accounts: list[AccountCheckResponse]
    completed_transfers: int
    transfer_activity_records: int
