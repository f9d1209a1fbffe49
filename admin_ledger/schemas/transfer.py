"""
Pydantic schemas for transfer operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from admin_ledger.models.enums import TransferStatus


class TransferRequest(BaseModel):
    from_user_id: str = Field(min_length=1, max_length=36)
    to_user_id: str = Field(min_length=1, max_length=36)
    amount: Decimal
    description: str | None = Field(default=None, max_length=255)
    idempotency_key: str | None = Field(
        default=None, min_length=1, max_length=100
    )


class TransferResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    idempotency_key: str | None
    from_user_id: str
    to_user_id: str
    amount: Decimal
    currency: str
    description: str | None
    status: TransferStatus
    created_at: datetime

    model_config = {"from_attributes": True}
