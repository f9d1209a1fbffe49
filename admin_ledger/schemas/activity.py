"""
Pydantic schemas for the activity log.

Activity records are read-only from the API's point of view:
they are written by the ledger services, never by clients.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from admin_ledger.models.enums import ActivityAction


class ActivityRecordResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    admin_id: str
    action: ActivityAction
    target_user_id: str | None
    details: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
