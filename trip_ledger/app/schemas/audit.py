"""
Audit trail schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    """Schema for one recorded ledger mutation."""
    id: int
    actor_id: Optional[int]
    actor_username: Optional[str]
    action: str
    target_id: Optional[str]
    meta_data: Optional[dict]
    timestamp: datetime

    class Config:
        from_attributes = True


class AuditTrailResponse(BaseModel):
    """Mutations recorded against one transaction, most recent first."""
    unified_id: str
    logs: List[AuditLogResponse]
    total: int
