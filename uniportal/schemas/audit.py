from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ApprovalActionRead(BaseModel):
    batch_id: int
    actor_id: Optional[str] = None
    actor_role: Optional[str] = None
    action: str
    from_status: str
    to_status: str
    remark: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
