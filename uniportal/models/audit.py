# uniportal/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, Text
from typing import Optional
from uuid import UUID
from datetime import datetime, timezone


class ApprovalAction(SQLModel, table=True):
    """Append-only trail of results-approval transitions."""

    __tablename__ = "approval_actions"

    id: Optional[int] = Field(default=None, primary_key=True)
    batch_id: int = Field(foreign_key="result_batches.id", index=True)

    actor_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    # Role the actor held at the time of the action
    actor_role: Optional[str] = None

    action: str                     # APPROVE | REJECT
    from_status: str
    to_status: str
    remark: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
