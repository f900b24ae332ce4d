# uniportal/models/result_batch.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, Text, DateTime, ForeignKey, String
from datetime import datetime, timezone
import uuid
from typing import Optional

from uniportal.models.enums import BatchStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResultBatch(SQLModel, table=True):
    __tablename__ = "result_batches"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    course_id: int = Field(
        sa_column=Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    )

    session_id: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))
    semester: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))
    level: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))

    # Stored as the BatchStatus value; only ApprovalWorkflow writes it after upload
    status: str = Field(
        default=BatchStatus.Uploaded.value,
        sa_column=Column(String(32), nullable=False, index=True)
    )

    remark: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )

    uploaded_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")

    uploaded_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
