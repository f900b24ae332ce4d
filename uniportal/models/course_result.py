# uniportal/models/course_result.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, Float, ForeignKey, String
import uuid
from typing import Optional

from uniportal.models.enums import BatchStatus


# ------------------------------------------------------------
# COURSE RESULT (one uploaded score row of a result batch)
# ------------------------------------------------------------
class CourseResult(SQLModel, table=True):
    __tablename__ = "course_results"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    result_batch_id: int = Field(
        sa_column=Column(Integer, ForeignKey("result_batches.id"), nullable=False, index=True)
    )
    course_id: int = Field(foreign_key="courses.id")

    student_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    matric_no: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    reg_type: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))

    ca1: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    ca2: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    ca3: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    exam: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    total: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    grade: Optional[str] = Field(default=None, sa_column=Column(String(2), nullable=True))
    points: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))

    # Mirrors the owning batch's status; written together with it
    status: str = Field(
        default=BatchStatus.Uploaded.value,
        sa_column=Column(String(32), nullable=False)
    )
