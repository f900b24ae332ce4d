# uniportal/models/academic.py

from sqlmodel import SQLModel, Field
from typing import Optional


# ------------------------------------------------------------
# COURSE (owned by a department; department -> school gives the
# organizational scope of every result batch uploaded for it)
# ------------------------------------------------------------
class Course(SQLModel, table=True):
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True)
    title: str

    department_id: int = Field(foreign_key="departments.id")
