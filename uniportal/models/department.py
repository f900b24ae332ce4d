# uniportal/models/department.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String, ForeignKey
from typing import Optional


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    # Primary Key must be ONLY inside sa_column
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True)
    )

    # Dean scope is resolved through this column
    school_id: int = Field(
        sa_column=Column(Integer, ForeignKey("schools.id"), nullable=False)
    )
