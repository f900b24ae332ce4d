from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class StageActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    batch_id: int = Field(alias="batchId", gt=0)
    action: str
    remark: Optional[str] = Field(default=None, max_length=1000)
    # Act with one of the account's additional roles instead of the primary one
    acting_role: Optional[str] = Field(default=None, alias="actingRole")


class StageActionResult(BaseModel):
    batch_id: int
    action: str
    from_status: str
    status: str
    audit_recorded: bool


class BatchRead(BaseModel):
    id: int
    course_id: int
    status: str
    session_id: Optional[int] = None
    semester: Optional[str] = None
    level: Optional[str] = None
    remark: Optional[str] = None
    course_code: Optional[str] = None
    course_title: Optional[str] = None
    department_name: Optional[str] = None
    school_name: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CourseRead(BaseModel):
    id: int
    code: str
    title: str

    class Config:
        from_attributes = True


class CourseResultRead(BaseModel):
    id: int
    status: str
    matric_no: Optional[str] = None
    reg_type: Optional[str] = None
    ca1: Optional[float] = None
    ca2: Optional[float] = None
    ca3: Optional[float] = None
    exam: Optional[float] = None
    total: Optional[float] = None
    grade: Optional[str] = None
    points: Optional[float] = None

    class Config:
        from_attributes = True
