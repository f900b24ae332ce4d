# uniportal/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Integer, String, JSON
from datetime import datetime, timezone
import uuid
from enum import Enum
from typing import Optional, List


class UserRole(str, Enum):
    # Staff family
    Staff = "staff"
    Admin = "admin"
    HOD = "hod"
    Lecturer = "lecturer"
    Dean = "dean"
    ICT = "ict"
    Bursary = "bursary"
    Registry = "registry"
    AdmissionOfficer = "admission officer"
    Auditor = "auditor"
    HealthCenter = "health center"
    Works = "works"
    Library = "library"
    Provost = "provost"
    StudentUnion = "student union"

    # Super roles (menu bypass only; no status policy of their own)
    SuperAdmin = "superadmin"
    Administrator = "administrator"

    # Public users
    Student = "student"
    Applicant = "applicant"

    # Anything the parser does not recognise
    Unknown = "unknown"


STAFF_FAMILY_ROLES = frozenset({
    UserRole.Staff,
    UserRole.Admin,
    UserRole.HOD,
    UserRole.Lecturer,
    UserRole.Dean,
    UserRole.ICT,
    UserRole.Bursary,
    UserRole.Registry,
    UserRole.AdmissionOfficer,
    UserRole.Auditor,
    UserRole.HealthCenter,
    UserRole.Works,
    UserRole.Library,
    UserRole.Provost,
    UserRole.StudentUnion,
})


def normalize_role(role) -> str:
    if isinstance(role, UserRole):
        return role.value
    return str(role or "").strip().lower()


def parse_role(role) -> UserRole:
    """
    The one place raw role text becomes a UserRole.
    Exact (case-insensitive) match only; everything else is UserRole.Unknown,
    and callers keep the raw text next to it.
    """
    key = normalize_role(role)
    if not key or key == UserRole.Unknown.value:
        return UserRole.Unknown
    try:
        return UserRole(key)
    except ValueError:
        return UserRole.Unknown


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    name: str = Field(nullable=False)
    username: Optional[str] = Field(default=None, index=True, unique=True)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: str = Field(nullable=False)

    # Free-form text: legacy rows carry roles such as "bursar" or "h.o.d"
    # that the policies deliberately treat as unknown.
    role: str = Field(sa_column=Column(String(64), nullable=False))

    extra_roles: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    status: Optional[str] = Field(
        default="ACTIVE",
        sa_column=Column(String(32), nullable=True)
    )

    # Only meaningful while status is LEAVE OF ABSENCE
    leave_until: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    department_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("departments.id"), nullable=True)
    )

    school_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("schools.id"), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
