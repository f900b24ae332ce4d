# uniportal/core/principal.py

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional

from uniportal.models.enums import normalize_status
from uniportal.models.user import User, normalize_role


@dataclass(frozen=True)
class StaffScope:
    """Organizational scope of a staff member."""

    school_id: Optional[int] = None
    department_id: Optional[int] = None


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor of one request.

    Immutable: a refresh from the user store produces a new Principal.
    `role` and `status` keep the raw text as stored; the policies parse
    them at their own boundary.
    """

    id: str
    role: str
    status: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)
    department_id: Optional[int] = None
    school_id: Optional[int] = None
    leave_until: Optional[datetime] = None

    @property
    def role_key(self) -> str:
        return normalize_role(self.role)

    @property
    def status_key(self) -> str:
        return normalize_status(self.status)

    @property
    def all_roles(self) -> FrozenSet[str]:
        return frozenset({self.role_key} | {normalize_role(r) for r in self.roles})

    def with_updates(self, **changes) -> "Principal":
        return replace(self, **changes)

    # --------------------------------------------------------
    # SESSION (DE)SERIALIZATION
    # --------------------------------------------------------
    def to_session(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "status": self.status,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "roles": sorted(self.roles),
            "department_id": self.department_id,
            "school_id": self.school_id,
            "leave_until": self.leave_until.isoformat() if self.leave_until else None,
        }

    @classmethod
    def from_session(cls, data: Optional[Dict[str, Any]]) -> Optional["Principal"]:
        if not data or not data.get("id"):
            return None

        leave_until = data.get("leave_until")
        if isinstance(leave_until, str):
            try:
                leave_until = datetime.fromisoformat(leave_until)
            except ValueError:
                leave_until = None

        return cls(
            id=str(data["id"]),
            role=str(data.get("role") or ""),
            status=data.get("status"),
            username=data.get("username"),
            email=data.get("email"),
            name=data.get("name"),
            roles=frozenset(data.get("roles") or ()),
            department_id=data.get("department_id"),
            school_id=data.get("school_id"),
            leave_until=leave_until,
        )

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=str(user.id),
            role=user.role,
            status=user.status,
            username=user.username,
            email=user.email,
            name=user.name,
            roles=frozenset(user.extra_roles or ()),
            department_id=user.department_id,
            school_id=user.school_id,
            leave_until=user.leave_until,
        )
