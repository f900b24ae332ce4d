# uniportal/services/interfaces.py
#
# Collaborators consumed by the session guard and the approval workflow.
# The SQL implementations live next to this module; tests plug in
# in-memory versions.

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from uniportal.core.principal import Principal, StaffScope

# Result rows shown in an approver's batch preview
RESULT_PREVIEW_LIMIT = 5000


# ------------------------------------------------------------
# RECORDS
# ------------------------------------------------------------
@dataclass(frozen=True)
class BatchRecord:
    id: int
    course_id: int
    status: str
    course_department_id: Optional[int] = None
    course_school_id: Optional[int] = None
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


@dataclass(frozen=True)
class BatchFilter:
    statuses: Sequence[str] = ()
    session_id: Optional[int] = None
    semester: Optional[str] = None
    level: Optional[str] = None
    course_id: Optional[int] = None
    department_id: Optional[int] = None
    school_id: Optional[int] = None
    limit: int = 500


@dataclass(frozen=True)
class CourseSummary:
    id: int
    code: str
    title: str


@dataclass(frozen=True)
class CourseResultRecord:
    id: int
    result_batch_id: int
    status: str
    student_id: Optional[str] = None
    matric_no: Optional[str] = None
    reg_type: Optional[str] = None
    ca1: Optional[float] = None
    ca2: Optional[float] = None
    ca3: Optional[float] = None
    exam: Optional[float] = None
    total: Optional[float] = None
    grade: Optional[str] = None
    points: Optional[float] = None


@dataclass(frozen=True)
class ApprovalActionRecord:
    batch_id: int
    actor_id: Optional[str]
    actor_role: str
    action: str
    from_status: str
    to_status: str
    remark: Optional[str] = None
    created_at: Optional[datetime] = None


# ------------------------------------------------------------
# STORES
# ------------------------------------------------------------
class UserStore:
    """
    Principal lookups used to refresh a session.
    Each lookup is optional: a store that cannot search by a key keeps
    the default, which answers None, and the guard moves on.
    """

    async def find_by_id(self, user_id: str) -> Optional[Principal]:
        return None

    async def find_by_username(self, username: str) -> Optional[Principal]:
        return None

    async def find_by_email(self, email: str) -> Optional[Principal]:
        return None


class BatchStore:
    async def get_batch(self, batch_id: int) -> Optional[BatchRecord]:
        raise NotImplementedError

    async def list_batches(self, filters: BatchFilter) -> List[BatchRecord]:
        raise NotImplementedError

    async def list_courses(self, filters: BatchFilter) -> List[CourseSummary]:
        raise NotImplementedError

    async def list_results(self, batch_id: int, limit: int = RESULT_PREVIEW_LIMIT) -> List[CourseResultRecord]:
        raise NotImplementedError

    async def update_status(
        self,
        batch_id: int,
        new_status: str,
        expected_status: str,
        remark: Optional[str] = None,
    ) -> bool:
        """
        Moves the batch and its result rows to new_status together.
        Returns False when the batch no longer holds expected_status.
        """
        raise NotImplementedError


class StaffScopeStore:
    async def get_scope(self, staff_id: str) -> StaffScope:
        raise NotImplementedError


class AuditSink:
    async def record(self, entry: ApprovalActionRecord) -> None:
        raise NotImplementedError

    async def history(self, batch_id: int) -> List[ApprovalActionRecord]:
        return []
