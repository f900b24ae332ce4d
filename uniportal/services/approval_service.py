# uniportal/services/approval_service.py

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from uniportal.core.exceptions import (
    AuditWriteFailed,
    BatchNotFound,
    InvalidAction,
    InvalidStageTransition,
    PermissionDenied,
)
from uniportal.core.principal import StaffScope
from uniportal.models.enums import ApprovalDecision, BatchStatus, enum_value
from uniportal.models.user import UserRole, parse_role
from uniportal.services.interfaces import (
    ApprovalActionRecord,
    AuditSink,
    BatchFilter,
    BatchRecord,
    BatchStore,
    CourseResultRecord,
    CourseSummary,
    StaffScopeStore,
)

SCOPE_DEPARTMENT = "department"
SCOPE_SCHOOL = "school"


# ===================================================================
# STAGES
# ===================================================================
@dataclass(frozen=True)
class Stage:
    role: UserRole
    can_see_from: Tuple[BatchStatus, ...]
    approve_to: BatchStatus
    reject_to: BatchStatus
    scope: Optional[str] = None
    override: bool = False

    def target(self, decision: ApprovalDecision) -> BatchStatus:
        return self.approve_to if decision == ApprovalDecision.Approve else self.reject_to


APPROVAL_CHAIN: Tuple[Stage, ...] = (
    Stage(
        UserRole.HOD,
        (BatchStatus.Uploaded, BatchStatus.HodRejected),
        BatchStatus.HodApproved,
        BatchStatus.HodRejected,
        scope=SCOPE_DEPARTMENT,
    ),
    Stage(
        UserRole.Dean,
        (BatchStatus.HodApproved, BatchStatus.DeanRejected),
        BatchStatus.DeanApproved,
        BatchStatus.DeanRejected,
        scope=SCOPE_SCHOOL,
    ),
    Stage(
        UserRole.Bursary,
        (BatchStatus.DeanApproved, BatchStatus.BusinessRejected),
        BatchStatus.BusinessApproved,
        BatchStatus.BusinessRejected,
    ),
    Stage(
        UserRole.Registry,
        (BatchStatus.BusinessApproved, BatchStatus.RegistryRejected),
        BatchStatus.Final,
        BatchStatus.RegistryRejected,
    ),
)

# Everything any stage of the chain can act on, in chain order
OVERRIDE_VISIBLE: Tuple[BatchStatus, ...] = tuple(
    dict.fromkeys(status for stage in APPROVAL_CHAIN for status in stage.can_see_from)
)

OVERRIDE_STAGES: Tuple[Stage, ...] = tuple(
    Stage(role, OVERRIDE_VISIBLE, BatchStatus.Final, BatchStatus.RegistryRejected, override=True)
    for role in (UserRole.Admin, UserRole.ICT)
)

STAGES: Dict[UserRole, Stage] = {stage.role: stage for stage in APPROVAL_CHAIN + OVERRIDE_STAGES}


def stage_for_role(role) -> Optional[Stage]:
    return STAGES.get(parse_role(role))


# ===================================================================
# INPUT PARSING
# ===================================================================
def parse_decision(action) -> ApprovalDecision:
    text = str(action or "").strip().upper()
    try:
        return ApprovalDecision(text)
    except ValueError:
        raise InvalidAction("Invalid action: expected 'approve' or 'reject'")


def parse_filter(value) -> Optional[str]:
    """Blank and 'ALL' mean no filter."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "ALL":
        return None
    return text


def parse_status_filter(value) -> Tuple[BatchStatus, ...]:
    text = parse_filter(value)
    if text is None:
        return ()
    statuses = []
    for part in text.split(","):
        part = part.strip().upper()
        if not part:
            continue
        try:
            statuses.append(BatchStatus(part))
        except ValueError:
            raise InvalidAction(f"Invalid status filter: {part}")
    return tuple(statuses)


@dataclass(frozen=True)
class BatchQuery:
    """Caller-supplied listing filters (all optional)."""

    session_id: Optional[int] = None
    semester: Optional[str] = None
    level: Optional[str] = None
    course_id: Optional[int] = None
    statuses: Tuple[BatchStatus, ...] = ()


@dataclass(frozen=True)
class TransitionOutcome:
    batch_id: int
    action: ApprovalDecision
    from_status: str
    new_status: BatchStatus
    # Set when the status change went through but the audit append did not
    audit_error: Optional[AuditWriteFailed] = None


@dataclass(frozen=True)
class BatchPreview:
    batch: BatchRecord
    history: List[ApprovalActionRecord]
    # Uploaded score rows, capped by the store
    results: List[CourseResultRecord]


# ===================================================================
# WORKFLOW
# ===================================================================
class ApprovalWorkflow:
    def __init__(self, batches: BatchStore, scopes: StaffScopeStore, audit: AuditSink):
        self.batches = batches
        self.scopes = scopes
        self.audit = audit

    # ---------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------
    @staticmethod
    def _require_stage(acting_role) -> Stage:
        stage = stage_for_role(acting_role)
        if stage is None:
            raise PermissionDenied(
                f"Role '{str(acting_role or '').strip().lower() or 'unknown'}' has no results approval stage"
            )
        return stage

    async def _scope_for(self, stage: Stage, acting_staff_id) -> StaffScope:
        if stage.scope is None:
            return StaffScope()

        scope = await self.scopes.get_scope(str(acting_staff_id))
        if stage.scope == SCOPE_DEPARTMENT and scope.department_id is None:
            raise PermissionDenied("You are not assigned to a department")
        if stage.scope == SCOPE_SCHOOL and scope.school_id is None:
            raise PermissionDenied("You are not assigned to a school")
        return scope

    @staticmethod
    def _check_scope(stage: Stage, scope: StaffScope, batch: BatchRecord) -> None:
        if stage.scope == SCOPE_DEPARTMENT and scope.department_id != batch.course_department_id:
            raise PermissionDenied("This batch belongs to a course outside your department")
        if stage.scope == SCOPE_SCHOOL and scope.school_id != batch.course_school_id:
            raise PermissionDenied("This batch belongs to a course outside your school")

    @staticmethod
    def _filter_for(stage: Stage, scope: StaffScope, query: BatchQuery) -> BatchFilter:
        # An explicit status filter replaces the default visibility
        statuses = query.statuses or stage.can_see_from

        return BatchFilter(
            statuses=tuple(enum_value(s) for s in statuses),
            session_id=query.session_id,
            semester=query.semester,
            level=query.level,
            course_id=query.course_id,
            department_id=scope.department_id if stage.scope == SCOPE_DEPARTMENT else None,
            school_id=scope.school_id if stage.scope == SCOPE_SCHOOL else None,
        )

    # ---------------------------------------------------------------
    # Transition
    # ---------------------------------------------------------------
    async def take_action(
        self,
        batch_id: int,
        acting_role,
        acting_staff_id,
        action,
        remark: Optional[str] = None,
    ) -> TransitionOutcome:
        decision = parse_decision(action)
        stage = self._require_stage(acting_role)

        batch = await self.batches.get_batch(batch_id)
        if batch is None:
            raise BatchNotFound(batch_id)

        scope = await self._scope_for(stage, acting_staff_id)
        self._check_scope(stage, scope, batch)

        current = batch.status
        # Override stages see every pending status, never FINAL
        if current not in {s.value for s in stage.can_see_from}:
            raise InvalidStageTransition(current)

        new_status = stage.target(decision)
        remark = (remark or "").strip() or None

        applied = await self.batches.update_status(batch.id, new_status.value, current, remark)
        if not applied:
            # Someone moved the batch after we read it
            latest = await self.batches.get_batch(batch.id)
            if latest is None:
                raise BatchNotFound(batch_id)
            raise InvalidStageTransition(
                latest.status,
                f"Batch changed to {latest.status} while you were reviewing it. Reload and try again.",
            )

        logger.info(
            f"Batch {batch.id}: {current} -> {new_status.value} by {stage.role.value} {acting_staff_id}"
        )

        audit_error = None
        try:
            await self.audit.record(
                ApprovalActionRecord(
                    batch_id=batch.id,
                    actor_id=str(acting_staff_id) if acting_staff_id else None,
                    actor_role=stage.role.value,
                    action=decision.value,
                    from_status=current,
                    to_status=new_status.value,
                    remark=remark,
                )
            )
        except Exception as e:
            audit_error = AuditWriteFailed(batch.id, e)
            logger.error(str(audit_error))

        return TransitionOutcome(
            batch_id=batch.id,
            action=decision,
            from_status=current,
            new_status=new_status,
            audit_error=audit_error,
        )

    # ---------------------------------------------------------------
    # Listings
    # ---------------------------------------------------------------
    async def list_batches(
        self,
        acting_role,
        acting_staff_id,
        query: BatchQuery = BatchQuery(),
    ) -> List[BatchRecord]:
        stage = self._require_stage(acting_role)
        scope = await self._scope_for(stage, acting_staff_id)
        return await self.batches.list_batches(self._filter_for(stage, scope, query))

    async def list_courses(
        self,
        acting_role,
        acting_staff_id,
        query: BatchQuery = BatchQuery(),
    ) -> List[CourseSummary]:
        """Courses that currently have batches in this actor's queue."""
        stage = self._require_stage(acting_role)
        scope = await self._scope_for(stage, acting_staff_id)
        return await self.batches.list_courses(self._filter_for(stage, scope, query))

    async def batch_detail(
        self,
        batch_id: int,
        acting_role,
        acting_staff_id,
    ) -> BatchPreview:
        """Batch preview before acting: scope-checked, not stage-checked."""
        stage = self._require_stage(acting_role)

        batch = await self.batches.get_batch(batch_id)
        if batch is None:
            raise BatchNotFound(batch_id)

        scope = await self._scope_for(stage, acting_staff_id)
        self._check_scope(stage, scope, batch)

        try:
            history = await self.audit.history(batch.id)
        except Exception as e:
            logger.warning(f"Could not load approval history for batch {batch.id}: {e}")
            history = []

        results = await self.batches.list_results(batch.id)
        return BatchPreview(batch=batch, history=history, results=results)
