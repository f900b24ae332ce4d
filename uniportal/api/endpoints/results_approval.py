# uniportal/api/endpoints/results_approval.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from uniportal.api.deps import get_approval_workflow
from uniportal.core.exceptions import InvalidAction, PermissionDenied, RoleForbidden
from uniportal.core.principal import Principal
from uniportal.core.session import block_if_read_only, require_principal
from uniportal.core.templates import render
from uniportal.models.user import normalize_role
from uniportal.schemas.approval import (
    BatchRead,
    CourseRead,
    CourseResultRead,
    StageActionRequest,
    StageActionResult,
)
from uniportal.schemas.audit import ApprovalActionRead
from uniportal.services.approval_service import (
    ApprovalWorkflow,
    BatchQuery,
    parse_filter,
    parse_status_filter,
)

router = APIRouter(prefix="/results-approval", tags=["Results Approval"])


# -------------------------------------------------------------------
# HELPERS
# -------------------------------------------------------------------
def acting_role_for(principal: Principal, requested: Optional[str]) -> str:
    """Primary role unless the caller explicitly acts with one of their other roles."""
    if requested is None or not requested.strip():
        return principal.role_key
    role = normalize_role(requested)
    if role not in principal.all_roles:
        raise PermissionDenied(f"You do not hold the role '{role}'")
    return role


def _int_filter(name: str, value: Optional[str]) -> Optional[int]:
    text = parse_filter(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        raise InvalidAction(f"Invalid {name}: {text}")


def batch_query(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    semester: Optional[str] = Query(default=None),
    level: Optional[str] = Query(default=None),
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    status: Optional[str] = Query(default=None),
) -> BatchQuery:
    return BatchQuery(
        session_id=_int_filter("session", session_id),
        semester=parse_filter(semester),
        level=parse_filter(level),
        course_id=_int_filter("course", course_id),
        statuses=parse_status_filter(status),
    )


# -------------------------------------------------------------------
# INBOX PAGE
# -------------------------------------------------------------------
@router.get("")
async def approval_inbox(
    request: Request,
    acting_role: Optional[str] = Query(default=None, alias="actingRole"),
    query: BatchQuery = Depends(batch_query),
    principal: Principal = Depends(require_principal),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    try:
        role = acting_role_for(principal, acting_role)
        batches = await workflow.list_batches(role, principal.id, query)
    except PermissionDenied as e:
        # Browsers get the access-denied page instead of a JSON error
        raise RoleForbidden(e.message)

    return render(
        request, "results_approval.html",
        {
            "title": "Results Approval",
            "page_title": "Results Approval",
            "stage_role": role,
            "batches": batches,
        },
    )


# -------------------------------------------------------------------
# JSON LISTINGS
# -------------------------------------------------------------------
@router.get("/batches")
async def list_batches(
    acting_role: Optional[str] = Query(default=None, alias="actingRole"),
    query: BatchQuery = Depends(batch_query),
    principal: Principal = Depends(require_principal),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    role = acting_role_for(principal, acting_role)
    batches = await workflow.list_batches(role, principal.id, query)
    return {"ok": True, "data": [BatchRead.model_validate(b) for b in batches]}


@router.get("/courses")
async def list_courses(
    acting_role: Optional[str] = Query(default=None, alias="actingRole"),
    query: BatchQuery = Depends(batch_query),
    principal: Principal = Depends(require_principal),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    role = acting_role_for(principal, acting_role)
    courses = await workflow.list_courses(role, principal.id, query)
    return {"ok": True, "data": [CourseRead.model_validate(c) for c in courses]}


@router.get("/batches/{batch_id}")
async def batch_detail(
    batch_id: int,
    acting_role: Optional[str] = Query(default=None, alias="actingRole"),
    principal: Principal = Depends(require_principal),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    role = acting_role_for(principal, acting_role)
    preview = await workflow.batch_detail(batch_id, role, principal.id)
    return {
        "ok": True,
        "data": {
            "batch": BatchRead.model_validate(preview.batch),
            "history": [ApprovalActionRead.model_validate(h) for h in preview.history],
            "results": [CourseResultRead.model_validate(r) for r in preview.results],
            "rowCount": len(preview.results),
        },
    }


# -------------------------------------------------------------------
# APPROVE / REJECT
# -------------------------------------------------------------------
@router.post("/action")
async def take_action(
    payload: StageActionRequest,
    principal: Principal = Depends(block_if_read_only("Results Approval")),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
):
    role = acting_role_for(principal, payload.acting_role)

    outcome = await workflow.take_action(
        batch_id=payload.batch_id,
        acting_role=role,
        acting_staff_id=principal.id,
        action=payload.action,
        remark=payload.remark,
    )

    if outcome.audit_error is not None:
        logger.warning(
            f"Batch {outcome.batch_id} moved to {outcome.new_status.value} without an audit record"
        )

    result = StageActionResult(
        batch_id=outcome.batch_id,
        action=outcome.action.value,
        from_status=outcome.from_status,
        status=outcome.new_status.value,
        audit_recorded=outcome.audit_error is None,
    )
    return {"ok": True, "message": f"Batch {result.status}", "data": result}
