# uniportal/api/endpoints/dashboards.py

from fastapi import APIRouter, Depends, Request

from uniportal.core.config import settings
from uniportal.core.permissions import MenuPolicyConfig, require_menu_permission
from uniportal.core.principal import Principal
from uniportal.core.rbac import require_role
from uniportal.core.role_menus import menu_for_role
from uniportal.core.session import (
    STAFF_LANDING_ROLES,
    block_if_read_only,
    require_module,
    require_principal,
)
from uniportal.core.status_policy import StudentModule
from uniportal.core.templates import render
from uniportal.models.user import STAFF_FAMILY_ROLES, UserRole

STAFF_MENU_POLICY = MenuPolicyConfig(
    base_path=settings.MENU_BASE_PATH,
    allow_if_no_config=settings.MENU_ALLOW_IF_NO_CONFIG,
    super_roles=tuple(settings.MENU_SUPER_ROLES),
)

# Every role redirect_by_role lands on /staff/dashboard, legacy aliases included
STAFF_AREA_ROLES = sorted(
    STAFF_LANDING_ROLES
    | {r.value for r in STAFF_FAMILY_ROLES}
    | {UserRole.SuperAdmin.value, UserRole.Administrator.value}
)


# ===================================================================
# STAFF AREA (role gate + menu allow-list)
# ===================================================================
staff_router = APIRouter(
    prefix="/staff",
    tags=["Staff"],
    dependencies=[
        Depends(require_role(*STAFF_AREA_ROLES)),
        Depends(require_menu_permission(STAFF_MENU_POLICY)),
    ],
)


def _staff_page(request: Request, principal: Principal, page_title: str, status_code: int = 200):
    return render(
        request, "dashboard.html",
        {
            "title": page_title,
            "page_title": page_title,
            "menu": menu_for_role(principal.role),
        },
        status_code=status_code,
    )


@staff_router.get("/dashboard")
async def staff_dashboard(request: Request, principal: Principal = Depends(require_principal)):
    return _staff_page(request, principal, "Staff Dashboard")


@staff_router.get("/session/current")
async def current_session_page(request: Request, principal: Principal = Depends(require_principal)):
    return _staff_page(request, principal, "Set Current Session")


@staff_router.get("/courses/assigned")
async def assigned_courses_page(request: Request, principal: Principal = Depends(require_principal)):
    return _staff_page(request, principal, "Assigned Courses")


# ===================================================================
# STUDENT AREA (module allowances for graduated students)
# ===================================================================
student_router = APIRouter(
    prefix="/student",
    tags=["Student"],
    dependencies=[Depends(require_role(UserRole.Student))],
)


def _student_page(request: Request, page_title: str):
    return render(request, "dashboard.html", {"title": page_title, "page_title": page_title})


@student_router.get("/dashboard")
async def student_dashboard(request: Request):
    return _student_page(request, "Student Dashboard")


@student_router.get("/profile", dependencies=[Depends(require_module(StudentModule.Personal))])
async def student_profile(request: Request):
    return _student_page(request, "Personal Information")


@student_router.get("/results", dependencies=[Depends(require_module(StudentModule.Results))])
async def student_results(request: Request):
    return _student_page(request, "Results")


@student_router.get("/fees", dependencies=[Depends(require_module(StudentModule.Fees))])
async def student_fees(request: Request):
    return _student_page(request, "School Fees")


@student_router.post(
    "/registration",
    dependencies=[
        Depends(require_module(StudentModule.Registration)),
        Depends(block_if_read_only("Course Registration")),
    ],
)
async def course_registration(principal: Principal = Depends(require_principal)):
    return {"ok": True, "message": "Course registration received", "data": {"student_id": principal.id}}


# ===================================================================
# APPLICANT AREA
# ===================================================================
applicant_router = APIRouter(
    prefix="/applicant",
    tags=["Applicant"],
    dependencies=[Depends(require_role(UserRole.Applicant))],
)


@applicant_router.get("/dashboard")
async def applicant_dashboard(request: Request):
    return render(request, "dashboard.html", {"title": "Applicant Dashboard", "page_title": "Applicant Dashboard"})
