# uniportal/core/status_policy.py
#
# Pure decisions over (role, status). No I/O, never raises: unrecognised
# roles or statuses fall through to "no special restriction".

from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional, Union

from uniportal.core.decisions import Decision, Reason
from uniportal.models.enums import AccountStatus, normalize_status, parse_status
from uniportal.models.user import STAFF_FAMILY_ROLES, UserRole, parse_role


class StudentModule(str, Enum):
    Personal = "student.personal"
    Results = "student.results"          # transcripts/results
    Fees = "student.fees"
    Registration = "student.registration"
    CourseForms = "student.courseforms"
    Hostel = "student.hostel"
    Messages = "student.messages"


STAFF_LOGIN_STATUSES = frozenset({
    AccountStatus.Active,
    AccountStatus.LeaveOfAbsence,
    AccountStatus.Retired,
})

READ_ONLY_STAFF_STATUSES = frozenset({
    AccountStatus.LeaveOfAbsence,
    AccountStatus.Retired,
})

GRADUATED_MODULES: FrozenSet[StudentModule] = frozenset({
    StudentModule.Personal,
    StudentModule.Results,
})


# ------------------------------------------------------------
# LOGIN GATE
# ------------------------------------------------------------
def login_decision(status, role="") -> Decision:
    """Can a user with (role, status) log in at all?"""
    parsed_role = parse_role(role)
    parsed_status = parse_status(status)

    if parsed_role in STAFF_FAMILY_ROLES:
        # ACTIVE + LOA + RETIRED can log in (LOA/RETIRED read-only)
        if parsed_status in STAFF_LOGIN_STATUSES:
            return Decision.allow(Reason.StatusPermitted)
        return Decision.deny(Reason.StatusBlocked)

    if parsed_role == UserRole.Student:
        # Only GRADUATED is admitted (read-only, limited modules).
        # There is no enrolled/active student status to admit.
        if parsed_status == AccountStatus.Graduated:
            return Decision.allow(Reason.StatusPermitted)
        return Decision.deny(Reason.StatusBlocked)

    if parsed_role == UserRole.Applicant:
        return Decision.allow(Reason.ApplicantUnrestricted)

    return Decision.allow(Reason.NoPolicyConfigured)


def is_login_allowed(status, role="") -> bool:
    return login_decision(status, role).allowed


# ------------------------------------------------------------
# READ-ONLY STATE
# ------------------------------------------------------------
def is_read_only(status, role="") -> bool:
    parsed_status = parse_status(status)

    if parse_role(role) == UserRole.Student:
        return parsed_status == AccountStatus.Graduated

    return parsed_status in READ_ONLY_STAFF_STATUSES


# ------------------------------------------------------------
# MESSAGES
# ------------------------------------------------------------
def blocked_message(status, role="") -> str:
    """Message shown when login is blocked due to status."""
    parsed_role = parse_role(role)
    parsed_status = parse_status(status)
    s = normalize_status(status)

    if parsed_role not in (UserRole.Student, UserRole.Applicant):
        if parsed_status in (AccountStatus.Inactive, AccountStatus.Suspended):
            return (
                f"Access Denied, you have been made {parsed_status.value} by the admin. "
                "Please contact the ICT department."
            )
        if parsed_status == AccountStatus.Sacked:
            return (
                "Access Denied, you have been sacked. Any further attempt to access this "
                "system will be reported to the law enforcement agency(s)."
            )
        if parsed_status == AccountStatus.Terminated:
            return (
                "Access Denied, you're not authorised. You have been terminated. Any further "
                "attempt to access this system will be reported to the law enforcement agency(s)."
            )
        if parsed_status == AccountStatus.Resigned:
            return "Access Denied, you have resigned. Please contact ICT if you believe this is an error."

    if parsed_role == UserRole.Student:
        if parsed_status == AccountStatus.Inactive:
            return "Access Denied. Your student account is INACTIVE. Please contact the ICT department."
        if parsed_status == AccountStatus.Withdrawn:
            return (
                "Access Denied. Your student record indicates WITHDRAWN status. "
                "Please contact the ICT department."
            )
        if parsed_status == AccountStatus.Transferred:
            return "Access Denied. Your student record indicates TRANSFERRED status."
        if parsed_status == AccountStatus.Absconded:
            return "Access Denied. Your student record indicates ABSCONDED status."

    return f"Access Denied due to status: {s or 'UNKNOWN'}. Please contact ICT."


def _until_text(leave_until: Union[date, datetime, str, None]) -> Optional[str]:
    if leave_until is None or leave_until == "":
        return None
    if isinstance(leave_until, str):
        try:
            leave_until = datetime.fromisoformat(leave_until)
        except ValueError:
            return None
    if isinstance(leave_until, (date, datetime)):
        return leave_until.strftime("%a %b %d %Y")
    return None


def read_only_action_message(role="", status="", leave_until=None) -> str:
    """Message shown when a read-only user hits a write action."""
    parsed_status = parse_status(status)

    if parse_role(role) == UserRole.Student and parsed_status == AccountStatus.Graduated:
        return "Your account is GRADUATED. Only read-only access is available (personal info & results)."

    if parsed_status == AccountStatus.LeaveOfAbsence:
        until = _until_text(leave_until)
        suffix = f" until {until}" if until else ""
        return f"You are on sabbatical leave{suffix}. This feature is currently restricted right now."

    if parsed_status == AccountStatus.Retired:
        return "Your account is in RETIRED status. This feature is restricted."

    return "This feature is restricted for your current status."


# ------------------------------------------------------------
# MODULE ALLOWANCES
# ------------------------------------------------------------
def allowed_modules(role="", status="") -> Optional[FrozenSet[StudentModule]]:
    """
    GRADUATED students get personal + results only.
    None means no per-module filter; staff LOA/RETIRED writes are
    blocked per route instead.
    """
    if parse_role(role) == UserRole.Student and parse_status(status) == AccountStatus.Graduated:
        return GRADUATED_MODULES
    return None


def can_use_module(role="", status="", module_key="") -> bool:
    allow = allowed_modules(role, status)
    if allow is None:
        return True
    try:
        return StudentModule(module_key) in allow
    except ValueError:
        return False
