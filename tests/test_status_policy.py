from datetime import datetime

import pytest

from uniportal.core.decisions import Reason
from uniportal.core.status_policy import (
    StudentModule,
    allowed_modules,
    blocked_message,
    can_use_module,
    is_login_allowed,
    is_read_only,
    login_decision,
    read_only_action_message,
)
from uniportal.models.enums import STAFF_STATUSES, STUDENT_STATUSES, AccountStatus, parse_status


# ------------------------------------------------------------------
# LOGIN GATE
# ------------------------------------------------------------------
@pytest.mark.parametrize("status", ["ACTIVE", "LEAVE OF ABSENCE", "RETIRED", " active ", "leave_of_absence"])
def test_staff_login_statuses_allowed(status):
    assert is_login_allowed(status, "hod")


@pytest.mark.parametrize("status", ["INACTIVE", "SUSPENDED", "SACKED", "TERMINATED", "RESIGNED", "", None, "ON STRIKE"])
def test_staff_other_statuses_blocked(status):
    decision = login_decision(status, "Lecturer")
    assert not decision
    assert decision.reason == Reason.StatusBlocked


def test_only_graduated_students_log_in():
    assert is_login_allowed("GRADUATED", "student")
    for status in ("INACTIVE", "WITHDRAWN", "TRANSFERRED", "ABSCONDED", "ACTIVE", None):
        assert not is_login_allowed(status, "student")


def test_applicants_are_never_status_blocked():
    decision = login_decision("WITHDRAWN", "applicant")
    assert decision.allowed
    assert decision.reason == Reason.ApplicantUnrestricted


@pytest.mark.parametrize("role", ["", None, "visitor", "bursar", "h.o.d", "superadmin", "administrator"])
def test_roles_without_status_policy_fail_open(role):
    decision = login_decision("SACKED", role)
    assert decision.allowed
    assert decision.reason == Reason.NoPolicyConfigured


def test_status_parsing_accepts_underscores_and_case():
    assert parse_status("leave_of_absence").value == "LEAVE OF ABSENCE"
    assert parse_status("Retired ").value == "RETIRED"
    assert parse_status("on strike") is None


# ------------------------------------------------------------------
# READ-ONLY STATE
# ------------------------------------------------------------------
def test_read_only_states():
    assert is_read_only("LEAVE OF ABSENCE", "staff")
    assert is_read_only("RETIRED", "dean")
    assert is_read_only("GRADUATED", "student")

    assert not is_read_only("ACTIVE", "staff")
    assert not is_read_only("INACTIVE", "student")
    # Staff rule is status-only: any non-student role on LOA is read-only
    assert is_read_only("LEAVE OF ABSENCE", "unknown-role")


# ------------------------------------------------------------------
# MODULE ALLOWANCES
# ------------------------------------------------------------------
def test_graduated_students_limited_to_personal_and_results():
    modules = allowed_modules("student", "GRADUATED")
    assert modules == {StudentModule.Personal, StudentModule.Results}

    assert can_use_module("student", "GRADUATED", "student.personal")
    assert can_use_module("student", "GRADUATED", StudentModule.Results)
    assert not can_use_module("student", "GRADUATED", "student.fees")
    assert not can_use_module("student", "GRADUATED", "student.unknown")


def test_no_module_filter_for_everyone_else():
    assert allowed_modules("staff", "LEAVE OF ABSENCE") is None
    assert allowed_modules("student", "ACTIVE") is None
    assert can_use_module("staff", "RETIRED", "student.fees")


# ------------------------------------------------------------------
# MESSAGES
# ------------------------------------------------------------------
def test_blocked_messages_for_staff():
    assert "made SUSPENDED by the admin" in blocked_message("suspended", "staff")
    assert "made INACTIVE by the admin" in blocked_message("INACTIVE", "hod")
    assert "you have been sacked" in blocked_message("SACKED", "bursary")
    assert "You have been terminated" in blocked_message("TERMINATED", "dean")
    assert "you have resigned" in blocked_message("RESIGNED", "ict")


def test_blocked_messages_for_students():
    assert "student account is INACTIVE" in blocked_message("INACTIVE", "student")
    assert "WITHDRAWN" in blocked_message("WITHDRAWN", "student")
    assert "TRANSFERRED" in blocked_message("TRANSFERRED", "student")
    assert "ABSCONDED" in blocked_message("ABSCONDED", "student")


def test_blocked_message_fallback():
    assert blocked_message("ON STRIKE", "student") == (
        "Access Denied due to status: ON STRIKE. Please contact ICT."
    )
    assert blocked_message(None, "student") == "Access Denied due to status: UNKNOWN. Please contact ICT."


def test_read_only_action_messages():
    assert "GRADUATED" in read_only_action_message("student", "GRADUATED")
    assert "RETIRED" in read_only_action_message("staff", "RETIRED")

    message = read_only_action_message("staff", "LEAVE OF ABSENCE")
    assert message == "You are on sabbatical leave. This feature is currently restricted right now."

    dated = read_only_action_message("staff", "LEAVE OF ABSENCE", datetime(2026, 3, 2))
    assert "sabbatical leave until Mon Mar 02 2026" in dated

    assert read_only_action_message("staff", "ACTIVE") == "This feature is restricted for your current status."


def test_every_enumerated_status_has_a_decision():
    staff_allowed = {s for s in STAFF_STATUSES if is_login_allowed(s, "staff")}
    assert staff_allowed == {AccountStatus.Active, AccountStatus.LeaveOfAbsence, AccountStatus.Retired}

    student_allowed = {s for s in STUDENT_STATUSES if is_login_allowed(s, "student")}
    assert student_allowed == {AccountStatus.Graduated}
