# uniportal/models/enums.py

from enum import Enum
from typing import Optional


class AccountStatus(str, Enum):
    # Staff family
    Active = "ACTIVE"
    Inactive = "INACTIVE"          # shared with students
    Suspended = "SUSPENDED"
    LeaveOfAbsence = "LEAVE OF ABSENCE"
    Sacked = "SACKED"
    Terminated = "TERMINATED"
    Retired = "RETIRED"
    Resigned = "RESIGNED"

    # Students
    Graduated = "GRADUATED"
    Withdrawn = "WITHDRAWN"
    Transferred = "TRANSFERRED"
    Absconded = "ABSCONDED"


STAFF_STATUSES = frozenset({
    AccountStatus.Active,
    AccountStatus.Inactive,
    AccountStatus.Suspended,
    AccountStatus.LeaveOfAbsence,
    AccountStatus.Sacked,
    AccountStatus.Terminated,
    AccountStatus.Retired,
    AccountStatus.Resigned,
})

STUDENT_STATUSES = frozenset({
    AccountStatus.Graduated,
    AccountStatus.Inactive,
    AccountStatus.Withdrawn,
    AccountStatus.Transferred,
    AccountStatus.Absconded,
})


def normalize_status(status) -> str:
    """Upper-cased, trimmed status text ('' for None)."""
    if isinstance(status, AccountStatus):
        return status.value
    return str(status or "").strip().upper()


def parse_status(status) -> Optional[AccountStatus]:
    """
    Single parsing boundary for account statuses.
    Accepts any case and both 'LEAVE OF ABSENCE' / 'LEAVE_OF_ABSENCE'.
    Unrecognised text returns None, which the policies treat as
    "no special restriction".
    """
    text = normalize_status(status).replace("_", " ")
    if not text:
        return None
    try:
        return AccountStatus(text)
    except ValueError:
        return None


class BatchStatus(str, Enum):
    Uploaded = "UPLOADED"
    HodApproved = "HOD_APPROVED"
    DeanApproved = "DEAN_APPROVED"
    BusinessApproved = "BUSINESS_APPROVED"
    Final = "FINAL"
    HodRejected = "HOD_REJECTED"
    DeanRejected = "DEAN_REJECTED"
    BusinessRejected = "BUSINESS_REJECTED"
    RegistryRejected = "REGISTRY_REJECTED"


class ApprovalDecision(str, Enum):
    Approve = "APPROVE"
    Reject = "REJECT"


def enum_value(value) -> str:
    """Plain text for an enum member or a raw string (str() of a str-Enum is 'Cls.Member')."""
    if isinstance(value, Enum):
        return value.value
    return str(value)
