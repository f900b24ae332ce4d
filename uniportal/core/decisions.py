# uniportal/core/decisions.py

from dataclasses import dataclass
from enum import Enum


class Reason(str, Enum):
    # Status policy
    StatusPermitted = "status_permitted"
    StatusBlocked = "status_blocked"
    ApplicantUnrestricted = "applicant_unrestricted"

    # Menu policy
    OutOfScope = "out_of_scope"
    SuperRole = "super_role"
    Unrestricted = "unrestricted"
    BasePath = "base_path"
    Listed = "listed"
    NotListed = "not_listed"
    NoConfigDenied = "no_config_denied"

    # Shared fail-open default: the role has no policy of its own
    NoPolicyConfigured = "no_policy_configured"


@dataclass(frozen=True)
class Decision:
    """
    Outcome of a pure policy check.

    Truthiness follows `allowed`, so call sites can keep writing
    `if is_path_allowed(...)`, while tests and logs can tell the
    fail-open branch (Reason.NoPolicyConfigured) apart from a real grant.
    """

    allowed: bool
    reason: Reason

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls, reason: Reason) -> "Decision":
        return cls(True, reason)

    @classmethod
    def deny(cls, reason: Reason) -> "Decision":
        return cls(False, reason)
