# uniportal/core/exceptions.py

from typing import Optional


class PortalError(Exception):
    """
    Base for every user-facing failure raised by the guards and the
    approval workflow. `kind` is machine-checkable, `message` is shown
    to the user, `status_code` drives the HTTP response.

    `page` marks failures that browsers get as a rendered page;
    the rest always answer with the JSON envelope.
    """

    kind = "error"
    status_code = 400
    page = False
    title = "Access Denied"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ------------------------------------------------------------
# SESSION GUARD
# ------------------------------------------------------------
class Unauthenticated(PortalError):
    kind = "unauthenticated"
    status_code = 401

    def __init__(self, return_to: Optional[str] = None):
        super().__init__("Please log in to continue.")
        self.return_to = return_to


class AccountBlocked(PortalError):
    kind = "account_blocked"
    status_code = 403
    page = True


class ReadOnlyViolation(PortalError):
    kind = "read_only"
    status_code = 403
    page = True
    title = "Access Restricted"

    def __init__(self, message: str, feature: Optional[str] = None):
        super().__init__(message)
        self.feature = feature


GENERIC_DENIED = "ACCESS DENIED: YOU DO NOT HAVE PERMISSION TO ACCESS THE REQUESTED PAGE"


class MenuForbidden(PortalError):
    kind = "menu_forbidden"
    status_code = 403
    page = True

    def __init__(self, message: str = GENERIC_DENIED):
        super().__init__(message)


class ModuleForbidden(MenuForbidden):
    kind = "module_forbidden"


class RoleForbidden(MenuForbidden):
    kind = "role_forbidden"


# ------------------------------------------------------------
# APPROVAL WORKFLOW
# ------------------------------------------------------------
class PermissionDenied(PortalError):
    kind = "permission_denied"
    status_code = 403


class InvalidStageTransition(PortalError):
    kind = "invalid_stage"
    status_code = 403

    def __init__(self, current_status: str, message: Optional[str] = None):
        super().__init__(
            message
            or f"Batch is currently {current_status}; it is not awaiting your approval stage."
        )
        self.current_status = current_status


class InvalidAction(PortalError):
    kind = "invalid_input"
    status_code = 400


class BatchNotFound(PortalError):
    kind = "not_found"
    status_code = 404

    def __init__(self, batch_id):
        super().__init__(f"Result batch {batch_id} not found")
        self.batch_id = batch_id


# ------------------------------------------------------------
# COLLABORATORS
# ------------------------------------------------------------
class StoreUnavailable(PortalError):
    kind = "store_unavailable"
    status_code = 500

    def __init__(self, message: str = "The request could not be completed. Please try again later."):
        super().__init__(message)


class AuditWriteFailed(Exception):
    """Returned (not raised) by the workflow when the audit append failed."""

    def __init__(self, batch_id, cause: BaseException):
        super().__init__(f"Audit write failed for batch {batch_id}: {cause}")
        self.batch_id = batch_id
        self.cause = cause
