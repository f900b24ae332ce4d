# uniportal/core/session.py

from typing import Optional, Tuple

import jwt
from fastapi import Depends, Request
from loguru import logger

from uniportal.api.deps import get_user_store
from uniportal.core.exceptions import (
    AccountBlocked,
    ModuleForbidden,
    ReadOnlyViolation,
    Unauthenticated,
)
from uniportal.core.principal import Principal
from uniportal.core.role_menus import normalize_path
from uniportal.core.security import decode_token
from uniportal.core.status_policy import (
    allowed_modules,
    blocked_message,
    can_use_module,
    is_read_only,
    login_decision,
    read_only_action_message,
)
from uniportal.services.interfaces import UserStore

SESSION_USER_KEY = "user"
SESSION_RETURN_KEY = "return_to"

# Paths a blocked account may still reach (exact match after normalization)
SAFE_PATHS = frozenset({"/logout", "/login", "/verify-otp", "/access-denied", "/"})


# ------------------------------------------------------------
# SESSION STATE
# ------------------------------------------------------------
def start_session(request: Request, principal: Principal) -> None:
    request.session[SESSION_USER_KEY] = principal.to_session()


def end_session(request: Request) -> None:
    request.session.clear()


def pop_return_to(request: Request) -> Optional[str]:
    return request.session.pop(SESSION_RETURN_KEY, None)


def wants_json(request: Request) -> bool:
    headers = request.headers
    return (
        headers.get("x-requested-with", "").lower() == "xmlhttprequest"
        or "application/json" in headers.get("accept", "")
        or "application/json" in headers.get("content-type", "")
    )


def _bearer_principal(request: Request) -> Optional[Principal]:
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        payload = decode_token(token.strip())
    except jwt.PyJWTError as e:
        logger.info(f"Ignoring invalid bearer token: {e}")
        return None
    return Principal.from_session(payload)


def principal_from_request(request: Request) -> Tuple[Optional[Principal], Optional[str]]:
    """Returns the cached principal and where it came from ('session' | 'bearer')."""
    principal = Principal.from_session(request.session.get(SESSION_USER_KEY))
    if principal is not None:
        return principal, "session"

    principal = _bearer_principal(request)
    if principal is not None:
        return principal, "bearer"

    return None, None


# ------------------------------------------------------------
# REFRESH FROM STORE
# ------------------------------------------------------------
async def refresh_principal(principal: Principal, store: UserStore) -> Principal:
    """
    Re-read the principal so status/roles are always current.
    id -> username -> email, first hit wins. Lookup failures keep the
    cached copy instead of failing the request.
    """
    try:
        if principal.id:
            by_id = await store.find_by_id(principal.id)
            if by_id:
                return by_id
        if principal.username:
            by_username = await store.find_by_username(principal.username)
            if by_username:
                return by_username
        if principal.email:
            by_email = await store.find_by_email(principal.email)
            if by_email:
                return by_email
    except Exception as e:
        logger.warning(f"Principal refresh failed for id={principal.id}, keeping session copy: {e}")

    return principal


# ------------------------------------------------------------
# GLOBAL STATUS ENFORCEMENT
# Installed as an application-level dependency so it resolves
# before every route handler.
# ------------------------------------------------------------
async def enforce_account_status(
    request: Request,
    store: UserStore = Depends(get_user_store),
) -> Optional[Principal]:
    request.state.principal = None
    request.state.read_only = False
    request.state.allowed_modules = None

    cached, source = principal_from_request(request)
    if cached is None:
        return None

    principal = await refresh_principal(cached, store)

    if source == "session":
        start_session(request, principal)

    decision = login_decision(principal.status, principal.role)
    if not decision and normalize_path(request.url.path) not in SAFE_PATHS:
        message = blocked_message(principal.status, principal.role)
        logger.warning(
            f"Blocked request for user {principal.id} "
            f"(role='{principal.role_key}', status='{principal.status_key}') on {request.url.path}"
        )
        end_session(request)
        raise AccountBlocked(message)

    request.state.principal = principal
    request.state.read_only = is_read_only(principal.status, principal.role)
    request.state.allowed_modules = allowed_modules(principal.role, principal.status)
    return principal


# ------------------------------------------------------------
# PER-ROUTE GUARDS
# ------------------------------------------------------------
async def require_principal(
    request: Request,
    principal: Optional[Principal] = Depends(enforce_account_status),
) -> Principal:
    if principal is None:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        raise Unauthenticated(return_to=target)
    return principal


def block_if_read_only(feature_name: str = "This feature"):
    """
    Opt-in guard for mutating routes. Nothing blocks writes for read-only
    accounts unless the route depends on this.
    """

    async def read_only_guard(principal: Principal = Depends(require_principal)) -> Principal:
        if is_read_only(principal.status, principal.role):
            message = read_only_action_message(principal.role, principal.status, principal.leave_until)
            logger.info(f"Read-only user {principal.id} blocked from '{feature_name}'")
            raise ReadOnlyViolation(message, feature=feature_name)
        return principal

    return read_only_guard


def require_module(module_key):
    async def module_guard(principal: Principal = Depends(require_principal)) -> Principal:
        if not can_use_module(principal.role, principal.status, module_key):
            raise ModuleForbidden()
        return principal

    return module_guard


def session_payload(request: Request, principal: Principal) -> dict:
    modules = getattr(request.state, "allowed_modules", None)
    return {
        "id": principal.id,
        "role": principal.role_key,
        "status": principal.status_key or None,
        "readOnly": bool(getattr(request.state, "read_only", False)),
        "allowedModules": sorted(m.value for m in modules) if modules is not None else None,
    }


# ------------------------------------------------------------
# POST-LOGIN LANDING
# ------------------------------------------------------------
STAFF_LANDING_ROLES = frozenset({
    "admin", "administrator", "superadmin",
    "staff",
    "lecturer",
    "h.o.d", "hod", "head of department",
    "dean",
    "registrary", "registry", "registrar",
    "bursary", "bursar",
    "ict staff", "ict",
    "college health centre", "health", "health centre", "health center",
    "auditor",
    "admission officer", "admissions officer", "admission",
    "school/dept. officer", "school officer", "department officer", "dept officer",
    "student union",
    "works", "library", "provost",
})


def redirect_by_role(user_or_role) -> str:
    role = getattr(user_or_role, "role", user_or_role)
    role = str(role or "").strip().lower()

    if role in STAFF_LANDING_ROLES:
        return "/staff/dashboard"
    if role == "student":
        return "/student/dashboard"
    if role == "applicant":
        return "/applicant/dashboard"
    return "/"
