# uniportal/api/endpoints/auth.py

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from uniportal.api.deps import get_db_session
from uniportal.core.config import settings
from uniportal.core.exceptions import AccountBlocked, InvalidAction
from uniportal.core.principal import Principal
from uniportal.core.session import (
    end_session,
    pop_return_to,
    redirect_by_role,
    require_principal,
    session_payload,
    start_session,
    wants_json,
)
from uniportal.core.status_policy import blocked_message, login_decision
from uniportal.core.templates import render
from uniportal.schemas.auth import LoginRequest, SessionPayload, TokenResponse
from uniportal.services.auth_service import authenticate_user, create_principal_token

router = APIRouter(tags=["Auth"])

INVALID_CREDENTIALS = "Invalid username or password"


def _safe_return_to(target: str | None) -> str | None:
    # Only same-site absolute paths
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


async def _read_credentials(request: Request) -> LoginRequest:
    if "application/json" in request.headers.get("content-type", ""):
        try:
            data = await request.json()
        except ValueError:
            raise InvalidAction("Malformed login request")
    else:
        data = dict(await request.form())

    if not isinstance(data, dict):
        raise InvalidAction("Username and password are required")

    return LoginRequest(
        username=str(data.get("username") or "").strip(),
        password=str(data.get("password") or ""),
    )


async def _login_principal(session: AsyncSession, credentials: LoginRequest) -> Principal | None:
    user = await authenticate_user(session, credentials.username, credentials.password)
    if not user:
        return None

    principal = Principal.from_user(user)

    # Status gate at login time, same rule the per-request guard applies
    if not login_decision(principal.status, principal.role):
        logger.warning(
            f"Login refused for {principal.username or principal.email}: status '{principal.status_key}'"
        )
        raise AccountBlocked(blocked_message(principal.status, principal.role))

    return principal


# -------------------------------------------------------------------
# LOGIN PAGE
# -------------------------------------------------------------------
@router.get("/login")
async def login_page(request: Request):
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return RedirectResponse(redirect_by_role(principal), status_code=303)
    return render(request, "login.html", {"title": "Login", "page_title": "Login"})


# -------------------------------------------------------------------
# LOGIN (form or JSON) -> session cookie
# -------------------------------------------------------------------
@router.post("/login")
async def login(request: Request, session: AsyncSession = Depends(get_db_session)):
    credentials = await _read_credentials(request)

    try:
        principal = await _login_principal(session, credentials)
    except AccountBlocked:
        end_session(request)
        raise

    if principal is None:
        if wants_json(request):
            return JSONResponse({"ok": False, "message": INVALID_CREDENTIALS}, status_code=401)
        return render(
            request, "login.html",
            {"title": "Login", "page_title": "Login", "error": INVALID_CREDENTIALS},
            status_code=401,
        )

    return_to = _safe_return_to(pop_return_to(request))
    start_session(request, principal)
    target = return_to or redirect_by_role(principal)
    logger.info(f"User {principal.id} ({principal.role_key}) logged in")

    if wants_json(request):
        return {"ok": True, "data": {"redirect_to": target}}
    return RedirectResponse(target, status_code=303)


# -------------------------------------------------------------------
# LOGOUT
# -------------------------------------------------------------------
@router.api_route("/logout", methods=["GET", "POST"])
async def logout(request: Request):
    end_session(request)
    return RedirectResponse("/login", status_code=303)


@router.get("/access-denied")
async def access_denied(request: Request):
    return render(
        request, "access_denied.html",
        {
            "title": "Access Denied",
            "page_title": "Access Denied",
            "message": "ACCESS DENIED: YOU DO NOT HAVE PERMISSION TO ACCESS THE REQUESTED PAGE",
        },
        status_code=403,
    )


# -------------------------------------------------------------------
# API CLIENTS
# -------------------------------------------------------------------
@router.post("/api/auth/token", response_model=TokenResponse)
async def issue_token(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    principal = await _login_principal(session, payload)
    if principal is None:
        return JSONResponse({"ok": False, "message": INVALID_CREDENTIALS}, status_code=401)

    return TokenResponse(
        access_token=create_principal_token(principal),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        redirect_to=redirect_by_role(principal),
    )


@router.get("/api/auth/me")
async def me(request: Request, principal: Principal = Depends(require_principal)):
    return {"ok": True, "data": SessionPayload(**session_payload(request, principal))}
