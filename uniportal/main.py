# uniportal/main.py

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware
import sys

from uniportal.core.config import settings
from uniportal.core.database import init_db, test_connection
from uniportal.core.exceptions import (
    InvalidStageTransition,
    PortalError,
    ReadOnlyViolation,
    StoreUnavailable,
    Unauthenticated,
)
from uniportal.core.seeding_logic import seed_all
from uniportal.core.session import (
    SESSION_RETURN_KEY,
    enforce_account_status,
    redirect_by_role,
    wants_json,
)
from uniportal.core.templates import render

# Routers
from uniportal.api.endpoints import (
    account as account_router,
    auth as auth_router,
    dashboards as dashboards_router,
    results_approval as results_approval_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# APPLICATION STARTUP
# ------------------------------------------------------------
async def on_startup():
    logger.info("🚀 Starting University Portal...")

    # 1) Database connection test
    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    # 2) Initialize database tables
    try:
        await init_db()
        logger.success("Database tables ready.")
    except Exception as e:
        logger.warning(f"Table initialization encountered an issue: {e}")

    # 3) Seed Super Admin
    await seed_all()

    logger.success("Portal startup completed successfully.\n")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await on_startup()
    yield


# ------------------------------------------------------------
# FASTAPI APP INIT
# Every request passes the account status guard before its route.
# ------------------------------------------------------------
app = FastAPI(
    title="University Portal",
    version="1.0.0",
    description="Access control and results approval for the university portal.",
    dependencies=[Depends(enforce_account_status)],
    lifespan=lifespan,
)

# ------------------------------------------------------------
# SESSION COOKIE
# ------------------------------------------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    https_only=settings.SESSION_HTTPS_ONLY,
    same_site="lax",
)


# ------------------------------------------------------------
# ERROR HANDLING
# ------------------------------------------------------------
def _error_body(exc: PortalError) -> dict:
    body = {"ok": False, "message": exc.message, "kind": exc.kind}
    if isinstance(exc, ReadOnlyViolation):
        body["readOnly"] = True
        if exc.feature:
            body["feature"] = exc.feature
    if isinstance(exc, InvalidStageTransition):
        body["currentStatus"] = exc.current_status
    return body


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if isinstance(exc, Unauthenticated):
        if wants_json(request):
            return JSONResponse(_error_body(exc), status_code=exc.status_code)
        if exc.return_to:
            request.session[SESSION_RETURN_KEY] = exc.return_to
        return RedirectResponse("/login", status_code=303)

    if exc.page and not wants_json(request):
        principal = getattr(request.state, "principal", None)
        return render(
            request, "access_denied.html",
            {
                "title": exc.title,
                "page_title": exc.title,
                "message": exc.message,
                "home_href": redirect_by_role(principal) if principal else "/login",
            },
            status_code=exc.status_code,
        )

    return JSONResponse(_error_body(exc), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    return JSONResponse(
        {
            "ok": False,
            "message": f"Invalid {field}: {first.get('msg', 'invalid input')}",
            "kind": "invalid_input",
        },
        status_code=400,
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(_error_body(StoreUnavailable()), status_code=StoreUnavailable.status_code)


# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(dashboards_router.staff_router)
app.include_router(dashboards_router.student_router)
app.include_router(dashboards_router.applicant_router)
app.include_router(results_approval_router.router)


# ------------------------------------------------------------
# ROOT
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root(request: Request):
    principal = getattr(request.state, "principal", None)
    if principal is None:
        return RedirectResponse("/login", status_code=303)

    target = redirect_by_role(principal)
    if target == "/":
        # No landing page for this role
        return {"ok": True, "data": {"id": principal.id, "role": principal.role_key}}
    return RedirectResponse(target, status_code=303)
