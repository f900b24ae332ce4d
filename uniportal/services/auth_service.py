# uniportal/services/auth_service.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from typing import Iterable, Optional
import uuid

from uniportal.models.user import User, UserRole, normalize_role
from uniportal.core.principal import Principal
from uniportal.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)


def as_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


# ============================================================================
# FETCH USER
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id) -> User | None:
    user_uuid = as_uuid(user_id)
    if user_uuid is None:
        return None
    result = await session.execute(select(User).where(User.id == user_uuid))
    return result.scalar_one_or_none()


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole | str,
    username: str | None = None,
    status: str | None = "ACTIVE",
    department_id: int | None = None,
    school_id: int | None = None,
    extra_roles: Iterable[str] = (),
    leave_until: datetime | None = None,
) -> User:

    role_key = normalize_role(role)

    # ---- VALIDATION RULES ----
    if role_key == UserRole.HOD.value and department_id is None:
        raise ValueError("HOD must belong to a department")

    if role_key == UserRole.Dean.value and school_id is None:
        raise ValueError("Dean must belong to a school")

    user = User(
        id=uuid.uuid4(),
        name=name,
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role_key,
        extra_roles=[normalize_role(r) for r in extra_roles],
        status=status,
        leave_until=leave_until,
        department_id=department_id,
        school_id=school_id,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email or username already exists")


# ============================================================================
# AUTHENTICATE (username or email)
# ============================================================================
async def authenticate_user(session: AsyncSession, identifier: str, password: str) -> User | None:
    identifier = (identifier or "").strip()
    if not identifier:
        return None

    user = await get_user_by_username(session, identifier)
    if not user:
        user = await get_user_by_email(session, identifier)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# TOKEN FOR API CLIENTS
# ============================================================================
def create_principal_token(principal: Principal) -> str:
    # The token only seeds the principal; the guard refreshes it per request
    return create_access_token(subject=principal.id, data=principal.to_session())
