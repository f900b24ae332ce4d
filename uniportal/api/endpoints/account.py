# uniportal/api/endpoints/account.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from loguru import logger

from uniportal.api.deps import get_db_session
from uniportal.core.exceptions import InvalidAction, Unauthenticated
from uniportal.core.principal import Principal
from uniportal.core.security import hash_password, verify_password
from uniportal.core.session import block_if_read_only, start_session
from uniportal.services.auth_service import get_user_by_id
from uniportal.services.user_service import update_display_name

router = APIRouter(prefix="/api/account", tags=["Account"])


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=8)


class ProfileUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    principal: Principal = Depends(block_if_read_only("Change Password")),
    session: AsyncSession = Depends(get_db_session),
):
    user = await get_user_by_id(session, principal.id)
    if not user:
        raise Unauthenticated()

    # Verify old password
    if not verify_password(payload.old_password, user.password_hash):
        raise InvalidAction("Old password incorrect")

    # Prevent reusing old password
    if payload.old_password == payload.new_password:
        raise InvalidAction("New password must be different")

    user.password_hash = hash_password(payload.new_password)
    session.add(user)
    await session.commit()

    logger.info(f"User {principal.id} changed password")
    return {"ok": True, "message": "Password changed successfully"}


@router.post("/profile")
async def update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    principal: Principal = Depends(block_if_read_only("Update Profile")),
    session: AsyncSession = Depends(get_db_session),
):
    updated = await update_display_name(session, principal.id, payload.name.strip())
    if updated is None:
        raise Unauthenticated()

    if request.session.get("user"):
        start_session(request, updated)

    return {"ok": True, "data": {"id": updated.id, "name": updated.name}}
