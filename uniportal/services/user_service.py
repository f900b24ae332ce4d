# uniportal/services/user_service.py

from typing import Optional

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from uniportal.core.principal import Principal, StaffScope
from uniportal.models.department import Department
from uniportal.services.auth_service import get_user_by_email, get_user_by_id, get_user_by_username
from uniportal.services.interfaces import StaffScopeStore, UserStore


class SqlUserStore(UserStore):
    """Principal lookups against the users table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: str) -> Optional[Principal]:
        user = await get_user_by_id(self.session, user_id)
        return Principal.from_user(user) if user else None

    async def find_by_username(self, username: str) -> Optional[Principal]:
        user = await get_user_by_username(self.session, username)
        return Principal.from_user(user) if user else None

    async def find_by_email(self, email: str) -> Optional[Principal]:
        user = await get_user_by_email(self.session, email)
        return Principal.from_user(user) if user else None


class SqlStaffScopeStore(StaffScopeStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_scope(self, staff_id: str) -> StaffScope:
        user = await get_user_by_id(self.session, staff_id)
        if not user:
            return StaffScope()

        school_id = user.school_id
        # A department member belongs to the department's school
        if school_id is None and user.department_id is not None:
            result = await self.session.execute(
                select(Department.school_id).where(Department.id == user.department_id)
            )
            school_id = result.scalar_one_or_none()

        return StaffScope(school_id=school_id, department_id=user.department_id)


async def update_display_name(session: AsyncSession, user_id: str, name: str) -> Optional[Principal]:
    user = await get_user_by_id(session, user_id)
    if not user:
        return None

    user.name = name
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return Principal.from_user(user)
