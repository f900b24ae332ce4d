from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from uniportal.core.config import settings
from uniportal.core.database import AsyncSessionLocal
from uniportal.models.user import UserRole
from uniportal.services.auth_service import create_user, get_user_by_email


# ----------------------------------------------------------------
# SEEDING FUNCTIONS
# ----------------------------------------------------------------

async def seed_all():
    """Master function to run all seeding logic."""
    async with AsyncSessionLocal() as session:
        try:
            await seed_super_admin(session)
            logger.success("✨ Seeding Complete.")
        except Exception as e:
            logger.error(f"❌ Seeding Failed: {e}")
            await session.rollback()


async def seed_super_admin(session: AsyncSession) -> bool:
    """Creates the bootstrap super admin once. Returns True when a user was created."""
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return False

    existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
    if existing:
        logger.info("Super Admin already exists. Skipping.")
        return False

    logger.info(f"🌱 Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
    await create_user(
        session=session,
        name=settings.SUPER_ADMIN_NAME or "Super Admin",
        email=settings.SUPER_ADMIN_EMAIL,
        username=settings.SUPER_ADMIN_USERNAME,
        password=settings.SUPER_ADMIN_PASSWORD,
        role=UserRole.SuperAdmin,
    )
    return True
