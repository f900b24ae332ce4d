# uniportal/core/database.py

import ssl
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy import text

from uniportal.core.config import settings

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("❌ DATABASE_URL is not set")


# ----------------------------------------------------
# SSL for managed Postgres (pooler)
# ----------------------------------------------------
def make_ssl():
    ctx = ssl.create_default_context()
    if not settings.DB_SSL_VERIFY:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # One shared connection, otherwise every session sees an empty DB
            options["poolclass"] = StaticPool
        else:
            # File DB: a fresh connection per session, nothing outlives its event loop
            options["poolclass"] = NullPool
        return options

    # asyncpg behind a transaction pooler: no prepared statements, no local pool
    return {
        "connect_args": {
            "ssl": make_ssl(),
            "statement_cache_size": 0,
            "prepared_statement_name_func": None,
        },
        "pool_pre_ping": True,
        "poolclass": NullPool,
    }


logger.info(f"🔄 Configuring database engine ({DATABASE_URL.split(':', 1)[0]})")

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    **_engine_options(DATABASE_URL),
)


# ----------------------------------------------------
# Sessions
# ----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# ----------------------------------------------------
# Create tables
# ----------------------------------------------------
def _load_models():
    # Table classes must be imported before create_all sees them
    from uniportal.models import academic, audit, course_result, department, result_batch, school, user  # noqa: F401


async def init_db():
    _load_models()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db():
    _load_models()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


# ----------------------------------------------------
# Test Connection
# ----------------------------------------------------
async def test_connection():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("✅ DB Connection OK")
