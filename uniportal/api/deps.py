# uniportal/api/deps.py

from typing import AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from uniportal.core.database import AsyncSessionLocal, get_session
from uniportal.services.approval_service import ApprovalWorkflow
from uniportal.services.audit_service import SqlAuditSink
from uniportal.services.batch_service import SqlBatchStore
from uniportal.services.interfaces import AuditSink, BatchStore, StaffScopeStore, UserStore
from uniportal.services.user_service import SqlStaffScopeStore, SqlUserStore


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Collaborators (overridden in tests via app.dependency_overrides)
# ------------------------------------------------------------
async def get_user_store(session: AsyncSession = Depends(get_db_session)) -> UserStore:
    return SqlUserStore(session)


async def get_batch_store(session: AsyncSession = Depends(get_db_session)) -> BatchStore:
    return SqlBatchStore(session)


async def get_scope_store(session: AsyncSession = Depends(get_db_session)) -> StaffScopeStore:
    return SqlStaffScopeStore(session)


async def get_audit_sink() -> AuditSink:
    # Separate session per write so audit failures stay isolated
    return SqlAuditSink(AsyncSessionLocal)


async def get_approval_workflow(
    batches: BatchStore = Depends(get_batch_store),
    scopes: StaffScopeStore = Depends(get_scope_store),
    audit: AuditSink = Depends(get_audit_sink),
) -> ApprovalWorkflow:
    return ApprovalWorkflow(batches, scopes, audit)
