# uniportal/services/audit_service.py

from typing import List

from sqlmodel import select

from uniportal.models.audit import ApprovalAction
from uniportal.services.auth_service import as_uuid
from uniportal.services.interfaces import ApprovalActionRecord, AuditSink


class SqlAuditSink(AuditSink):
    """
    Writes approval actions through its own DB session, so a failed
    audit insert never rolls back the status change it describes.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def record(self, entry: ApprovalActionRecord) -> None:
        async with self.session_factory() as session:
            try:
                session.add(
                    ApprovalAction(
                        batch_id=entry.batch_id,
                        actor_id=as_uuid(entry.actor_id) if entry.actor_id else None,
                        actor_role=entry.actor_role,
                        action=entry.action,
                        from_status=entry.from_status,
                        to_status=entry.to_status,
                        remark=entry.remark,
                    )
                )
                await session.commit()
            except Exception:
                # Keep the connection pool healthy, then let the caller decide
                await session.rollback()
                raise

    async def history(self, batch_id: int) -> List[ApprovalActionRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ApprovalAction)
                .where(ApprovalAction.batch_id == batch_id)
                .order_by(ApprovalAction.created_at.asc(), ApprovalAction.id.asc())
            )
            return [
                ApprovalActionRecord(
                    batch_id=row.batch_id,
                    actor_id=str(row.actor_id) if row.actor_id else None,
                    actor_role=row.actor_role or "",
                    action=row.action,
                    from_status=row.from_status,
                    to_status=row.to_status,
                    remark=row.remark,
                    created_at=row.created_at,
                )
                for row in result.scalars().all()
            ]
