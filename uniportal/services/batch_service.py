# uniportal/services/batch_service.py

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from uniportal.models.academic import Course
from uniportal.models.course_result import CourseResult
from uniportal.models.department import Department
from uniportal.models.result_batch import ResultBatch
from uniportal.models.enums import enum_value
from uniportal.models.school import School
from uniportal.services.interfaces import (
    RESULT_PREVIEW_LIMIT,
    BatchFilter,
    BatchRecord,
    BatchStore,
    CourseResultRecord,
    CourseSummary,
)


def _batch_query():
    # batch -> course -> department -> school
    return (
        select(
            ResultBatch,
            Course.code,
            Course.title,
            Department.id,
            Department.name,
            School.id,
            School.name,
        )
        .join(Course, Course.id == ResultBatch.course_id)
        .join(Department, Department.id == Course.department_id)
        .join(School, School.id == Department.school_id)
    )


def _to_record(row) -> BatchRecord:
    batch, course_code, course_title, dept_id, dept_name, school_id, school_name = row
    return BatchRecord(
        id=batch.id,
        course_id=batch.course_id,
        status=batch.status,
        course_department_id=dept_id,
        course_school_id=school_id,
        session_id=batch.session_id,
        semester=batch.semester,
        level=batch.level,
        remark=batch.remark,
        course_code=course_code,
        course_title=course_title,
        department_name=dept_name,
        school_name=school_name,
        uploaded_at=batch.uploaded_at,
        updated_at=batch.updated_at,
    )


def _apply_filters(query, filters: BatchFilter):
    if filters.statuses:
        query = query.where(ResultBatch.status.in_([enum_value(s) for s in filters.statuses]))
    if filters.session_id is not None:
        query = query.where(ResultBatch.session_id == filters.session_id)
    if filters.semester:
        query = query.where(ResultBatch.semester == filters.semester)
    if filters.level:
        query = query.where(ResultBatch.level == filters.level)
    if filters.course_id is not None:
        query = query.where(ResultBatch.course_id == filters.course_id)
    if filters.department_id is not None:
        query = query.where(Department.id == filters.department_id)
    if filters.school_id is not None:
        query = query.where(School.id == filters.school_id)
    return query


class SqlBatchStore(BatchStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_batch(self, batch_id: int) -> Optional[BatchRecord]:
        result = await self.session.execute(_batch_query().where(ResultBatch.id == batch_id))
        row = result.first()
        return _to_record(row) if row else None

    async def list_batches(self, filters: BatchFilter) -> List[BatchRecord]:
        query = (
            _apply_filters(_batch_query(), filters)
            .order_by(ResultBatch.uploaded_at.desc(), ResultBatch.id.desc())
            .limit(filters.limit)
        )
        result = await self.session.execute(query)
        return [_to_record(row) for row in result.all()]

    async def list_courses(self, filters: BatchFilter) -> List[CourseSummary]:
        query = (
            select(Course.id, Course.code, Course.title)
            .distinct()
            .join(ResultBatch, ResultBatch.course_id == Course.id)
            .join(Department, Department.id == Course.department_id)
            .join(School, School.id == Department.school_id)
        )
        query = _apply_filters(query, filters).order_by(Course.code.asc()).limit(filters.limit)
        result = await self.session.execute(query)
        return [CourseSummary(id=r.id, code=r.code, title=r.title) for r in result.all()]

    async def list_results(self, batch_id: int, limit: int = RESULT_PREVIEW_LIMIT) -> List[CourseResultRecord]:
        result = await self.session.execute(
            select(CourseResult)
            .where(CourseResult.result_batch_id == batch_id)
            .order_by(CourseResult.id.asc())
            .limit(limit)
        )
        return [
            CourseResultRecord(
                id=row.id,
                result_batch_id=row.result_batch_id,
                status=row.status,
                student_id=str(row.student_id) if row.student_id else None,
                matric_no=row.matric_no,
                reg_type=row.reg_type,
                ca1=row.ca1,
                ca2=row.ca2,
                ca3=row.ca3,
                exam=row.exam,
                total=row.total,
                grade=row.grade,
                points=row.points,
            )
            for row in result.scalars().all()
        ]

    async def update_status(
        self,
        batch_id: int,
        new_status: str,
        expected_status: str,
        remark: Optional[str] = None,
    ) -> bool:
        # Conditional on the status the caller read: a concurrent transition
        # makes this match zero rows instead of overwriting it.
        stmt = (
            update(ResultBatch)
            .where(ResultBatch.id == batch_id)
            .where(ResultBatch.status == enum_value(expected_status))
            .values(
                status=enum_value(new_status),
                remark=remark,
                updated_at=datetime.now(timezone.utc),
            )
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                await self.session.rollback()
                return False

            # Result rows follow the batch in the same transaction
            await self.session.execute(
                update(CourseResult)
                .where(CourseResult.result_batch_id == batch_id)
                .values(status=enum_value(new_status))
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True
