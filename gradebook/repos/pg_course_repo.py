"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gradebook.core.errors import NotFoundError
from gradebook.db.tables import CourseRow
from gradebook.models.course import Course


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol; one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get(self, course_id: UUID) -> Course | None:
        async with self._sessions() as session:
            row = await session.get(CourseRow, course_id)
            return _row_to_course(row) if row is not None else None

    async def list_all(self) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at, CourseRow.id)
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_for_teacher(self, teacher_id: str) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.teacher_id == teacher_id)
            .order_by(CourseRow.created_at, CourseRow.id)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add(self, course: Course) -> None:
        async with self._sessions() as session, session.begin():
            session.add(
                CourseRow(
                    id=course.id,
                    title=course.title,
                    teacher_id=course.teacher_id,
                    status=course.status,
                    created_at=course.created_at,
                )
            )

    async def update(self, course: Course) -> None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course.id)
            .values(title=course.title, status=course.status)
        )
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("course not found")

    async def delete(self, course_id: UUID) -> bool:
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                delete(CourseRow).where(CourseRow.id == course_id)
            )
        return result.rowcount > 0


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        teacher_id=row.teacher_id,
        status=row.status,  # type: ignore[arg-type]
        created_at=row.created_at,
    )
