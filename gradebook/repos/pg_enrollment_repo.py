"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gradebook.core.errors import ConflictError
from gradebook.db.tables import EnrollmentRow
from gradebook.models.enrollment import Enrollment


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol.

    The (learner_id, course_id) primary key enforces one enrollment per pair.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get(self, learner_id: str, course_id: UUID) -> Enrollment | None:
        async with self._sessions() as session:
            row = await session.get(EnrollmentRow, (learner_id, course_id))
            return _row_to_enrollment(row) if row is not None else None

    async def list_for_course(self, course_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.course_id == course_id)
            .order_by(EnrollmentRow.learner_id)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def list_for_learner(self, learner_id: str) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.learner_id == learner_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def add(self, enrollment: Enrollment) -> None:
        try:
            async with self._sessions() as session, session.begin():
                session.add(
                    EnrollmentRow(
                        learner_id=enrollment.learner_id,
                        course_id=enrollment.course_id,
                        progress=enrollment.progress,
                        enrolled_at=enrollment.enrolled_at,
                        completed_at=enrollment.completed_at,
                    )
                )
        except IntegrityError:
            raise ConflictError("already enrolled") from None

    async def delete(self, learner_id: str, course_id: UUID) -> bool:
        stmt = delete(EnrollmentRow).where(
            EnrollmentRow.learner_id == learner_id,
            EnrollmentRow.course_id == course_id,
        )
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_for_course(self, course_id: UUID) -> int:
        stmt = delete(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        learner_id=row.learner_id,
        course_id=row.course_id,
        progress=row.progress,
        enrolled_at=row.enrolled_at,
        completed_at=row.completed_at,
    )
