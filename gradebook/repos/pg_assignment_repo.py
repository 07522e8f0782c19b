"""PostgreSQL implementation of AssignmentRepo.

Questions and their options live in a JSON text column; they are always read
and written together with the assignment.
"""

from __future__ import annotations

import json
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gradebook.db.tables import AssignmentRow
from gradebook.models.assignment import Assignment, Option, Question


class PgAssignmentRepo:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get(self, assignment_id: UUID) -> Assignment | None:
        async with self._sessions() as session:
            row = await session.get(AssignmentRow, assignment_id)
            return _row_to_assignment(row) if row is not None else None

    async def list_for_course(self, course_id: UUID) -> list[Assignment]:
        stmt = (
            select(AssignmentRow)
            .where(AssignmentRow.course_id == course_id)
            .order_by(AssignmentRow.created_at, AssignmentRow.id)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_assignment(r) for r in rows]

    async def add(self, assignment: Assignment) -> None:
        async with self._sessions() as session, session.begin():
            session.add(
                AssignmentRow(
                    id=assignment.id,
                    course_id=assignment.course_id,
                    title=assignment.title,
                    description=assignment.description,
                    type=assignment.type,
                    max_score=assignment.max_score,
                    passing_score=assignment.passing_score,
                    due_date=assignment.due_date,
                    time_limit=assignment.time_limit,
                    max_attempts=assignment.max_attempts,
                    questions_json=_dump_questions(assignment.questions),
                    created_at=assignment.created_at,
                )
            )

    async def delete(self, assignment_id: UUID) -> bool:
        stmt = delete(AssignmentRow).where(AssignmentRow.id == assignment_id)
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount > 0


def _dump_questions(questions: tuple[Question, ...]) -> str:
    return json.dumps(
        [
            {
                "id": str(q.id),
                "text": q.text,
                "type": q.type,
                "points": q.points,
                "position": q.position,
                "options": [
                    {
                        "id": str(o.id),
                        "text": o.text,
                        "is_correct": o.is_correct,
                        "position": o.position,
                    }
                    for o in q.options
                ],
            }
            for q in questions
        ]
    )


def _load_questions(raw: str) -> tuple[Question, ...]:
    return tuple(
        Question(
            id=UUID(q["id"]),
            text=q["text"],
            type=q["type"],
            points=q["points"],
            position=q["position"],
            options=tuple(
                Option(
                    id=UUID(o["id"]),
                    text=o["text"],
                    is_correct=o["is_correct"],
                    position=o["position"],
                )
                for o in q["options"]
            ),
        )
        for q in json.loads(raw or "[]")
    )


def _row_to_assignment(row: AssignmentRow) -> Assignment:
    return Assignment(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        description=row.description,
        type=row.type,  # type: ignore[arg-type]
        max_score=row.max_score,
        passing_score=row.passing_score,
        due_date=row.due_date,
        time_limit=row.time_limit,
        max_attempts=row.max_attempts,
        questions=_load_questions(row.questions_json),
        created_at=row.created_at,
    )
