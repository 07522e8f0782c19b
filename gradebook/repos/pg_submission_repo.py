"""PostgreSQL implementation of SubmissionRepo.

``save`` is a single ``UPDATE ... WHERE id = :id AND version = :expected``;
a rowcount of zero means the row is gone or another writer bumped the
version first.
"""

from __future__ import annotations

import json
from collections.abc import Collection
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gradebook.core.errors import ConflictError, NotFoundError
from gradebook.db.tables import SubmissionRow
from gradebook.models.submission import Answer, Submission


class PgSubmissionRepo:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    async def get(self, submission_id: UUID) -> Submission | None:
        async with self._sessions() as session:
            row = await session.get(SubmissionRow, submission_id)
            return _row_to_submission(row) if row is not None else None

    async def get_for_pair(
        self, learner_id: str, assignment_id: UUID
    ) -> Submission | None:
        stmt = select(SubmissionRow).where(
            SubmissionRow.learner_id == learner_id,
            SubmissionRow.assignment_id == assignment_id,
        )
        async with self._sessions() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_submission(row) if row is not None else None

    async def list_for_assignments(
        self, assignment_ids: Collection[UUID]
    ) -> list[Submission]:
        if not assignment_ids:
            return []
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.assignment_id.in_(list(assignment_ids)))
            .order_by(SubmissionRow.learner_id, SubmissionRow.assignment_id)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_submission(r) for r in rows]

    async def list_for_learner(self, learner_id: str) -> list[Submission]:
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.learner_id == learner_id)
            .order_by(SubmissionRow.submitted_at.desc())
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_submission(r) for r in rows]

    async def add(self, submission: Submission) -> None:
        try:
            async with self._sessions() as session, session.begin():
                session.add(SubmissionRow(id=submission.id, **_columns(submission)))
        except IntegrityError:
            raise ConflictError(
                "submission already exists for this assignment"
            ) from None

    async def save(self, submission: Submission) -> None:
        stmt = (
            update(SubmissionRow)
            .where(
                SubmissionRow.id == submission.id,
                SubmissionRow.version == submission.version - 1,
            )
            .values(**_columns(submission))
        )
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 1:
                return
            exists = await session.get(SubmissionRow, submission.id)
        if exists is None:
            raise NotFoundError("submission not found")
        raise ConflictError("submission was modified concurrently")

    async def delete_for_assignment(self, assignment_id: UUID) -> int:
        stmt = delete(SubmissionRow).where(SubmissionRow.assignment_id == assignment_id)
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount

    async def delete_for_learner(
        self, learner_id: str, assignment_ids: Collection[UUID]
    ) -> int:
        if not assignment_ids:
            return 0
        stmt = delete(SubmissionRow).where(
            SubmissionRow.learner_id == learner_id,
            SubmissionRow.assignment_id.in_(list(assignment_ids)),
        )
        async with self._sessions() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount


def _columns(s: Submission) -> dict[str, object]:
    return {
        "learner_id": s.learner_id,
        "assignment_id": s.assignment_id,
        "status": s.status,
        "content": s.content,
        "files": list(s.files),
        "github_url": s.github_url,
        "score": s.score,
        "feedback": s.feedback,
        "submitted_at": s.submitted_at,
        "graded_at": s.graded_at,
        "attempt_no": s.attempt_no,
        "answers_json": json.dumps(
            [
                {
                    "question_id": str(a.question_id),
                    "selected_options": [str(o) for o in a.selected_options],
                    "text_answer": a.text_answer,
                    "is_correct": a.is_correct,
                    "points": a.points,
                }
                for a in s.answers
            ]
        ),
        "version": s.version,
    }


def _row_to_submission(row: SubmissionRow) -> Submission:
    answers = tuple(
        Answer(
            question_id=UUID(a["question_id"]),
            selected_options=tuple(UUID(o) for o in a["selected_options"]),
            text_answer=a["text_answer"],
            is_correct=a["is_correct"],
            points=a["points"],
        )
        for a in json.loads(row.answers_json or "[]")
    )
    return Submission(
        id=row.id,
        learner_id=row.learner_id,
        assignment_id=row.assignment_id,
        submitted_at=row.submitted_at,
        status=row.status,  # type: ignore[arg-type]
        content=row.content,
        files=tuple(row.files or ()),
        github_url=row.github_url,
        score=row.score,
        feedback=row.feedback,
        graded_at=row.graded_at,
        attempt_no=row.attempt_no,
        answers=answers,
        version=row.version,
    )
