"""Submission reads and the teacher's grading actions."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, StrictFloat, StrictInt

from gradebook.api.dependencies import StoreDep, UserDep, require_any_role
from gradebook.api.errors import forbidden, http_error
from gradebook.core.errors import GradebookError
from gradebook.models.principal import ROLE_ADMIN, ROLE_TEACHER, Principal
from gradebook.models.submission import Answer, Submission
from gradebook.repos.store import Store
from gradebook.services import catalog_service, grading_service, submission_service

router = APIRouter(prefix="/v1/submissions", tags=["submissions"])

_require_reviewer = require_any_role({ROLE_TEACHER, ROLE_ADMIN})


class AnswerOut(BaseModel):
    question_id: UUID
    selected_options: list[UUID]
    text_answer: str | None
    is_correct: bool
    points: float


class SubmissionOut(BaseModel):
    id: UUID
    learner_id: str
    assignment_id: UUID
    status: str
    content: str | None
    files: list[str]
    github_url: str | None
    score: float | None
    feedback: str | None
    submitted_at: int
    graded_at: int | None
    attempt_no: int
    answers: list[AnswerOut]


class GradeIn(BaseModel):
    # Strict types: "95" or true must not be coerced into a score.
    score: StrictInt | StrictFloat
    feedback: str | None = None


class ReturnIn(BaseModel):
    feedback: str = Field(min_length=1)


def _answer_out(a: Answer) -> AnswerOut:
    return AnswerOut(
        question_id=a.question_id,
        selected_options=list(a.selected_options),
        text_answer=a.text_answer,
        is_correct=a.is_correct,
        points=a.points,
    )


def submission_out(s: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=s.id,
        learner_id=s.learner_id,
        assignment_id=s.assignment_id,
        status=s.status,
        content=s.content,
        files=list(s.files),
        github_url=s.github_url,
        score=s.score,
        feedback=s.feedback,
        submitted_at=s.submitted_at,
        graded_at=s.graded_at,
        attempt_no=s.attempt_no,
        answers=[_answer_out(a) for a in s.answers],
    )


async def _reviewable(store: Store, submission_id: UUID, principal: Principal) -> Submission:
    """Load a submission in a course the principal manages."""
    try:
        submission = await submission_service.get_submission(store, submission_id)
        assignment = await catalog_service.get_assignment(store, submission.assignment_id)
        course = await catalog_service.get_course(store, assignment.course_id)
    except GradebookError as e:
        raise http_error(e) from None
    if not principal.can_manage(course):
        raise forbidden(principal, f"cannot review submission={submission_id}")
    return submission


@router.get("/me", response_model=list[SubmissionOut])
async def my_submissions(
    store: StoreDep,
    principal: UserDep,
    course_id: UUID | None = None,
) -> list[SubmissionOut]:
    submissions = await submission_service.list_for_learner(
        store, principal.user_id, course_id=course_id
    )
    return [submission_out(s) for s in submissions]


@router.get("/pending", response_model=list[SubmissionOut])
async def pending_submissions(
    store: StoreDep,
    principal: Annotated[Principal, Depends(_require_reviewer)],
) -> list[SubmissionOut]:
    submissions = await submission_service.list_pending_for_teacher(
        store, principal.user_id
    )
    return [submission_out(s) for s in submissions]


@router.get("/{submission_id}", response_model=SubmissionOut)
async def get_submission(
    submission_id: UUID, store: StoreDep, principal: UserDep
) -> SubmissionOut:
    try:
        submission = await submission_service.get_submission(store, submission_id)
    except GradebookError as e:
        raise http_error(e) from None
    if submission.learner_id == principal.user_id:
        return submission_out(submission)
    return submission_out(await _reviewable(store, submission_id, principal))


@router.put("/{submission_id}/grade", response_model=SubmissionOut)
async def grade_submission(
    submission_id: UUID,
    payload: GradeIn,
    store: StoreDep,
    principal: UserDep,
) -> SubmissionOut:
    await _reviewable(store, submission_id, principal)
    try:
        graded = await grading_service.grade(
            store, submission_id, payload.score, payload.feedback
        )
    except GradebookError as e:
        raise http_error(e) from None
    return submission_out(graded)


@router.put("/{submission_id}/return", response_model=SubmissionOut)
async def return_submission(
    submission_id: UUID,
    payload: ReturnIn,
    store: StoreDep,
    principal: UserDep,
) -> SubmissionOut:
    await _reviewable(store, submission_id, principal)
    try:
        returned = await grading_service.return_for_revision(
            store, submission_id, payload.feedback
        )
    except GradebookError as e:
        raise http_error(e) from None
    return submission_out(returned)
