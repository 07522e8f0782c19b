"""Assignment endpoints: read, delete, submit work, submit an answer sheet."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from gradebook.api.dependencies import StoreDep, UserDep
from gradebook.api.errors import http_error, managed_course, readable_course
from gradebook.api.submissions import SubmissionOut, submission_out
from gradebook.core.errors import GradebookError
from gradebook.models.assignment import DEFAULT_MAX_SCORE, Assignment, Option, Question
from gradebook.repos.store import Store
from gradebook.services import catalog_service, gradebook_service, submission_service
from gradebook.services.autograder import SheetAnswer

router = APIRouter(prefix="/v1/assignments", tags=["assignments"])


# --- schemas ---


class OptionIn(BaseModel):
    text: str
    is_correct: bool = False
    position: int = 0


class QuestionIn(BaseModel):
    text: str
    type: Literal[
        "SINGLE_CHOICE", "MULTIPLE_CHOICE", "TRUE_FALSE", "SHORT_ANSWER", "LONG_ANSWER"
    ]
    points: float = 1.0
    position: int = 0
    options: list[OptionIn] = []


class AssignmentIn(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str = ""
    type: Literal["TEST", "PRACTICAL", "PROJECT", "QUIZ"]
    max_score: float = DEFAULT_MAX_SCORE
    passing_score: float | None = None
    due_date: int | None = None
    time_limit: int | None = None
    max_attempts: int | None = None
    questions: list[QuestionIn] = []


class OptionOut(BaseModel):
    id: UUID
    text: str
    position: int
    is_correct: bool | None  # hidden from learners


class QuestionOut(BaseModel):
    id: UUID
    text: str
    type: str
    points: float
    position: int
    options: list[OptionOut]


class AssignmentOut(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    description: str
    type: str
    max_score: float
    passing_score: float | None
    due_date: int | None
    time_limit: int | None
    max_attempts: int | None
    questions: list[QuestionOut]
    created_at: int


class SubmissionIn(BaseModel):
    content: str | None = None
    files: list[str] = []
    github_url: str | None = None


class SheetAnswerIn(BaseModel):
    question_id: UUID
    selected_options: list[UUID] = []
    text_answer: str | None = None


class TestSubmissionIn(BaseModel):
    answers: list[SheetAnswerIn]


class TestResultOut(BaseModel):
    submission: SubmissionOut
    earned_points: float
    total_points: float
    percentage: float
    needs_review: bool
    passed: bool | None  # None until there is a score to compare


class AverageOut(BaseModel):
    assignment_id: UUID
    average: float | None


# --- conversions ---


def build_questions(questions: list[QuestionIn]) -> tuple[Question, ...]:
    return tuple(
        Question.new(
            text=q.text,
            type=q.type,
            points=q.points,
            position=q.position or i,
            options=tuple(
                Option.new(text=o.text, is_correct=o.is_correct, position=o.position or j)
                for j, o in enumerate(q.options)
            ),
        )
        for i, q in enumerate(questions)
    )


def assignment_out(a: Assignment, *, reveal_answers: bool) -> AssignmentOut:
    return AssignmentOut(
        id=a.id,
        course_id=a.course_id,
        title=a.title,
        description=a.description,
        type=a.type,
        max_score=a.max_score,
        passing_score=a.passing_score,
        due_date=a.due_date,
        time_limit=a.time_limit,
        max_attempts=a.max_attempts,
        questions=[
            QuestionOut(
                id=q.id,
                text=q.text,
                type=q.type,
                points=q.points,
                position=q.position,
                options=[
                    OptionOut(
                        id=o.id,
                        text=o.text,
                        position=o.position,
                        is_correct=o.is_correct if reveal_answers else None,
                    )
                    for o in q.options
                ],
            )
            for q in a.questions
        ],
        created_at=a.created_at,
    )


async def _load(store: Store, assignment_id: UUID) -> Assignment:
    try:
        return await catalog_service.get_assignment(store, assignment_id)
    except GradebookError as e:
        raise http_error(e) from None


# --- endpoints ---


@router.get("/{assignment_id}", response_model=AssignmentOut)
async def get_assignment(
    assignment_id: UUID, store: StoreDep, principal: UserDep
) -> AssignmentOut:
    assignment = await _load(store, assignment_id)
    course = await readable_course(store, assignment.course_id, principal)
    return assignment_out(assignment, reveal_answers=principal.can_manage(course))


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: UUID, store: StoreDep, principal: UserDep
) -> Response:
    assignment = await _load(store, assignment_id)
    await managed_course(store, assignment.course_id, principal)
    await catalog_service.delete_assignment(store, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{assignment_id}/submission", response_model=SubmissionOut)
async def submit_work(
    assignment_id: UUID,
    payload: SubmissionIn,
    store: StoreDep,
    principal: UserDep,
) -> SubmissionOut:
    try:
        submission = await submission_service.submit(
            store,
            principal.user_id,
            assignment_id,
            content=payload.content,
            files=payload.files,
            github_url=payload.github_url,
        )
    except GradebookError as e:
        raise http_error(e) from None
    return submission_out(submission)


@router.post("/{assignment_id}/test-submission", response_model=TestResultOut)
async def submit_test(
    assignment_id: UUID,
    payload: TestSubmissionIn,
    store: StoreDep,
    principal: UserDep,
) -> TestResultOut:
    answers = [
        SheetAnswer(
            question_id=a.question_id,
            selected_options=tuple(a.selected_options),
            text_answer=a.text_answer,
        )
        for a in payload.answers
    ]
    try:
        submission, sheet = await submission_service.submit_test(
            store, principal.user_id, assignment_id, answers
        )
        assignment = await catalog_service.get_assignment(store, assignment_id)
    except GradebookError as e:
        raise http_error(e) from None

    passed = None
    if submission.score is not None and assignment.passing_score is not None:
        passed = submission.score / assignment.max_score * 100 >= assignment.passing_score
    return TestResultOut(
        submission=submission_out(submission),
        earned_points=sheet.earned_points,
        total_points=sheet.total_points,
        percentage=sheet.percentage(),
        needs_review=sheet.needs_review,
        passed=passed,
    )


@router.get("/{assignment_id}/average", response_model=AverageOut)
async def assignment_average(
    assignment_id: UUID, store: StoreDep, principal: UserDep
) -> AverageOut:
    assignment = await _load(store, assignment_id)
    await managed_course(store, assignment.course_id, principal)
    average = await gradebook_service.average_score_for_assignment(store, assignment_id)
    return AverageOut(assignment_id=assignment_id, average=average)
