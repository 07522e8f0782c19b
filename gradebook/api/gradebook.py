"""Gradebook views: teacher course book, completion, rankings, CSV and the learner's own view."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from gradebook.api.dependencies import StoreDep, UserDep
from gradebook.api.errors import forbidden, http_error, managed_course
from gradebook.core.errors import GradebookError
from gradebook.services import catalog_service, enrollment_service, gradebook_service

router = APIRouter(prefix="/v1/gradebook", tags=["gradebook"])


class CellOut(BaseModel):
    assignment_id: UUID
    status: str | None
    score: float | None


class RowOut(BaseModel):
    learner_id: str
    enrollment_progress: int
    average: float | None
    course_progress: float
    cells: list[CellOut]


class ColumnOut(BaseModel):
    assignment_id: UUID
    title: str
    type: str
    max_score: float
    average: float | None


class CourseGradebookOut(BaseModel):
    course_id: UUID
    title: str
    assignments: list[ColumnOut]
    rows: list[RowOut]


class CompletionOut(BaseModel):
    assignment_id: UUID
    title: str
    graded: int
    pending: int
    returned: int
    not_submitted: int


class PerformerOut(BaseModel):
    learner_id: str
    average: float
    graded: int


class LearnerSummaryOut(BaseModel):
    learner_id: str
    course_id: UUID
    average: float | None
    course_progress: float
    enrollment_progress: int


class CourseOverviewOut(BaseModel):
    course_id: UUID
    title: str
    average: float | None
    course_progress: float
    enrollment_progress: int
    graded: int
    pending: int
    returned: int
    total_assignments: int


@router.get("/courses/{course_id}", response_model=CourseGradebookOut)
async def course_gradebook(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> CourseGradebookOut:
    await managed_course(store, course_id, principal)
    book = await gradebook_service.course_gradebook(store, course_id)
    return CourseGradebookOut(
        course_id=book.course_id,
        title=book.title,
        assignments=[
            ColumnOut(
                assignment_id=a.id,
                title=a.title,
                type=a.type,
                max_score=a.max_score,
                average=book.assignment_averages[a.id],
            )
            for a in book.assignments
        ],
        rows=[
            RowOut(
                learner_id=r.learner_id,
                enrollment_progress=r.enrollment_progress,
                average=r.average,
                course_progress=r.course_progress,
                cells=[
                    CellOut(assignment_id=c.assignment_id, status=c.status, score=c.score)
                    for c in r.cells
                ],
            )
            for r in book.rows
        ],
    )


@router.get("/courses/{course_id}/completion", response_model=list[CompletionOut])
async def course_completion(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> list[CompletionOut]:
    await managed_course(store, course_id, principal)
    stats = await gradebook_service.completion_stats(store, course_id)
    return [
        CompletionOut(
            assignment_id=s.assignment_id,
            title=s.title,
            graded=s.graded,
            pending=s.pending,
            returned=s.returned,
            not_submitted=s.not_submitted,
        )
        for s in stats
    ]


@router.get("/courses/{course_id}/top", response_model=list[PerformerOut])
async def top_performers(
    course_id: UUID,
    store: StoreDep,
    principal: UserDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
) -> list[PerformerOut]:
    await managed_course(store, course_id, principal)
    performers = await gradebook_service.top_performers(store, course_id, limit)
    return [
        PerformerOut(learner_id=p.learner_id, average=p.average, graded=p.graded)
        for p in performers
    ]


@router.get("/courses/{course_id}/export.csv", response_class=PlainTextResponse)
async def export_course_csv(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> PlainTextResponse:
    course = await managed_course(store, course_id, principal)
    body = await gradebook_service.export_csv(store, course_id)
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="gradebook-{course.id}.csv"'
        },
    )


@router.get(
    "/courses/{course_id}/learners/{learner_id}", response_model=LearnerSummaryOut
)
async def learner_summary(
    course_id: UUID, learner_id: str, store: StoreDep, principal: UserDep
) -> LearnerSummaryOut:
    try:
        course = await catalog_service.get_course(store, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    if learner_id != principal.user_id and not principal.can_manage(course):
        raise forbidden(principal, f"cannot read grades of learner={learner_id}")

    try:
        enrollment = await enrollment_service.get_enrollment(store, learner_id, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    return LearnerSummaryOut(
        learner_id=learner_id,
        course_id=course_id,
        average=await gradebook_service.average_score_for_learner(
            store, learner_id, course_id
        ),
        course_progress=await gradebook_service.course_progress(
            store, learner_id, course_id
        ),
        enrollment_progress=enrollment.progress,
    )


@router.get("/me", response_model=list[CourseOverviewOut])
async def my_gradebook(store: StoreDep, principal: UserDep) -> list[CourseOverviewOut]:
    overview = await gradebook_service.learner_overview(store, principal.user_id)
    return [
        CourseOverviewOut(
            course_id=o.course_id,
            title=o.title,
            average=o.average,
            course_progress=o.course_progress,
            enrollment_progress=o.enrollment_progress,
            graded=o.graded,
            pending=o.pending,
            returned=o.returned,
            total_assignments=o.total_assignments,
        )
        for o in overview
    ]
