"""Course, enrollment and course-assignment endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from gradebook.api.assignments import (
    AssignmentIn,
    AssignmentOut,
    assignment_out,
    build_questions,
)
from gradebook.api.dependencies import StoreDep, UserDep, require_any_role
from gradebook.api.errors import http_error, managed_course, readable_course
from gradebook.core.errors import GradebookError
from gradebook.core.metrics import VALIDATION_REJECTIONS
from gradebook.models.course import Course, CourseStatus
from gradebook.models.enrollment import Enrollment
from gradebook.models.principal import ROLE_ADMIN, ROLE_TEACHER, Principal
from gradebook.services import catalog_service, enrollment_service

router = APIRouter(prefix="/v1/courses", tags=["courses"])

_require_author = require_any_role({ROLE_TEACHER, ROLE_ADMIN})


class CourseIn(BaseModel):
    title: str = Field(min_length=1, max_length=500)


class CourseStatusIn(BaseModel):
    status: CourseStatus


class CourseOut(BaseModel):
    id: UUID
    title: str
    teacher_id: str
    status: str
    created_at: int


class EnrollIn(BaseModel):
    learner_id: str = Field(min_length=1)


class EnrollmentOut(BaseModel):
    learner_id: str
    course_id: UUID
    progress: int
    enrolled_at: int
    completed: bool
    completed_at: int | None


def _course_out(c: Course) -> CourseOut:
    return CourseOut(
        id=c.id,
        title=c.title,
        teacher_id=c.teacher_id,
        status=c.status,
        created_at=c.created_at,
    )


def _enrollment_out(e: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        learner_id=e.learner_id,
        course_id=e.course_id,
        progress=e.progress,
        enrolled_at=e.enrolled_at,
        completed=e.is_completed,
        completed_at=e.completed_at,
    )


@router.get("", response_model=list[CourseOut])
async def list_courses(
    store: StoreDep,
    _principal: UserDep,
    teacher_id: str | None = None,
) -> list[CourseOut]:
    courses = await catalog_service.list_courses(store, teacher_id=teacher_id)
    return [_course_out(c) for c in courses]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseIn,
    store: StoreDep,
    principal: Annotated[Principal, Depends(_require_author)],
) -> CourseOut:
    try:
        course = await catalog_service.create_course(
            store, title=payload.title, teacher_id=principal.user_id
        )
    except GradebookError as e:
        raise http_error(e) from None
    return _course_out(course)


@router.get("/{course_id}", response_model=CourseOut)
async def get_course(course_id: UUID, store: StoreDep, _principal: UserDep) -> CourseOut:
    try:
        return _course_out(await catalog_service.get_course(store, course_id))
    except GradebookError as e:
        raise http_error(e) from None


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: UUID, store: StoreDep, principal: UserDep) -> Response:
    await managed_course(store, course_id, principal)
    await catalog_service.delete_course(store, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{course_id}/status", response_model=CourseOut)
async def set_course_status(
    course_id: UUID,
    payload: CourseStatusIn,
    store: StoreDep,
    principal: UserDep,
) -> CourseOut:
    await managed_course(store, course_id, principal)
    try:
        course = await catalog_service.set_course_status(store, course_id, payload.status)
    except GradebookError as e:
        raise http_error(e) from None
    return _course_out(course)


# --- enrollment ---


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> EnrollmentOut:
    try:
        enrollment = await enrollment_service.enroll(store, principal.user_id, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    return _enrollment_out(enrollment)


@router.delete("/{course_id}/enroll", status_code=status.HTTP_204_NO_CONTENT)
async def leave_course(course_id: UUID, store: StoreDep, principal: UserDep) -> Response:
    try:
        await enrollment_service.unenroll(store, principal.user_id, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/enrollments", response_model=list[EnrollmentOut])
async def list_enrollments(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> list[EnrollmentOut]:
    await managed_course(store, course_id, principal)
    enrollments = await enrollment_service.list_for_course(store, course_id)
    return [_enrollment_out(e) for e in enrollments]


@router.post(
    "/{course_id}/enrollments",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_learner(
    course_id: UUID,
    payload: EnrollIn,
    store: StoreDep,
    principal: UserDep,
) -> EnrollmentOut:
    await managed_course(store, course_id, principal)
    try:
        enrollment = await enrollment_service.enroll(store, payload.learner_id, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    return _enrollment_out(enrollment)


# --- assignments ---


@router.get("/{course_id}/assignments", response_model=list[AssignmentOut])
async def list_assignments(
    course_id: UUID, store: StoreDep, principal: UserDep
) -> list[AssignmentOut]:
    course = await readable_course(store, course_id, principal)
    assignments = await catalog_service.list_assignments(store, course_id)
    reveal = principal.can_manage(course)
    return [assignment_out(a, reveal_answers=reveal) for a in assignments]


@router.post(
    "/{course_id}/assignments",
    response_model=AssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_assignment(
    course_id: UUID,
    payload: AssignmentIn,
    store: StoreDep,
    principal: UserDep,
) -> AssignmentOut:
    await managed_course(store, course_id, principal)
    try:
        questions = build_questions(payload.questions)
    except GradebookError as e:
        VALIDATION_REJECTIONS.labels(operation="create_assignment").inc()
        raise http_error(e) from None
    try:
        assignment = await catalog_service.create_assignment(
            store,
            course_id,
            title=payload.title,
            description=payload.description,
            type=payload.type,
            max_score=payload.max_score,
            passing_score=payload.passing_score,
            due_date=payload.due_date,
            time_limit=payload.time_limit,
            max_attempts=payload.max_attempts,
            questions=questions,
        )
    except GradebookError as e:
        raise http_error(e) from None
    return assignment_out(assignment, reveal_answers=True)
