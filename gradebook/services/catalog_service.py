"""Course and assignment catalog.

Courses and assignments are read-only inputs to grading; this module is the
only place that creates or removes them, and removal cascades downwards:
course -> assignments -> submissions, course -> enrollments.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

from gradebook.core.clock import utc_now_ts
from gradebook.core.errors import NotFoundError, ValidationError
from gradebook.core.metrics import VALIDATION_REJECTIONS
from gradebook.models.assignment import Assignment, Question
from gradebook.models.course import COURSE_STATUSES, Course
from gradebook.repos.store import Store

logger = logging.getLogger(__name__)


async def create_course(
    store: Store, *, title: str, teacher_id: str, now: int | None = None
) -> Course:
    title = title.strip()
    if not title:
        raise ValidationError("title must be non-empty")
    course = Course.new(
        title=title,
        teacher_id=teacher_id,
        created_at=utc_now_ts() if now is None else now,
    )
    await store.courses.add(course)
    logger.info("Created course id=%s teacher=%s", course.id, teacher_id)
    return course


async def get_course(store: Store, course_id: UUID) -> Course:
    course = await store.courses.get(course_id)
    if course is None:
        raise NotFoundError("course not found")
    return course


async def list_courses(store: Store, *, teacher_id: str | None = None) -> list[Course]:
    if teacher_id is not None:
        return await store.courses.list_for_teacher(teacher_id)
    return await store.courses.list_all()


async def set_course_status(store: Store, course_id: UUID, status: str) -> Course:
    if status not in COURSE_STATUSES:
        raise ValidationError(f"status must be one of {'|'.join(COURSE_STATUSES)}")
    course = await get_course(store, course_id)
    updated = replace(course, status=status)  # type: ignore[arg-type]
    await store.courses.update(updated)
    logger.info("Course id=%s status %s -> %s", course_id, course.status, status)
    return updated


async def delete_course(store: Store, course_id: UUID) -> None:
    await get_course(store, course_id)
    for assignment in await store.assignments.list_for_course(course_id):
        await _drop_assignment(store, assignment.id)
    dropped = await store.enrollments.delete_for_course(course_id)
    await store.courses.delete(course_id)
    logger.info("Deleted course id=%s enrollments=%d", course_id, dropped)


async def create_assignment(
    store: Store,
    course_id: UUID,
    *,
    title: str,
    description: str,
    type: str,
    max_score: float = 100.0,
    passing_score: float | None = None,
    due_date: int | None = None,
    time_limit: int | None = None,
    max_attempts: int | None = None,
    questions: tuple[Question, ...] = (),
    now: int | None = None,
) -> Assignment:
    await get_course(store, course_id)
    try:
        assignment = Assignment.new(
            course_id=course_id,
            title=title,
            description=description,
            type=type,
            max_score=max_score,
            passing_score=passing_score,
            due_date=due_date,
            time_limit=time_limit,
            max_attempts=max_attempts,
            questions=questions,
            created_at=utc_now_ts() if now is None else now,
        )
    except ValidationError as e:
        VALIDATION_REJECTIONS.labels(operation="create_assignment").inc()
        logger.warning("Rejected assignment for course=%s: %s", course_id, e)
        raise
    await store.assignments.add(assignment)
    logger.info(
        "Created assignment id=%s course=%s type=%s questions=%d",
        assignment.id,
        course_id,
        assignment.type,
        len(assignment.questions),
    )
    return assignment


async def get_assignment(store: Store, assignment_id: UUID) -> Assignment:
    assignment = await store.assignments.get(assignment_id)
    if assignment is None:
        raise NotFoundError("assignment not found")
    return assignment


async def list_assignments(store: Store, course_id: UUID) -> list[Assignment]:
    """Newest first, as the course page lists them."""
    await get_course(store, course_id)
    return list(reversed(await store.assignments.list_for_course(course_id)))


async def delete_assignment(store: Store, assignment_id: UUID) -> None:
    await get_assignment(store, assignment_id)
    await _drop_assignment(store, assignment_id)


async def _drop_assignment(store: Store, assignment_id: UUID) -> None:
    dropped = await store.submissions.delete_for_assignment(assignment_id)
    await store.assignments.delete(assignment_id)
    logger.info("Deleted assignment id=%s submissions=%d", assignment_id, dropped)
