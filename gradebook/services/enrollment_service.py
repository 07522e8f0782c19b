"""Enrollment registry.

Progress on an enrollment is maintained by the lesson-completion tracker;
nothing here writes it.
"""

from __future__ import annotations

import logging
from uuid import UUID

from gradebook.core.clock import utc_now_ts
from gradebook.core.errors import NotFoundError
from gradebook.models.enrollment import Enrollment
from gradebook.repos.store import Store
from gradebook.services.catalog_service import get_course

logger = logging.getLogger(__name__)


async def enroll(
    store: Store, learner_id: str, course_id: UUID, *, now: int | None = None
) -> Enrollment:
    await get_course(store, course_id)
    enrollment = Enrollment.new(
        learner_id=learner_id,
        course_id=course_id,
        enrolled_at=utc_now_ts() if now is None else now,
    )
    await store.enrollments.add(enrollment)
    logger.info("Enrolled learner=%s course=%s", learner_id, course_id)
    return enrollment


async def unenroll(store: Store, learner_id: str, course_id: UUID) -> None:
    """Remove the enrollment and the learner's submissions in that course."""
    if not await store.enrollments.delete(learner_id, course_id):
        raise NotFoundError("enrollment not found")
    assignment_ids = [a.id for a in await store.assignments.list_for_course(course_id)]
    dropped = await store.submissions.delete_for_learner(learner_id, assignment_ids)
    logger.info(
        "Unenrolled learner=%s course=%s submissions=%d",
        learner_id,
        course_id,
        dropped,
    )


async def get_enrollment(store: Store, learner_id: str, course_id: UUID) -> Enrollment:
    enrollment = await store.enrollments.get(learner_id, course_id)
    if enrollment is None:
        raise NotFoundError("not enrolled in this course")
    return enrollment


async def list_for_course(store: Store, course_id: UUID) -> list[Enrollment]:
    await get_course(store, course_id)
    return await store.enrollments.list_for_course(course_id)


async def list_for_learner(store: Store, learner_id: str) -> list[Enrollment]:
    return await store.enrollments.list_for_learner(learner_id)


async def is_enrolled(store: Store, learner_id: str, course_id: UUID) -> bool:
    return await store.enrollments.get(learner_id, course_id) is not None
