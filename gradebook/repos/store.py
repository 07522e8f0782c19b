"""Repository bundle handed to the services.

Chosen once at import time, like the engine: Pg repositories when
DATABASE_URL is configured, in-memory ones otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gradebook.db.engine import async_session_factory
from gradebook.repos.assignment_repo import AssignmentRepo, InMemoryAssignmentRepo
from gradebook.repos.course_repo import CourseRepo, InMemoryCourseRepo
from gradebook.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from gradebook.repos.pg_assignment_repo import PgAssignmentRepo
from gradebook.repos.pg_course_repo import PgCourseRepo
from gradebook.repos.pg_enrollment_repo import PgEnrollmentRepo
from gradebook.repos.pg_submission_repo import PgSubmissionRepo
from gradebook.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo


@dataclass(frozen=True)
class Store:
    courses: CourseRepo
    enrollments: EnrollmentRepo
    assignments: AssignmentRepo
    submissions: SubmissionRepo


def in_memory_store() -> Store:
    return Store(
        courses=InMemoryCourseRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        assignments=InMemoryAssignmentRepo(),
        submissions=InMemorySubmissionRepo(),
    )


def pg_store(session_factory: async_sessionmaker[AsyncSession]) -> Store:
    return Store(
        courses=PgCourseRepo(session_factory),
        enrollments=PgEnrollmentRepo(session_factory),
        assignments=PgAssignmentRepo(session_factory),
        submissions=PgSubmissionRepo(session_factory),
    )


def clear_in_memory(target: Store) -> None:
    """Empty every in-memory repo of ``target``; Pg repos are left alone."""
    for repo in (
        target.courses,
        target.enrollments,
        target.assignments,
        target.submissions,
    ):
        clear = getattr(repo, "clear", None)
        if clear is not None:
            clear()


if async_session_factory is not None:
    store = pg_store(async_session_factory)
else:
    store = in_memory_store()
