"""Translation of service errors into HTTP responses, plus shared access checks."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status

from gradebook.core.errors import (
    ConflictError,
    GradebookError,
    NotFoundError,
    ValidationError,
)
from gradebook.models.course import Course
from gradebook.models.principal import Principal
from gradebook.repos.store import Store
from gradebook.services import catalog_service, enrollment_service

logger = logging.getLogger(__name__)


def http_error(e: GradebookError) -> HTTPException:
    if isinstance(e, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_CONTENT
    elif isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    logger.warning("Request rejected status=%d: %s", code, e)
    return HTTPException(status_code=code, detail=str(e))


def forbidden(principal: Principal, what: str) -> HTTPException:
    logger.warning("Access denied: user=%s %s", principal.user_id, what)
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )


async def managed_course(store: Store, course_id: UUID, principal: Principal) -> Course:
    """Load a course the principal owns (or any course, for an admin)."""
    try:
        course = await catalog_service.get_course(store, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    if not principal.can_manage(course):
        raise forbidden(principal, f"does not manage course={course_id}")
    return course


async def readable_course(
    store: Store, course_id: UUID, principal: Principal
) -> Course:
    """Load a course the principal manages or is enrolled in."""
    try:
        course = await catalog_service.get_course(store, course_id)
    except GradebookError as e:
        raise http_error(e) from None
    if principal.can_manage(course):
        return course
    if not await enrollment_service.is_enrolled(store, principal.user_id, course_id):
        raise forbidden(principal, f"not enrolled in course={course_id}")
    return course
