"""Teacher-side transitions of a submission: grade and return for revision.

Validation happens before anything is written; a rejected grade leaves the
stored record exactly as it was.
"""

from __future__ import annotations

import logging
from typing import NoReturn
from uuid import UUID

from gradebook.core.clock import utc_now_ts
from gradebook.core.errors import ConflictError, ValidationError
from gradebook.core.metrics import (
    GRADING_TRANSITIONS,
    VALIDATION_REJECTIONS,
    WRITE_CONFLICTS,
)
from gradebook.models.assignment import is_finite_number
from gradebook.models.submission import Submission
from gradebook.repos.store import Store
from gradebook.services.catalog_service import get_assignment
from gradebook.services.submission_service import get_submission

logger = logging.getLogger(__name__)


async def grade(
    store: Store,
    submission_id: UUID,
    score: object,
    feedback: str | None = None,
    *,
    now: int | None = None,
) -> Submission:
    """Set a GRADED outcome.

    ``score`` must be a real finite number in ``[0, max_score]``. Passing
    ``feedback=None`` keeps whatever feedback the submission already had.
    Grading an already graded submission overwrites the previous outcome.
    """
    current = await get_submission(store, submission_id)
    assignment = await get_assignment(store, current.assignment_id)

    if not is_finite_number(score):
        _reject("grade", submission_id, "score must be a finite number")
    value = float(score)  # type: ignore[arg-type]
    if value < 0 or value > assignment.max_score:
        _reject(
            "grade",
            submission_id,
            f"score must be between 0 and {assignment.max_score:g}",
        )

    updated = current.graded(
        score=value,
        feedback=feedback,
        graded_at=utc_now_ts() if now is None else now,
    )
    await _save(store, updated)
    GRADING_TRANSITIONS.labels(to_status="GRADED").inc()
    logger.info(
        "Graded submission id=%s score=%s (was %s)",
        submission_id,
        value,
        current.status,
        extra={"submission_id": str(submission_id)},
    )
    return updated


async def return_for_revision(
    store: Store, submission_id: UUID, feedback: str
) -> Submission:
    """Send the work back without a score; the learner's next submit re-queues it."""
    current = await get_submission(store, submission_id)
    if not isinstance(feedback, str) or not feedback.strip():
        _reject("return", submission_id, "feedback is required when returning work")

    updated = current.returned(feedback=feedback.strip())
    await _save(store, updated)
    GRADING_TRANSITIONS.labels(to_status="RETURNED").inc()
    logger.info(
        "Returned submission id=%s for revision (was %s)",
        submission_id,
        current.status,
        extra={"submission_id": str(submission_id)},
    )
    return updated


def _reject(operation: str, submission_id: UUID, message: str) -> NoReturn:
    VALIDATION_REJECTIONS.labels(operation=operation).inc()
    logger.warning("Rejected %s for submission=%s: %s", operation, submission_id, message)
    raise ValidationError(message)


async def _save(store: Store, submission: Submission) -> None:
    try:
        await store.submissions.save(submission)
    except ConflictError:
        WRITE_CONFLICTS.inc()
        logger.warning("Lost update rejected submission=%s", submission.id)
        raise
