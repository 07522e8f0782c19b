"""Learner submissions.

One record per (learner, assignment). A first submit creates it; every later
submit rewrites the same record, puts it back in the review queue (PENDING)
and drops any previous score, feedback and graded_at.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

from gradebook.core.clock import utc_now_ts
from gradebook.core.errors import ConflictError, NotFoundError, ValidationError
from gradebook.core.metrics import (
    AUTO_GRADED_TOTAL,
    SUBMISSIONS_TOTAL,
    VALIDATION_REJECTIONS,
    WRITE_CONFLICTS,
)
from gradebook.models.assignment import Assignment
from gradebook.models.submission import Submission, SubmissionPayload
from gradebook.repos.store import Store
from gradebook.services import autograder
from gradebook.services.autograder import SheetAnswer
from gradebook.services.catalog_service import get_assignment
from gradebook.services.enrollment_service import is_enrolled

logger = logging.getLogger(__name__)


async def submit(
    store: Store,
    learner_id: str,
    assignment_id: UUID,
    *,
    content: str | None = None,
    files: list[str] | None = None,
    github_url: str | None = None,
    now: int | None = None,
) -> Submission:
    try:
        payload = SubmissionPayload.build(
            content=content, files=files, github_url=github_url
        )
    except ValidationError:
        VALIDATION_REJECTIONS.labels(operation="submit").inc()
        logger.warning(
            "Rejected empty submission learner=%s assignment=%s",
            learner_id,
            assignment_id,
        )
        raise

    assignment = await _assignment_for_learner(store, learner_id, assignment_id)
    submitted_at = utc_now_ts() if now is None else now
    existing = await store.submissions.get_for_pair(learner_id, assignment_id)

    if existing is None:
        submission = Submission.new(
            learner_id=learner_id,
            assignment_id=assignment_id,
            payload=payload,
            submitted_at=submitted_at,
        )
        await _write_new(store, submission)
        SUBMISSIONS_TOTAL.labels(kind="created").inc()
        logger.info(
            "Submission created id=%s learner=%s assignment=%s",
            submission.id,
            learner_id,
            assignment_id,
            extra={"submission_id": str(submission.id), "learner_id": learner_id},
        )
        return submission

    submission = existing.resubmitted(payload=payload, submitted_at=submitted_at)
    await _write_update(store, submission)
    SUBMISSIONS_TOTAL.labels(kind="resubmitted").inc()
    logger.info(
        "Submission id=%s resubmitted (was %s) attempt=%d",
        submission.id,
        existing.status,
        submission.attempt_no,
        extra={"submission_id": str(submission.id), "learner_id": learner_id},
    )
    return submission


async def submit_test(
    store: Store,
    learner_id: str,
    assignment_id: UUID,
    answers: list[SheetAnswer],
    *,
    now: int | None = None,
) -> tuple[Submission, autograder.ScoredSheet]:
    """Score a TEST/QUIZ answer sheet and store it as the learner's submission.

    Sheets with text questions stay PENDING for a teacher; fully choice-based
    sheets land GRADED straight away.
    """
    assignment = await _assignment_for_learner(store, learner_id, assignment_id)
    try:
        sheet = autograder.score_sheet(assignment, answers)
    except ValidationError as e:
        VALIDATION_REJECTIONS.labels(operation="submit_test").inc()
        logger.warning("Rejected answer sheet assignment=%s: %s", assignment_id, e)
        raise

    submitted_at = utc_now_ts() if now is None else now
    existing = await store.submissions.get_for_pair(learner_id, assignment_id)
    if existing is None:
        submission = Submission.new(
            learner_id=learner_id,
            assignment_id=assignment_id,
            payload=SubmissionPayload(),
            submitted_at=submitted_at,
            answers=sheet.answers,
        )
        if sheet.score is not None:
            submission = _auto_graded(submission, sheet.score, submitted_at)
            # add() stores a fresh record, so the version restarts at 1
            submission = _with_version(submission, 1)
        await _write_new(store, submission)
    else:
        _check_attempts(assignment, existing)
        submission = existing.resubmitted(
            payload=SubmissionPayload(),
            submitted_at=submitted_at,
            answers=sheet.answers,
        )
        if sheet.score is not None:
            submission = _with_version(
                _auto_graded(submission, sheet.score, submitted_at),
                submission.version,
            )
        await _write_update(store, submission)

    AUTO_GRADED_TOTAL.labels(
        outcome="needs_review" if sheet.needs_review else "graded"
    ).inc()
    SUBMISSIONS_TOTAL.labels(kind="resubmitted" if existing else "created").inc()
    logger.info(
        "Answer sheet stored id=%s status=%s score=%s attempt=%d",
        submission.id,
        submission.status,
        submission.score,
        submission.attempt_no,
        extra={"submission_id": str(submission.id), "learner_id": learner_id},
    )
    return submission, sheet


async def get_submission(store: Store, submission_id: UUID) -> Submission:
    submission = await store.submissions.get(submission_id)
    if submission is None:
        raise NotFoundError("submission not found")
    return submission


async def list_for_learner(
    store: Store, learner_id: str, *, course_id: UUID | None = None
) -> list[Submission]:
    """Newest first; optionally only the assignments of one course."""
    submissions = await store.submissions.list_for_learner(learner_id)
    if course_id is None:
        return submissions
    in_course = {a.id for a in await store.assignments.list_for_course(course_id)}
    return [s for s in submissions if s.assignment_id in in_course]


async def list_pending_for_teacher(store: Store, teacher_id: str) -> list[Submission]:
    """The review queue: PENDING submissions in the teacher's courses, newest first."""
    assignment_ids: list[UUID] = []
    for course in await store.courses.list_for_teacher(teacher_id):
        assignment_ids.extend(
            a.id for a in await store.assignments.list_for_course(course.id)
        )
    submissions = await store.submissions.list_for_assignments(assignment_ids)
    pending = [s for s in submissions if s.status == "PENDING"]
    return sorted(pending, key=lambda s: s.submitted_at, reverse=True)


# --- helpers ---


async def _assignment_for_learner(
    store: Store, learner_id: str, assignment_id: UUID
) -> Assignment:
    assignment = await get_assignment(store, assignment_id)
    if not await is_enrolled(store, learner_id, assignment.course_id):
        logger.warning(
            "Submission by non-enrolled learner=%s course=%s",
            learner_id,
            assignment.course_id,
        )
        raise NotFoundError("not enrolled in this course")
    return assignment


def _check_attempts(assignment: Assignment, existing: Submission) -> None:
    """Answer sheets only; revisions of ordinary work are never capped."""
    limit = assignment.max_attempts
    if limit is not None and existing.attempt_no >= limit:
        VALIDATION_REJECTIONS.labels(operation="submit_test").inc()
        logger.warning(
            "Attempt limit reached submission=%s attempts=%d",
            existing.id,
            existing.attempt_no,
        )
        raise ValidationError(f"maximum attempts ({limit}) reached")


def _auto_graded(submission: Submission, score: float, at: int) -> Submission:
    return submission.graded(score=score, feedback=None, graded_at=at)


def _with_version(submission: Submission, version: int) -> Submission:
    return replace(submission, version=version)


async def _write_new(store: Store, submission: Submission) -> None:
    try:
        await store.submissions.add(submission)
    except ConflictError:
        WRITE_CONFLICTS.inc()
        logger.warning(
            "Concurrent first submission learner=%s assignment=%s",
            submission.learner_id,
            submission.assignment_id,
        )
        raise


async def _write_update(store: Store, submission: Submission) -> None:
    try:
        await store.submissions.save(submission)
    except ConflictError:
        WRITE_CONFLICTS.inc()
        logger.warning("Lost update rejected submission=%s", submission.id)
        raise
