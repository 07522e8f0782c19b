from __future__ import annotations

import asyncio
import math
from uuid import uuid4

import pytest

from gradebook.core.errors import NotFoundError, ValidationError
from gradebook.models.submission import Submission
from gradebook.repos.store import Store, in_memory_store
from gradebook.services import (
    catalog_service,
    enrollment_service,
    grading_service,
    submission_service,
)
from tests.conftest import LEARNER, TEACHER


@pytest.fixture
def store() -> Store:
    return in_memory_store()


@pytest.fixture
def pending(store: Store) -> Submission:
    async def build() -> Submission:
        course = await catalog_service.create_course(
            store, title="Writing", teacher_id=TEACHER
        )
        essay = await catalog_service.create_assignment(
            store, course.id, title="Essay", description="", type="PRACTICAL"
        )
        await enrollment_service.enroll(store, LEARNER, course.id)
        return await submission_service.submit(
            store, LEARNER, essay.id, content="my essay", now=1_000
        )

    return asyncio.run(build())


def _grade(store: Store, s: Submission, score: object, feedback=None, now=None):
    return asyncio.run(grading_service.grade(store, s.id, score, feedback, now=now))


def test_grade_sets_outcome(store: Store, pending: Submission) -> None:
    graded = _grade(store, pending, 95, "Great work", now=2_000)
    assert graded.status == "GRADED"
    assert graded.score == 95
    assert graded.feedback == "Great work"
    assert graded.graded_at == 2_000
    assert asyncio.run(store.submissions.get(pending.id)) == graded


@pytest.mark.parametrize("score", [0, 100, 0.5, 99.99])
def test_boundary_scores_accepted(
    store: Store, pending: Submission, score: float
) -> None:
    assert _grade(store, pending, score).score == score


@pytest.mark.parametrize(
    "score",
    [-1, 100.01, 150, 10**400, math.nan, math.inf, -math.inf, True, "95", None],
)
def test_invalid_scores_leave_record_untouched(
    store: Store, pending: Submission, score: object
) -> None:
    with pytest.raises(ValidationError):
        _grade(store, pending, score)
    assert asyncio.run(store.submissions.get(pending.id)) == pending


def test_out_of_range_message_names_max_score(
    store: Store, pending: Submission
) -> None:
    with pytest.raises(ValidationError, match="between 0 and 100"):
        _grade(store, pending, 150)


def test_grade_unknown_submission(store: Store) -> None:
    with pytest.raises(NotFoundError, match="submission not found"):
        asyncio.run(grading_service.grade(store, uuid4(), 10))


def test_regrade_overwrites(store: Store, pending: Submission) -> None:
    _grade(store, pending, 60, "ok", now=2_000)
    regraded = _grade(store, pending, 80, "better", now=3_000)
    assert (regraded.score, regraded.feedback, regraded.graded_at) == (80, "better", 3_000)


def test_grade_twice_with_same_args_is_idempotent(
    store: Store, pending: Submission
) -> None:
    first = _grade(store, pending, 88, "Nice", now=2_000)
    second = _grade(store, pending, 88, "Nice", now=2_000)
    assert (second.status, second.score, second.feedback, second.graded_at) == (
        first.status,
        first.score,
        first.feedback,
        first.graded_at,
    )


def test_regrade_without_feedback_keeps_previous(
    store: Store, pending: Submission
) -> None:
    _grade(store, pending, 60, "Keep this")
    assert _grade(store, pending, 75).feedback == "Keep this"


def test_return_for_revision(store: Store, pending: Submission) -> None:
    _grade(store, pending, 40)
    returned = asyncio.run(
        grading_service.return_for_revision(store, pending.id, "  Add citations ")
    )
    assert returned.status == "RETURNED"
    assert returned.score is None
    assert returned.graded_at is None
    assert returned.feedback == "Add citations"


@pytest.mark.parametrize("feedback", ["", "   "])
def test_return_requires_feedback(
    store: Store, pending: Submission, feedback: str
) -> None:
    with pytest.raises(ValidationError, match="feedback is required"):
        asyncio.run(grading_service.return_for_revision(store, pending.id, feedback))
    assert asyncio.run(store.submissions.get(pending.id)) == pending


def test_returned_work_can_be_graded(store: Store, pending: Submission) -> None:
    asyncio.run(grading_service.return_for_revision(store, pending.id, "Fix it"))
    graded = _grade(store, pending, 70)
    assert graded.status == "GRADED"
    assert graded.feedback == "Fix it"
