from __future__ import annotations

from uuid import uuid4

import pytest

from gradebook.core.errors import ValidationError
from gradebook.models.submission import Submission, SubmissionPayload


def _submission() -> Submission:
    return Submission.new(
        learner_id="learner-1",
        assignment_id=uuid4(),
        payload=SubmissionPayload.build(content="my essay"),
        submitted_at=100,
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"content": "   "},
        {"files": ["", "  "]},
        {"github_url": " "},
        {"content": "", "files": [], "github_url": None},
    ],
)
def test_payload_requires_some_work(kwargs: dict) -> None:
    with pytest.raises(ValidationError, match="provide content, files, or a GitHub URL"):
        SubmissionPayload.build(**kwargs)


def test_payload_normalises_blanks() -> None:
    p = SubmissionPayload.build(
        content="  ", files=[" report.pdf ", ""], github_url=" https://github.com/x/y "
    )
    assert p.content is None
    assert p.files == ("report.pdf",)
    assert p.github_url == "https://github.com/x/y"


def test_new_submission_is_pending_first_attempt() -> None:
    s = _submission()
    assert s.status == "PENDING"
    assert s.score is None
    assert s.graded_at is None
    assert s.attempt_no == 1
    assert s.version == 1


def test_graded_keeps_previous_feedback_when_none_given() -> None:
    s = _submission().graded(score=80, feedback="Good", graded_at=200)
    regraded = s.graded(score=90, feedback=None, graded_at=300)
    assert regraded.score == 90
    assert regraded.feedback == "Good"
    assert regraded.graded_at == 300
    assert regraded.version == 3


def test_resubmitted_clears_outcome() -> None:
    graded = _submission().graded(score=80, feedback="Good", graded_at=200)
    again = graded.resubmitted(
        payload=SubmissionPayload.build(content="v2"), submitted_at=400
    )
    assert again.status == "PENDING"
    assert (again.score, again.feedback, again.graded_at) == (None, None, None)
    assert again.content == "v2"
    assert again.submitted_at == 400
    assert again.attempt_no == 2
    assert again.id == graded.id


def test_returned_clears_score_and_keeps_feedback() -> None:
    graded = _submission().graded(score=80, feedback=None, graded_at=200)
    returned = graded.returned(feedback="Cite your sources")
    assert returned.status == "RETURNED"
    assert returned.score is None
    assert returned.graded_at is None
    assert returned.feedback == "Cite your sources"
    assert returned.is_graded is False
