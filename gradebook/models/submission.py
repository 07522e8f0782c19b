from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal
from uuid import UUID, uuid4

from gradebook.core.errors import ValidationError

SubmissionStatus = Literal["PENDING", "GRADED", "RETURNED"]
SUBMISSION_STATUSES: tuple[str, ...] = ("PENDING", "GRADED", "RETURNED")


@dataclass(frozen=True, slots=True)
class SubmissionPayload:
    """Learner-supplied work, normalised: blanks become None / dropped."""

    content: str | None = None
    files: tuple[str, ...] = ()
    github_url: str | None = None

    @staticmethod
    def build(
        *,
        content: str | None = None,
        files: list[str] | tuple[str, ...] | None = None,
        github_url: str | None = None,
    ) -> SubmissionPayload:
        text = content if content and content.strip() else None
        refs = tuple(f.strip() for f in (files or ()) if f and f.strip())
        url = github_url.strip() if github_url and github_url.strip() else None
        if text is None and not refs and url is None:
            raise ValidationError("provide content, files, or a GitHub URL")
        return SubmissionPayload(content=text, files=refs, github_url=url)


@dataclass(frozen=True, slots=True)
class Answer:
    """One auto-graded answer of a test/quiz submission."""

    question_id: UUID
    selected_options: tuple[UUID, ...] = ()
    text_answer: str | None = None
    is_correct: bool = False
    points: float = 0.0


@dataclass(frozen=True, slots=True)
class Submission:
    id: UUID
    learner_id: str
    assignment_id: UUID
    submitted_at: int
    status: SubmissionStatus = "PENDING"
    content: str | None = None
    files: tuple[str, ...] = ()
    github_url: str | None = None
    score: float | None = None
    feedback: str | None = None
    graded_at: int | None = None
    attempt_no: int = 1
    answers: tuple[Answer, ...] = ()
    version: int = 1

    @staticmethod
    def new(
        *,
        learner_id: str,
        assignment_id: UUID,
        payload: SubmissionPayload,
        submitted_at: int,
        answers: tuple[Answer, ...] = (),
    ) -> Submission:
        return Submission(
            id=uuid4(),
            learner_id=learner_id,
            assignment_id=assignment_id,
            submitted_at=submitted_at,
            content=payload.content,
            files=payload.files,
            github_url=payload.github_url,
            answers=answers,
        )

    # --- transitions: each returns the next version of the record ---

    def resubmitted(
        self,
        *,
        payload: SubmissionPayload,
        submitted_at: int,
        answers: tuple[Answer, ...] = (),
    ) -> Submission:
        """Back to PENDING with new work; the previous outcome is discarded."""
        return replace(
            self,
            status="PENDING",
            content=payload.content,
            files=payload.files,
            github_url=payload.github_url,
            score=None,
            feedback=None,
            graded_at=None,
            submitted_at=submitted_at,
            attempt_no=self.attempt_no + 1,
            answers=answers,
            version=self.version + 1,
        )

    def graded(self, *, score: float, feedback: str | None, graded_at: int) -> Submission:
        return replace(
            self,
            status="GRADED",
            score=score,
            feedback=feedback if feedback is not None else self.feedback,
            graded_at=graded_at,
            version=self.version + 1,
        )

    def returned(self, *, feedback: str) -> Submission:
        return replace(
            self,
            status="RETURNED",
            score=None,
            feedback=feedback,
            graded_at=None,
            version=self.version + 1,
        )

    @property
    def is_graded(self) -> bool:
        return self.status == "GRADED" and self.score is not None
