from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

from gradebook.core.errors import ValidationError

AssignmentType = Literal["TEST", "PRACTICAL", "PROJECT", "QUIZ"]
ASSIGNMENT_TYPES: tuple[str, ...] = ("TEST", "PRACTICAL", "PROJECT", "QUIZ")
QUESTIONED_TYPES: tuple[str, ...] = ("TEST", "QUIZ")

QuestionType = Literal[
    "SINGLE_CHOICE", "MULTIPLE_CHOICE", "TRUE_FALSE", "SHORT_ANSWER", "LONG_ANSWER"
]
QUESTION_TYPES: tuple[str, ...] = (
    "SINGLE_CHOICE",
    "MULTIPLE_CHOICE",
    "TRUE_FALSE",
    "SHORT_ANSWER",
    "LONG_ANSWER",
)
SINGLE_ANSWER_TYPES: tuple[str, ...] = ("SINGLE_CHOICE", "TRUE_FALSE")
CHOICE_TYPES: tuple[str, ...] = ("SINGLE_CHOICE", "MULTIPLE_CHOICE", "TRUE_FALSE")
TEXT_TYPES: tuple[str, ...] = ("SHORT_ANSWER", "LONG_ANSWER")

DEFAULT_MAX_SCORE = 100.0


def is_finite_number(value: object) -> bool:
    """True for int/float values that are not bool, NaN or infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


@dataclass(frozen=True, slots=True)
class Option:
    id: UUID
    text: str
    is_correct: bool = False
    position: int = 0

    @staticmethod
    def new(*, text: str, is_correct: bool = False, position: int = 0) -> Option:
        return Option(id=uuid4(), text=text, is_correct=is_correct, position=position)


@dataclass(frozen=True, slots=True)
class Question:
    id: UUID
    text: str
    type: QuestionType
    points: float = 1.0
    position: int = 0
    options: tuple[Option, ...] = ()

    @staticmethod
    def new(
        *,
        text: str,
        type: str,
        points: float = 1.0,
        position: int = 0,
        options: tuple[Option, ...] = (),
    ) -> Question:
        if type not in QUESTION_TYPES:
            raise ValidationError(f"unknown question type {type!r}")
        if not text.strip():
            raise ValidationError("question text must be non-empty")
        if not is_finite_number(points) or points <= 0:
            raise ValidationError("question points must be a positive number")

        correct = sum(1 for o in options if o.is_correct)
        if type in SINGLE_ANSWER_TYPES and correct != 1:
            raise ValidationError(
                f"{type} question must have exactly one correct option (got {correct})"
            )
        if type == "MULTIPLE_CHOICE" and correct < 1:
            raise ValidationError("MULTIPLE_CHOICE question needs a correct option")
        if type in TEXT_TYPES and options:
            raise ValidationError(f"{type} question cannot have options")

        ordered = tuple(sorted(options, key=lambda o: o.position))
        return Question(
            id=uuid4(),
            text=text,
            type=type,  # type: ignore[arg-type]
            points=float(points),
            position=position,
            options=ordered,
        )

    @property
    def correct_option_ids(self) -> frozenset[UUID]:
        return frozenset(o.id for o in self.options if o.is_correct)

    @property
    def needs_manual_review(self) -> bool:
        return self.type in TEXT_TYPES


@dataclass(frozen=True, slots=True)
class Assignment:
    id: UUID
    course_id: UUID
    title: str
    description: str
    type: AssignmentType
    max_score: float = DEFAULT_MAX_SCORE
    passing_score: float | None = None  # percent
    due_date: int | None = None
    time_limit: int | None = None  # minutes
    max_attempts: int | None = None
    questions: tuple[Question, ...] = ()
    created_at: int = 0

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        description: str,
        type: str,
        created_at: int,
        max_score: float = DEFAULT_MAX_SCORE,
        passing_score: float | None = None,
        due_date: int | None = None,
        time_limit: int | None = None,
        max_attempts: int | None = None,
        questions: tuple[Question, ...] = (),
    ) -> Assignment:
        if not title.strip():
            raise ValidationError("title must be non-empty")
        if type not in ASSIGNMENT_TYPES:
            raise ValidationError(f"unknown assignment type {type!r}")
        if not is_finite_number(max_score) or max_score <= 0:
            raise ValidationError("max_score must be a positive number")
        if passing_score is not None and (
            not is_finite_number(passing_score) or not 0 <= passing_score <= 100
        ):
            raise ValidationError("passing_score must be a percent between 0 and 100")
        if time_limit is not None and time_limit <= 0:
            raise ValidationError("time_limit must be positive")
        if max_attempts is not None and max_attempts <= 0:
            raise ValidationError("max_attempts must be positive")
        if questions and type not in QUESTIONED_TYPES:
            raise ValidationError(f"{type} assignments cannot have questions")

        return Assignment(
            id=uuid4(),
            course_id=course_id,
            title=title.strip(),
            description=description,
            type=type,  # type: ignore[arg-type]
            max_score=float(max_score),
            passing_score=None if passing_score is None else float(passing_score),
            due_date=due_date,
            time_limit=time_limit,
            max_attempts=max_attempts,
            questions=tuple(sorted(questions, key=lambda q: q.position)),
            created_at=created_at,
        )

    @property
    def is_auto_gradable(self) -> bool:
        return self.type in QUESTIONED_TYPES and bool(self.questions)

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)
