"""Scoring of TEST/QUIZ answer sheets.

Choice questions are all-or-nothing: full points when the selected option
set equals the correct option set, zero otherwise. Text questions earn zero
here and mark the whole sheet for manual review.

The raw point total is rescaled onto the assignment's max_score, so the
stored score obeys the same ``0 <= score <= max_score`` bound a teacher's
grade does.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from gradebook.core.errors import ValidationError
from gradebook.models.assignment import Assignment
from gradebook.models.submission import Answer

_CENT = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class SheetAnswer:
    question_id: UUID
    selected_options: tuple[UUID, ...] = ()
    text_answer: str | None = None


@dataclass(frozen=True, slots=True)
class ScoredSheet:
    answers: tuple[Answer, ...]
    earned_points: float
    total_points: float
    needs_review: bool
    score: float | None  # None while text answers await a teacher

    def percentage(self) -> float:
        if self.total_points == 0:
            return 0.0
        return _cents(
            Decimal(str(self.earned_points)) / Decimal(str(self.total_points)) * 100
        )


def score_sheet(assignment: Assignment, answers: list[SheetAnswer]) -> ScoredSheet:
    if not assignment.is_auto_gradable:
        raise ValidationError("only tests and quizzes with questions take answer sheets")
    if not answers:
        raise ValidationError("answers are required")

    known = {q.id for q in assignment.questions}
    by_question: dict[UUID, SheetAnswer] = {}
    for a in answers:
        if a.question_id not in known:
            raise ValidationError(f"unknown question {a.question_id}")
        if a.question_id in by_question:
            raise ValidationError(f"question {a.question_id} answered twice")
        by_question[a.question_id] = a

    scored: list[Answer] = []
    earned = 0.0
    for question in assignment.questions:
        given = by_question.get(question.id)
        if given is None:
            scored.append(Answer(question_id=question.id))
            continue
        if question.needs_manual_review:
            scored.append(
                Answer(question_id=question.id, text_answer=given.text_answer)
            )
            continue
        correct = frozenset(given.selected_options) == question.correct_option_ids
        points = question.points if correct else 0.0
        earned += points
        scored.append(
            Answer(
                question_id=question.id,
                selected_options=given.selected_options,
                is_correct=correct,
                points=points,
            )
        )

    needs_review = any(q.needs_manual_review for q in assignment.questions)
    total = assignment.total_points
    score = None if needs_review else _rescale(earned, total, assignment.max_score)
    return ScoredSheet(
        answers=tuple(scored),
        earned_points=earned,
        total_points=total,
        needs_review=needs_review,
        score=score,
    )


def _rescale(earned: float, total: float, max_score: float) -> float:
    scaled = Decimal(str(earned)) / Decimal(str(total)) * Decimal(str(max_score))
    return min(_cents(scaled), max_score)


def _cents(value: Decimal) -> float:
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))
