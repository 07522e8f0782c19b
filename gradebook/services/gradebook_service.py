"""Gradebook aggregation.

Every number here is recomputed from the current submission records on each
call; nothing is cached or stored. One definition per metric:

  average        mean of raw scores of GRADED submissions (not a percent);
                 None when there are none, so "no graded work" and "graded 0"
                 stay distinguishable.
  course progress
                 share of the course's assignments the learner has a GRADED
                 submission for, as a percent rounded half-up to 2 decimals.
                 Not the same thing as Enrollment.progress, which is lesson
                 completion and is only displayed alongside.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from gradebook.models.assignment import Assignment
from gradebook.models.submission import Submission, SubmissionStatus
from gradebook.repos.store import Store
from gradebook.services.catalog_service import get_assignment, get_course

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
MISSING = "-"


@dataclass(frozen=True, slots=True)
class CompletionStats:
    assignment_id: UUID
    title: str
    graded: int
    pending: int
    returned: int
    not_submitted: int


@dataclass(frozen=True, slots=True)
class Performer:
    learner_id: str
    average: float
    graded: int


@dataclass(frozen=True, slots=True)
class GradebookCell:
    assignment_id: UUID
    status: SubmissionStatus | None  # None: nothing submitted
    score: float | None


@dataclass(frozen=True, slots=True)
class GradebookRow:
    learner_id: str
    enrollment_progress: int
    average: float | None
    course_progress: float
    cells: tuple[GradebookCell, ...]


@dataclass(frozen=True, slots=True)
class CourseGradebook:
    course_id: UUID
    title: str
    assignments: tuple[Assignment, ...]
    rows: tuple[GradebookRow, ...]
    assignment_averages: dict[UUID, float | None]


@dataclass(frozen=True, slots=True)
class CourseOverview:
    course_id: UUID
    title: str
    average: float | None
    course_progress: float
    enrollment_progress: int
    graded: int
    pending: int
    returned: int
    total_assignments: int


# --- metrics ---


async def average_score_for_learner(
    store: Store, learner_id: str, course_id: UUID
) -> float | None:
    await get_course(store, course_id)
    assignment_ids = {a.id for a in await store.assignments.list_for_course(course_id)}
    mine = [
        s
        for s in await store.submissions.list_for_learner(learner_id)
        if s.assignment_id in assignment_ids
    ]
    return _mean(mine)


async def average_score_for_assignment(
    store: Store, assignment_id: UUID
) -> float | None:
    await get_assignment(store, assignment_id)
    return _mean(await store.submissions.list_for_assignments([assignment_id]))


async def completion_stats(store: Store, course_id: UUID) -> list[CompletionStats]:
    """Per assignment, oldest first; counts are over currently enrolled learners.

    For each assignment ``graded + pending + returned + not_submitted`` equals
    the number of enrolled learners.
    """
    await get_course(store, course_id)
    assignments = await store.assignments.list_for_course(course_id)
    enrolled = {e.learner_id for e in await store.enrollments.list_for_course(course_id)}
    by_assignment = _group_by_assignment(
        await store.submissions.list_for_assignments([a.id for a in assignments]),
        enrolled,
    )

    stats = []
    for a in assignments:
        statuses = [s.status for s in by_assignment.get(a.id, [])]
        graded = statuses.count("GRADED")
        pending = statuses.count("PENDING")
        returned = statuses.count("RETURNED")
        stats.append(
            CompletionStats(
                assignment_id=a.id,
                title=a.title,
                graded=graded,
                pending=pending,
                returned=returned,
                not_submitted=len(enrolled) - graded - pending - returned,
            )
        )
    return stats


async def course_progress(store: Store, learner_id: str, course_id: UUID) -> float:
    await get_course(store, course_id)
    assignments = await store.assignments.list_for_course(course_id)
    ids = {a.id for a in assignments}
    graded = sum(
        1
        for s in await store.submissions.list_for_learner(learner_id)
        if s.assignment_id in ids and s.is_graded
    )
    return _percent(graded, len(assignments))


async def top_performers(
    store: Store, course_id: UUID, limit: int = 5
) -> list[Performer]:
    """Enrolled learners with at least one graded submission, best average first.

    Learners are visited in learner_id order and the sort is stable, so ties
    come out in learner_id order.
    """
    if limit < 1:
        return []
    await get_course(store, course_id)
    assignments = await store.assignments.list_for_course(course_id)
    enrollments = await store.enrollments.list_for_course(course_id)
    by_learner = _group_by_learner(
        await store.submissions.list_for_assignments([a.id for a in assignments])
    )

    performers = []
    for e in enrollments:
        graded = [s for s in by_learner.get(e.learner_id, []) if s.is_graded]
        average = _mean(graded)
        if average is not None:
            performers.append(
                Performer(learner_id=e.learner_id, average=average, graded=len(graded))
            )
    performers.sort(key=lambda p: p.average, reverse=True)
    return performers[:limit]


# --- views ---


async def course_gradebook(store: Store, course_id: UUID) -> CourseGradebook:
    """Teacher view: one row per enrolled learner, one cell per assignment."""
    course = await get_course(store, course_id)
    assignments = await store.assignments.list_for_course(course_id)
    enrollments = await store.enrollments.list_for_course(course_id)
    submissions = await store.submissions.list_for_assignments(
        [a.id for a in assignments]
    )
    enrolled = {e.learner_id for e in enrollments}
    by_learner = _group_by_learner(submissions)
    by_assignment = _group_by_assignment(submissions, enrolled)

    rows = []
    for e in enrollments:
        mine = {s.assignment_id: s for s in by_learner.get(e.learner_id, [])}
        cells = tuple(_cell(a.id, mine.get(a.id)) for a in assignments)
        graded = sum(1 for s in mine.values() if s.is_graded)
        rows.append(
            GradebookRow(
                learner_id=e.learner_id,
                enrollment_progress=e.progress,
                average=_mean(mine.values()),
                course_progress=_percent(graded, len(assignments)),
                cells=cells,
            )
        )

    logger.debug(
        "Built gradebook course=%s learners=%d assignments=%d",
        course_id,
        len(rows),
        len(assignments),
        extra={"course_id": str(course_id)},
    )
    return CourseGradebook(
        course_id=course.id,
        title=course.title,
        assignments=tuple(assignments),
        rows=tuple(rows),
        assignment_averages={
            a.id: _mean(by_assignment.get(a.id, [])) for a in assignments
        },
    )


async def export_csv(store: Store, course_id: UUID) -> str:
    """The course gradebook as CSV; missing scores and averages are ``-``."""
    book = await course_gradebook(store, course_id)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(
        ["learner_id", *(a.title for a in book.assignments), "average", "progress"]
    )
    for row in book.rows:
        writer.writerow(
            [
                row.learner_id,
                *(_fmt(c.score) for c in row.cells),
                _fmt(row.average),
                _fmt(row.course_progress),
            ]
        )
    return buf.getvalue()


async def learner_overview(store: Store, learner_id: str) -> list[CourseOverview]:
    """Student view: one entry per enrolled course, most recent enrollment first."""
    overview = []
    for e in await store.enrollments.list_for_learner(learner_id):
        course = await store.courses.get(e.course_id)
        if course is None:
            continue
        assignments = await store.assignments.list_for_course(course.id)
        ids = {a.id for a in assignments}
        mine = [
            s
            for s in await store.submissions.list_for_learner(learner_id)
            if s.assignment_id in ids
        ]
        statuses = [s.status for s in mine]
        graded = sum(1 for s in mine if s.is_graded)
        overview.append(
            CourseOverview(
                course_id=course.id,
                title=course.title,
                average=_mean(mine),
                course_progress=_percent(graded, len(assignments)),
                enrollment_progress=e.progress,
                graded=graded,
                pending=statuses.count("PENDING"),
                returned=statuses.count("RETURNED"),
                total_assignments=len(assignments),
            )
        )
    return overview


# --- helpers ---


def _mean(submissions: Iterable[Submission]) -> float | None:
    scores = [s.score for s in submissions if s.is_graded and s.score is not None]
    if not scores:
        return None
    return sum(scores) / len(scores)


def _percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    value = Decimal(part) * 100 / Decimal(whole)
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def _cell(assignment_id: UUID, submission: Submission | None) -> GradebookCell:
    if submission is None:
        return GradebookCell(assignment_id=assignment_id, status=None, score=None)
    return GradebookCell(
        assignment_id=assignment_id,
        status=submission.status,
        score=submission.score if submission.is_graded else None,
    )


def _fmt(value: float | None) -> str:
    if value is None:
        return MISSING
    return f"{Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP):f}"


def _group_by_learner(submissions: Iterable[Submission]) -> dict[str, list[Submission]]:
    grouped: dict[str, list[Submission]] = {}
    for s in submissions:
        grouped.setdefault(s.learner_id, []).append(s)
    return grouped


def _group_by_assignment(
    submissions: Iterable[Submission], enrolled: set[str]
) -> dict[UUID, list[Submission]]:
    grouped: dict[UUID, list[Submission]] = {}
    for s in submissions:
        if s.learner_id in enrolled:
            grouped.setdefault(s.assignment_id, []).append(s)
    return grouped
