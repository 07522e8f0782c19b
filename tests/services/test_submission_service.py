from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from uuid import uuid4

import pytest

from gradebook.core.errors import ConflictError, NotFoundError, ValidationError
from gradebook.models.assignment import Assignment
from gradebook.models.course import Course
from gradebook.repos.store import Store, in_memory_store
from gradebook.services import (
    catalog_service,
    enrollment_service,
    grading_service,
    submission_service,
)
from gradebook.services.autograder import SheetAnswer
from tests.conftest import LEARNER, OTHER_LEARNER, TEACHER, quiz_questions


@dataclass
class World:
    store: Store
    course: Course
    essay: Assignment


@pytest.fixture
def world() -> World:
    async def build() -> World:
        store = in_memory_store()
        course = await catalog_service.create_course(
            store, title="Writing", teacher_id=TEACHER
        )
        essay = await catalog_service.create_assignment(
            store, course.id, title="Essay", description="", type="PRACTICAL"
        )
        await enrollment_service.enroll(store, LEARNER, course.id)
        return World(store, course, essay)

    return asyncio.run(build())


def _submit(w: World, learner: str = LEARNER, now: int | None = None, **payload):
    payload = payload or {"content": "my essay"}
    return asyncio.run(
        submission_service.submit(w.store, learner, w.essay.id, now=now, **payload)
    )


def test_first_submit_creates_pending_record(world: World) -> None:
    s = _submit(world, now=1_000)
    assert s.status == "PENDING"
    assert s.score is None and s.feedback is None and s.graded_at is None
    assert s.submitted_at == 1_000
    assert s.attempt_no == 1
    assert asyncio.run(world.store.submissions.get(s.id)) == s


def test_empty_payload_writes_nothing(world: World) -> None:
    with pytest.raises(ValidationError):
        _submit(world, content="  ", files=[""])
    assert asyncio.run(
        world.store.submissions.get_for_pair(LEARNER, world.essay.id)
    ) is None


def test_unknown_assignment_is_not_found(world: World) -> None:
    with pytest.raises(NotFoundError, match="assignment not found"):
        asyncio.run(
            submission_service.submit(world.store, LEARNER, uuid4(), content="x")
        )


def test_not_enrolled_learner_rejected(world: World) -> None:
    with pytest.raises(NotFoundError, match="not enrolled"):
        _submit(world, learner=OTHER_LEARNER)


def test_resubmit_reuses_record_and_clears_grade(world: World) -> None:
    first = _submit(world, now=1_000)
    asyncio.run(grading_service.grade(world.store, first.id, 70, "Needs work"))

    again = _submit(world, now=2_000, github_url="https://github.com/l/essay")
    assert again.id == first.id
    assert again.status == "PENDING"
    assert (again.score, again.feedback, again.graded_at) == (None, None, None)
    assert again.content is None
    assert again.github_url == "https://github.com/l/essay"
    assert again.submitted_at == 2_000
    assert again.attempt_no == 2
    assert len(asyncio.run(world.store.submissions.list_for_learner(LEARNER))) == 1


def test_resubmit_after_return_goes_back_to_pending(world: World) -> None:
    s = _submit(world)
    asyncio.run(grading_service.return_for_revision(world.store, s.id, "Add sources"))
    again = _submit(world, content="with sources")
    assert again.status == "PENDING"
    assert again.feedback is None


def test_returned_work_can_be_revised_past_attempt_limit(world: World) -> None:
    limited = asyncio.run(
        catalog_service.create_assignment(
            world.store,
            world.course.id,
            title="Lab",
            description="",
            type="PRACTICAL",
            max_attempts=1,
        )
    )

    async def go():
        first = await submission_service.submit(
            world.store, LEARNER, limited.id, content="x"
        )
        await grading_service.return_for_revision(world.store, first.id, "please redo")
        return await submission_service.submit(
            world.store, LEARNER, limited.id, content="y"
        )

    revised = asyncio.run(go())
    assert revised.status == "PENDING"
    assert revised.content == "y"
    assert revised.attempt_no == 2
    assert revised.feedback is None


def test_stale_write_is_rejected(world: World) -> None:
    s = _submit(world)
    asyncio.run(grading_service.grade(world.store, s.id, 50))

    # A writer still holding the original version loses.
    stale = replace(s, content="late", version=s.version + 1)
    with pytest.raises(ConflictError):
        asyncio.run(world.store.submissions.save(stale))
    assert asyncio.run(world.store.submissions.get(s.id)).score == 50


def test_duplicate_first_submission_conflicts(world: World) -> None:
    s = _submit(world)
    with pytest.raises(ConflictError):
        asyncio.run(world.store.submissions.add(replace(s, id=uuid4())))


def test_list_for_learner_newest_first_and_by_course(world: World) -> None:
    other_course = asyncio.run(
        catalog_service.create_course(world.store, title="Maths", teacher_id=TEACHER)
    )
    other = asyncio.run(
        catalog_service.create_assignment(
            world.store, other_course.id, title="Proof", description="", type="PROJECT"
        )
    )
    asyncio.run(enrollment_service.enroll(world.store, LEARNER, other_course.id))
    older = _submit(world, now=1_000)
    newer = asyncio.run(
        submission_service.submit(
            world.store, LEARNER, other.id, content="QED", now=2_000
        )
    )

    all_mine = asyncio.run(submission_service.list_for_learner(world.store, LEARNER))
    assert [s.id for s in all_mine] == [newer.id, older.id]

    in_course = asyncio.run(
        submission_service.list_for_learner(
            world.store, LEARNER, course_id=world.course.id
        )
    )
    assert [s.id for s in in_course] == [older.id]


def test_pending_queue_for_teacher(world: World) -> None:
    asyncio.run(enrollment_service.enroll(world.store, OTHER_LEARNER, world.course.id))
    graded = _submit(world, now=1_000)
    pending = _submit(world, learner=OTHER_LEARNER, now=2_000)
    asyncio.run(grading_service.grade(world.store, graded.id, 90))

    queue = asyncio.run(
        submission_service.list_pending_for_teacher(world.store, TEACHER)
    )
    assert [s.id for s in queue] == [pending.id]
    assert asyncio.run(
        submission_service.list_pending_for_teacher(world.store, "someone-else")
    ) == []


# ---- answer sheets ----


def _quiz(w: World, with_text: bool = False, **kwargs) -> Assignment:
    return asyncio.run(
        catalog_service.create_assignment(
            w.store,
            w.course.id,
            title="Quiz",
            description="",
            type="QUIZ",
            questions=quiz_questions(with_text=with_text),
            **kwargs,
        )
    )


def _answers(quiz: Assignment) -> list[SheetAnswer]:
    return [
        SheetAnswer(question_id=q.id, selected_options=tuple(q.correct_option_ids))
        if not q.needs_manual_review
        else SheetAnswer(question_id=q.id, text_answer="because")
        for q in quiz.questions
    ]


def test_choice_only_sheet_is_graded_immediately(world: World) -> None:
    quiz = _quiz(world)
    submission, sheet = asyncio.run(
        submission_service.submit_test(
            world.store, LEARNER, quiz.id, _answers(quiz), now=5_000
        )
    )
    assert submission.status == "GRADED"
    assert submission.score == 100.0
    assert submission.graded_at == 5_000
    assert sheet.needs_review is False
    stored = asyncio.run(world.store.submissions.get(submission.id))
    assert stored == submission


def test_sheet_with_text_question_waits_for_teacher(world: World) -> None:
    quiz = _quiz(world, with_text=True)
    submission, sheet = asyncio.run(
        submission_service.submit_test(world.store, LEARNER, quiz.id, _answers(quiz))
    )
    assert submission.status == "PENDING"
    assert submission.score is None
    assert sheet.needs_review is True
    assert len(submission.answers) == 3


def test_retaking_a_quiz_updates_the_same_record(world: World) -> None:
    quiz = _quiz(world)
    first, _ = asyncio.run(
        submission_service.submit_test(
            world.store, LEARNER, quiz.id, _answers(quiz)[:1]
        )
    )
    second, _ = asyncio.run(
        submission_service.submit_test(world.store, LEARNER, quiz.id, _answers(quiz))
    )
    assert second.id == first.id
    assert first.score == 33.33
    assert second.score == 100.0
    assert second.attempt_no == 2


def test_quiz_attempt_limit(world: World) -> None:
    quiz = _quiz(world, max_attempts=1)
    asyncio.run(
        submission_service.submit_test(world.store, LEARNER, quiz.id, _answers(quiz))
    )
    with pytest.raises(ValidationError, match="maximum attempts"):
        asyncio.run(
            submission_service.submit_test(
                world.store, LEARNER, quiz.id, _answers(quiz)
            )
        )


def test_answer_sheet_for_practical_rejected(world: World) -> None:
    with pytest.raises(ValidationError, match="only tests and quizzes"):
        asyncio.run(
            submission_service.submit_test(world.store, LEARNER, world.essay.id, [])
        )
