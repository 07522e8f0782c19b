from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import gradebook` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gradebook.main import app  # noqa: E402
from gradebook.models.assignment import Option, Question  # noqa: E402
from gradebook.repos.store import clear_in_memory, store  # noqa: E402
from gradebook.services import (  # noqa: E402
    catalog_service,
    enrollment_service,
    token_service,
)

TEACHER = "teacher-1"
OTHER_TEACHER = "teacher-2"
LEARNER = "learner-1"
OTHER_LEARNER = "learner-2"


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Empty the in-memory repositories between tests."""
    clear_in_memory(store)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(username: str, *roles: str) -> dict[str, str]:
    """Authorization header for ``username`` with ``roles`` (student if none)."""
    token = mint_token(username=username, roles=list(roles) or None)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Catalog helpers: seed the shared in-memory store directly
# ---------------------------------------------------------------------------


def create_test_course(title: str = "Algorithms", teacher_id: str = TEACHER):
    return asyncio.run(
        catalog_service.create_course(store, title=title, teacher_id=teacher_id)
    )


def create_test_assignment(
    course_id,
    title: str = "Essay",
    type: str = "PRACTICAL",
    now: int | None = None,
    **kwargs,
):
    return asyncio.run(
        catalog_service.create_assignment(
            store, course_id, title=title, description="", type=type, now=now, **kwargs
        )
    )


def enroll_test_learner(course_id, learner_id: str = LEARNER):
    return asyncio.run(enrollment_service.enroll(store, learner_id, course_id))


def quiz_questions(with_text: bool = False) -> tuple[Question, ...]:
    """Two choice questions (1 and 2 points), optionally plus a short answer."""
    questions = [
        Question.new(
            text="2 + 2?",
            type="SINGLE_CHOICE",
            points=1.0,
            position=0,
            options=(
                Option.new(text="4", is_correct=True, position=0),
                Option.new(text="5", position=1),
            ),
        ),
        Question.new(
            text="Pick the primes",
            type="MULTIPLE_CHOICE",
            points=2.0,
            position=1,
            options=(
                Option.new(text="2", is_correct=True, position=0),
                Option.new(text="3", is_correct=True, position=1),
                Option.new(text="4", position=2),
            ),
        ),
    ]
    if with_text:
        questions.append(
            Question.new(text="Explain recursion", type="SHORT_ANSWER", position=2)
        )
    return tuple(questions)
