"""Submit / grade / return flow over HTTP."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    LEARNER,
    TEACHER,
    auth,
    create_test_assignment,
    create_test_course,
    enroll_test_learner,
    quiz_questions,
)

TEACHER_AUTH = auth(TEACHER, "teacher")
LEARNER_AUTH = auth(LEARNER)


def _setup(**assignment_kwargs):
    course = create_test_course()
    assignment = create_test_assignment(course.id, **assignment_kwargs)
    enroll_test_learner(course.id)
    return course, assignment


def test_submit_grade_and_average(client: TestClient) -> None:
    course, essay = _setup()
    resp = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "my essay"},
        headers=LEARNER_AUTH,
    )
    assert resp.status_code == 200
    submission = resp.json()
    assert (submission["status"], submission["score"]) == ("PENDING", None)

    graded = client.put(
        f"/v1/submissions/{submission['id']}/grade",
        json={"score": 95, "feedback": "Great work"},
        headers=TEACHER_AUTH,
    )
    assert graded.status_code == 200
    assert graded.json()["status"] == "GRADED"
    assert graded.json()["score"] == 95
    assert graded.json()["feedback"] == "Great work"

    avg = client.get(f"/v1/assignments/{essay.id}/average", headers=TEACHER_AUTH)
    assert avg.json()["average"] == 95

    summary = client.get(
        f"/v1/gradebook/courses/{course.id}/learners/{LEARNER}", headers=LEARNER_AUTH
    )
    assert summary.json()["average"] == 95
    assert summary.json()["course_progress"] == 100.0


def test_empty_submission_is_422(client: TestClient) -> None:
    _, essay = _setup()
    resp = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "   ", "files": []},
        headers=LEARNER_AUTH,
    )
    assert resp.status_code == 422
    assert client.get("/v1/submissions/me", headers=LEARNER_AUTH).json() == []


def test_out_of_range_score_is_422_and_keeps_state(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "x"},
        headers=LEARNER_AUTH,
    ).json()["id"]

    resp = client.put(
        f"/v1/submissions/{sid}/grade", json={"score": 150}, headers=TEACHER_AUTH
    )
    assert resp.status_code == 422
    current = client.get(f"/v1/submissions/{sid}", headers=LEARNER_AUTH).json()
    assert (current["status"], current["score"]) == ("PENDING", None)


def test_non_numeric_score_is_422(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "x"},
        headers=LEARNER_AUTH,
    ).json()["id"]
    for bad in ("95", True, None):
        resp = client.put(
            f"/v1/submissions/{sid}/grade", json={"score": bad}, headers=TEACHER_AUTH
        )
        assert resp.status_code == 422


def test_score_beyond_float_range_is_422(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "x"},
        headers=LEARNER_AUTH,
    ).json()["id"]
    resp = client.put(
        f"/v1/submissions/{sid}/grade", json={"score": 10**400}, headers=TEACHER_AUTH
    )
    assert resp.status_code == 422
    current = client.get(f"/v1/submissions/{sid}", headers=LEARNER_AUTH).json()
    assert current["status"] == "PENDING"


def test_return_then_resubmit(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "draft"},
        headers=LEARNER_AUTH,
    ).json()["id"]

    returned = client.put(
        f"/v1/submissions/{sid}/return",
        json={"feedback": "Add references"},
        headers=TEACHER_AUTH,
    )
    assert returned.json()["status"] == "RETURNED"
    assert returned.json()["feedback"] == "Add references"

    again = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"files": ["essay-v2.pdf"]},
        headers=LEARNER_AUTH,
    ).json()
    assert again["id"] == sid
    assert again["status"] == "PENDING"
    assert again["files"] == ["essay-v2.pdf"]
    assert again["attempt_no"] == 2


def test_return_without_feedback_is_422(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "draft"},
        headers=LEARNER_AUTH,
    ).json()["id"]
    resp = client.put(
        f"/v1/submissions/{sid}/return", json={"feedback": "  "}, headers=TEACHER_AUTH
    )
    assert resp.status_code == 422


def test_pending_queue(client: TestClient) -> None:
    _, essay = _setup()
    sid = client.post(
        f"/v1/assignments/{essay.id}/submission",
        json={"content": "draft"},
        headers=LEARNER_AUTH,
    ).json()["id"]
    queue = client.get("/v1/submissions/pending", headers=TEACHER_AUTH).json()
    assert [s["id"] for s in queue] == [sid]


def test_quiz_attempt_limit_is_422(client: TestClient) -> None:
    _, quiz = _setup(type="QUIZ", questions=quiz_questions(), max_attempts=1)
    single = quiz.questions[0]
    sheet = {
        "answers": [
            {
                "question_id": str(single.id),
                "selected_options": [str(o) for o in single.correct_option_ids],
            }
        ]
    }
    url = f"/v1/assignments/{quiz.id}/test-submission"
    assert client.post(url, json=sheet, headers=LEARNER_AUTH).status_code == 200
    resp = client.post(url, json=sheet, headers=LEARNER_AUTH)
    assert resp.status_code == 422
    assert "maximum attempts" in resp.json()["detail"]


def test_returned_work_resubmits_past_attempt_limit(client: TestClient) -> None:
    _, lab = _setup(max_attempts=1)
    url = f"/v1/assignments/{lab.id}/submission"
    sid = client.post(url, json={"content": "x"}, headers=LEARNER_AUTH).json()["id"]
    client.put(
        f"/v1/submissions/{sid}/return",
        json={"feedback": "please redo"},
        headers=TEACHER_AUTH,
    )
    resp = client.post(url, json={"content": "y"}, headers=LEARNER_AUTH)
    assert resp.status_code == 200
    assert resp.json()["status"] == "PENDING"
    assert resp.json()["attempt_no"] == 2


def test_quiz_is_auto_graded(client: TestClient) -> None:
    _, quiz = _setup(type="QUIZ", questions=quiz_questions(), passing_score=50)
    single, multi = quiz.questions
    resp = client.post(
        f"/v1/assignments/{quiz.id}/test-submission",
        json={
            "answers": [
                {
                    "question_id": str(single.id),
                    "selected_options": [str(o) for o in single.correct_option_ids],
                },
                {"question_id": str(multi.id), "selected_options": []},
            ]
        },
        headers=LEARNER_AUTH,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["submission"]["status"] == "GRADED"
    assert body["submission"]["score"] == 33.33
    assert body["earned_points"] == 1.0
    assert body["total_points"] == 3.0
    assert body["needs_review"] is False
    assert body["passed"] is False


def test_quiz_with_text_question_waits_for_review(client: TestClient) -> None:
    _, quiz = _setup(type="TEST", questions=quiz_questions(with_text=True))
    text_q = quiz.questions[2]
    resp = client.post(
        f"/v1/assignments/{quiz.id}/test-submission",
        json={"answers": [{"question_id": str(text_q.id), "text_answer": "Recursion"}]},
        headers=LEARNER_AUTH,
    )
    body = resp.json()
    assert body["submission"]["status"] == "PENDING"
    assert body["submission"]["score"] is None
    assert body["needs_review"] is True
    assert body["passed"] is None


def test_answer_sheet_on_practical_is_422(client: TestClient) -> None:
    _, essay = _setup()
    resp = client.post(
        f"/v1/assignments/{essay.id}/test-submission",
        json={"answers": []},
        headers=LEARNER_AUTH,
    )
    assert resp.status_code == 422
