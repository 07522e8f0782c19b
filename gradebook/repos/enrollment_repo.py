from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from gradebook.core.errors import ConflictError
from gradebook.models.enrollment import Enrollment


class EnrollmentRepo(Protocol):
    async def get(self, learner_id: str, course_id: UUID) -> Enrollment | None: ...
    async def list_for_course(self, course_id: UUID) -> list[Enrollment]: ...
    async def list_for_learner(self, learner_id: str) -> list[Enrollment]: ...
    async def add(self, enrollment: Enrollment) -> None: ...
    async def delete(self, learner_id: str, course_id: UUID) -> bool: ...
    async def delete_for_course(self, course_id: UUID) -> int: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[tuple[str, UUID], Enrollment] = {}

    async def get(self, learner_id: str, course_id: UUID) -> Enrollment | None:
        return self._store.get((learner_id, course_id))

    async def list_for_course(self, course_id: UUID) -> list[Enrollment]:
        found = [e for e in self._store.values() if e.course_id == course_id]
        return sorted(found, key=lambda e: e.learner_id)

    async def list_for_learner(self, learner_id: str) -> list[Enrollment]:
        found = [e for e in self._store.values() if e.learner_id == learner_id]
        return sorted(found, key=lambda e: e.enrolled_at, reverse=True)

    async def add(self, enrollment: Enrollment) -> None:
        key = (enrollment.learner_id, enrollment.course_id)
        with self._lock:
            if key in self._store:
                raise ConflictError("already enrolled")
            self._store[key] = enrollment

    async def delete(self, learner_id: str, course_id: UUID) -> bool:
        with self._lock:
            return self._store.pop((learner_id, course_id), None) is not None

    async def delete_for_course(self, course_id: UUID) -> int:
        with self._lock:
            keys = [k for k in self._store if k[1] == course_id]
            for k in keys:
                del self._store[k]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
