from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from gradebook.core.errors import ConflictError, NotFoundError
from gradebook.models.course import Course


class CourseRepo(Protocol):
    async def get(self, course_id: UUID) -> Course | None: ...
    async def list_all(self) -> list[Course]: ...
    async def list_for_teacher(self, teacher_id: str) -> list[Course]: ...
    async def add(self, course: Course) -> None: ...
    async def update(self, course: Course) -> None: ...
    async def delete(self, course_id: UUID) -> bool: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[UUID, Course] = {}

    async def get(self, course_id: UUID) -> Course | None:
        return self._by_id.get(course_id)

    async def list_all(self) -> list[Course]:
        return sorted(self._by_id.values(), key=lambda c: (c.created_at, str(c.id)))

    async def list_for_teacher(self, teacher_id: str) -> list[Course]:
        return [c for c in await self.list_all() if c.teacher_id == teacher_id]

    async def add(self, course: Course) -> None:
        with self._lock:
            if course.id in self._by_id:
                raise ConflictError("course already exists")
            self._by_id[course.id] = course

    async def update(self, course: Course) -> None:
        with self._lock:
            if course.id not in self._by_id:
                raise NotFoundError("course not found")
            self._by_id[course.id] = course

    async def delete(self, course_id: UUID) -> bool:
        with self._lock:
            return self._by_id.pop(course_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
