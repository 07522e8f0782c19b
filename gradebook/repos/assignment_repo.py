from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from gradebook.core.errors import ConflictError
from gradebook.models.assignment import Assignment


class AssignmentRepo(Protocol):
    async def get(self, assignment_id: UUID) -> Assignment | None: ...
    async def list_for_course(self, course_id: UUID) -> list[Assignment]: ...
    async def add(self, assignment: Assignment) -> None: ...
    async def delete(self, assignment_id: UUID) -> bool: ...


class InMemoryAssignmentRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[UUID, Assignment] = {}

    async def get(self, assignment_id: UUID) -> Assignment | None:
        return self._by_id.get(assignment_id)

    async def list_for_course(self, course_id: UUID) -> list[Assignment]:
        """Oldest first; callers that show newest first reverse it."""
        found = [a for a in self._by_id.values() if a.course_id == course_id]
        return sorted(found, key=lambda a: (a.created_at, str(a.id)))

    async def add(self, assignment: Assignment) -> None:
        with self._lock:
            if assignment.id in self._by_id:
                raise ConflictError("assignment already exists")
            self._by_id[assignment.id] = assignment

    async def delete(self, assignment_id: UUID) -> bool:
        with self._lock:
            return self._by_id.pop(assignment_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
