"""Submission store.

The only mutable shared resource in the grading core. Every write is
all-or-nothing and version-checked:

  add(s)   stores a brand-new record; fails if the (learner, assignment)
           pair already has one.
  save(s)  replaces the stored record only if the stored version is
           exactly ``s.version - 1``; otherwise another writer got there
           first and ConflictError is raised without touching the row.
"""

from __future__ import annotations

import threading
from collections.abc import Collection
from typing import Protocol
from uuid import UUID

from gradebook.core.errors import ConflictError, NotFoundError
from gradebook.models.submission import Submission


class SubmissionRepo(Protocol):
    async def get(self, submission_id: UUID) -> Submission | None: ...
    async def get_for_pair(
        self, learner_id: str, assignment_id: UUID
    ) -> Submission | None: ...
    async def list_for_assignments(
        self, assignment_ids: Collection[UUID]
    ) -> list[Submission]: ...
    async def list_for_learner(self, learner_id: str) -> list[Submission]: ...
    async def add(self, submission: Submission) -> None: ...
    async def save(self, submission: Submission) -> None: ...
    async def delete_for_assignment(self, assignment_id: UUID) -> int: ...
    async def delete_for_learner(
        self, learner_id: str, assignment_ids: Collection[UUID]
    ) -> int: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[UUID, Submission] = {}
        self._by_pair: dict[tuple[str, UUID], UUID] = {}

    async def get(self, submission_id: UUID) -> Submission | None:
        return self._by_id.get(submission_id)

    async def get_for_pair(
        self, learner_id: str, assignment_id: UUID
    ) -> Submission | None:
        sid = self._by_pair.get((learner_id, assignment_id))
        return self._by_id.get(sid) if sid is not None else None

    async def list_for_assignments(
        self, assignment_ids: Collection[UUID]
    ) -> list[Submission]:
        wanted = set(assignment_ids)
        found = [s for s in self._by_id.values() if s.assignment_id in wanted]
        return sorted(found, key=lambda s: (s.learner_id, str(s.assignment_id)))

    async def list_for_learner(self, learner_id: str) -> list[Submission]:
        found = [s for s in self._by_id.values() if s.learner_id == learner_id]
        return sorted(found, key=lambda s: s.submitted_at, reverse=True)

    async def add(self, submission: Submission) -> None:
        key = (submission.learner_id, submission.assignment_id)
        with self._lock:
            if key in self._by_pair or submission.id in self._by_id:
                raise ConflictError("submission already exists for this assignment")
            self._by_id[submission.id] = submission
            self._by_pair[key] = submission.id

    async def save(self, submission: Submission) -> None:
        with self._lock:
            current = self._by_id.get(submission.id)
            if current is None:
                raise NotFoundError("submission not found")
            if current.version != submission.version - 1:
                raise ConflictError("submission was modified concurrently")
            self._by_id[submission.id] = submission

    async def delete_for_assignment(self, assignment_id: UUID) -> int:
        with self._lock:
            doomed = [s for s in self._by_id.values() if s.assignment_id == assignment_id]
            for s in doomed:
                self._drop(s)
            return len(doomed)

    async def delete_for_learner(
        self, learner_id: str, assignment_ids: Collection[UUID]
    ) -> int:
        wanted = set(assignment_ids)
        with self._lock:
            doomed = [
                s
                for s in self._by_id.values()
                if s.learner_id == learner_id and s.assignment_id in wanted
            ]
            for s in doomed:
                self._drop(s)
            return len(doomed)

    def _drop(self, submission: Submission) -> None:
        del self._by_id[submission.id]
        del self._by_pair[(submission.learner_id, submission.assignment_id)]

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
            self._by_pair.clear()
