from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

CourseStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]
COURSE_STATUSES: tuple[str, ...] = ("DRAFT", "PUBLISHED", "ARCHIVED")


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    teacher_id: str
    status: CourseStatus = "DRAFT"
    created_at: int = 0

    @staticmethod
    def new(*, title: str, teacher_id: str, created_at: int) -> Course:
        return Course(
            id=uuid4(), title=title, teacher_id=teacher_id, created_at=created_at
        )

    def is_owned_by(self, user_id: str) -> bool:
        return self.teacher_id == user_id
