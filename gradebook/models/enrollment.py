from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Enrollment:
    """Learner to course link.

    ``progress`` is lesson-completion progress owned by the course-completion
    tracker. This service only reads it; it is not the same number as the
    graded-assignment ratio computed by the gradebook.
    """

    learner_id: str
    course_id: UUID
    enrolled_at: int
    progress: int = 0  # 0..100
    completed_at: int | None = None  # set once progress reaches 100

    @staticmethod
    def new(*, learner_id: str, course_id: UUID, enrolled_at: int) -> Enrollment:
        return Enrollment(
            learner_id=learner_id, course_id=course_id, enrolled_at=enrolled_at
        )

    @property
    def is_completed(self) -> bool:
        return self.progress >= 100
