from __future__ import annotations

from dataclasses import dataclass

from gradebook.models.course import Course

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"
ROLE_ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity taken from a verified access token.

    user_id: the token subject; used as learner_id / teacher_id
    roles: platform roles (student, teacher, admin)
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str]) -> bool:
        return bool(self.roles & roles)

    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    def can_manage(self, course: Course) -> bool:
        """Course owner or platform admin."""
        return self.is_admin() or course.is_owned_by(self.user_id)
