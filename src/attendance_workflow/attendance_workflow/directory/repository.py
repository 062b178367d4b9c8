from __future__ import annotations

from typing import Optional, Protocol


class DirectoryRepository(Protocol):
    """Master data owned by other systems (students, courses, actors)."""

    def student_exists(self, student_id: str) -> bool:
        raise NotImplementedError

    def course_exists(self, course_id: str) -> bool:
        raise NotImplementedError

    def get_actor_name(self, actor_id: str) -> Optional[str]:
        raise NotImplementedError
