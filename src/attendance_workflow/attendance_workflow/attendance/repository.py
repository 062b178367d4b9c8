from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_update(self, record_id: str) -> Optional[AttendanceRecord]:
        """Same as ``get`` but locks the row until the unit of work ends."""

        raise NotImplementedError

    def add(self, record: AttendanceRecord) -> None:
        """Insert a new version; InvalidStateError if (student, course, date, version) is taken."""

        raise NotImplementedError

    def update(self, record: AttendanceRecord, *, expected_status: AttendanceStatus) -> bool:
        """Persist ``record`` only if the stored status still equals ``expected_status``.

        Returns False when another transaction changed the status first.
        """

        raise NotImplementedError

    def list_group(self, student_id: str, course_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        """All versions for (student, course, date) ordered by version ascending."""

        raise NotImplementedError

    def list_group_for_update(
        self, student_id: str, course_id: str, attendance_date: date
    ) -> Sequence[AttendanceRecord]:
        """Same as ``list_group`` but locks the group (and its gap) until the unit of work ends."""

        raise NotImplementedError

    def list_children(self, record_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_roots_for_student(self, student_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """Top-level records (no parent) ordered by date."""

        raise NotImplementedError

    def list_roots_for_course(self, course_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        """Top-level records (no parent) ordered by student."""

        raise NotImplementedError

    def list_by_statuses(self, statuses: Iterable[AttendanceStatus], *, limit: int = 500) -> Sequence[AttendanceRecord]:
        """All versions in any of ``statuses``, newest first."""

        raise NotImplementedError
