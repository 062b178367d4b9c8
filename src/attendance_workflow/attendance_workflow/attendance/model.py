from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance decision for (student, course, date, version).

    Records are immutable values; a transition produces a new value that the
    repository persists in place of the old one. Versions of the same lesson
    reference each other by id (``parent_version_id``), never by object.
    """

    record_id: str
    student_id: str
    course_id: str
    attendance_date: date
    status: AttendanceStatus
    is_present: bool
    remarks: str
    version: int
    parent_version_id: Optional[str]
    created_at: datetime
    created_by: str
    modified_at: datetime
    modified_by: str
    submitted_at: Optional[datetime] = None
    submitted_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    published_at: Optional[datetime] = None
    published_by: Optional[str] = None

    @property
    def group_key(self) -> tuple[str, str, date]:
        return (self.student_id, self.course_id, self.attendance_date)
