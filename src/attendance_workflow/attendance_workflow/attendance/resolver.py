from __future__ import annotations

from datetime import date
from typing import Iterable

from ..common.validators import parse_status
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.exceptions import NotFoundError, ValidationError
from .model import AttendanceRecord


class RecordResolver:
    """Read side of the version chain.

    "Current" views only look at top-level records (no parent version);
    history and status lookups span every version.
    """

    def __init__(self, uow_factory):
        self._uow_factory = uow_factory

    def get(self, record_id: str) -> AttendanceRecord:
        with self._uow_factory() as uow:
            record = uow.attendance.get(str(record_id))
        if record is None:
            raise NotFoundError("Attendance record not found.", details={"record_id": record_id})
        return record

    def get_current(self, student_id: str, course_id: str, attendance_date: date) -> AttendanceRecord:
        roots = [r for r in self.get_all_versions(student_id, course_id, attendance_date) if r.parent_version_id is None]
        if not roots:
            raise NotFoundError(
                "Attendance record not found.",
                details={"student_id": student_id, "course_id": course_id, "date": attendance_date.isoformat()},
            )
        return max(roots, key=lambda r: r.version)

    def get_latest(self, student_id: str, course_id: str, attendance_date: date) -> AttendanceRecord:
        versions = self.get_all_versions(student_id, course_id, attendance_date)
        if not versions:
            raise NotFoundError(
                "Attendance record not found.",
                details={"student_id": student_id, "course_id": course_id, "date": attendance_date.isoformat()},
            )
        return versions[-1]

    def get_all_versions(self, student_id: str, course_id: str, attendance_date: date) -> list[AttendanceRecord]:
        with self._uow_factory() as uow:
            versions = list(uow.attendance.list_group(str(student_id), str(course_id), attendance_date))
        return sorted(versions, key=lambda r: r.version)

    def get_children(self, record_id: str) -> list[AttendanceRecord]:
        with self._uow_factory() as uow:
            if uow.attendance.get(str(record_id)) is None:
                raise NotFoundError("Attendance record not found.", details={"record_id": record_id})
            return list(uow.attendance.list_children(str(record_id)))

    def get_student_range(self, student_id: str, start_date: date, end_date: date) -> list[AttendanceRecord]:
        if end_date < start_date:
            raise ValidationError(
                "End date must be on or after start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )
        with self._uow_factory() as uow:
            return list(uow.attendance.list_roots_for_student(str(student_id), start_date, end_date))

    def get_course_for_date(self, course_id: str, attendance_date: date) -> list[AttendanceRecord]:
        with self._uow_factory() as uow:
            return list(uow.attendance.list_roots_for_course(str(course_id), attendance_date))

    def get_by_status(self, status, *, limit: int = DEFAULT_LIST_LIMIT) -> list[AttendanceRecord]:
        return self.get_by_statuses([status], limit=limit)

    def get_by_statuses(self, statuses: Iterable, *, limit: int = DEFAULT_LIST_LIMIT) -> list[AttendanceRecord]:
        parsed = [parse_status(s) for s in statuses]
        with self._uow_factory() as uow:
            return list(uow.attendance.list_by_statuses(parsed, limit=limit))
