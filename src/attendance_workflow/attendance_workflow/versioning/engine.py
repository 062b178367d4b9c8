"""Correction versions.

A correction never edits a finalized record. It builds a new record one
version higher that points back at the record it amends; the caller flips the
original to Corrected and persists both in the same unit of work.
"""
from __future__ import annotations

from datetime import datetime

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus


def create_correction_version(
    record: AttendanceRecord,
    *,
    new_id: str,
    actor_id: str,
    now: datetime,
) -> AttendanceRecord:
    """Return the child version of ``record`` (Draft, version + 1, same facts)."""
    return AttendanceRecord(
        record_id=new_id,
        student_id=record.student_id,
        course_id=record.course_id,
        attendance_date=record.attendance_date,
        status=AttendanceStatus.DRAFT,
        is_present=record.is_present,
        remarks=record.remarks,
        version=record.version + 1,
        parent_version_id=record.record_id,
        created_at=now,
        created_by=actor_id,
        modified_at=now,
        modified_by=actor_id,
    )


def describe_values(record: AttendanceRecord) -> str:
    """Text snapshot of the correctable fields, stored on audit entries."""
    return f"IsPresent: {record.is_present}, Remarks: {record.remarks}"
