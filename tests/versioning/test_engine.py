from __future__ import annotations

from datetime import date, datetime

from src.attendance_workflow.attendance_workflow.attendance.model import AttendanceRecord
from src.attendance_workflow.attendance_workflow.core.enums import AttendanceStatus
from src.attendance_workflow.attendance_workflow.versioning.engine import create_correction_version, describe_values


def _published() -> AttendanceRecord:
    t = datetime(2025, 1, 10, 8, 0, 0)
    return AttendanceRecord(
        record_id="orig",
        student_id="S-1001",
        course_id="C-MATH101",
        attendance_date=date(2025, 1, 10),
        status=AttendanceStatus.PUBLISHED,
        is_present=True,
        remarks="ok",
        version=3,
        parent_version_id="older",
        created_at=t,
        created_by="T-01",
        modified_at=t,
        modified_by="AC-01",
        submitted_at=t,
        submitted_by="T-01",
        approved_at=t,
        approved_by="AC-01",
        published_at=t,
        published_by="AC-01",
    )


def test_correction_version_is_fresh_draft():
    original = _published()
    now = datetime(2025, 2, 1, 12, 0, 0)

    child = create_correction_version(original, new_id="child", actor_id="AC-01", now=now)

    assert child.record_id == "child"
    assert child.status == AttendanceStatus.DRAFT
    assert child.version == 4
    assert child.parent_version_id == "orig"
    assert (child.is_present, child.remarks) == (True, "ok")
    assert (child.created_at, child.created_by, child.modified_by) == (now, "AC-01", "AC-01")
    assert child.submitted_at is None
    assert child.approved_by is None
    assert child.published_at is None


def test_correction_version_does_not_touch_original():
    original = _published()
    create_correction_version(original, new_id="child", actor_id="AC-01", now=datetime(2025, 2, 1))
    assert original == _published()


def test_describe_values():
    assert describe_values(_published()) == "IsPresent: True, Remarks: ok"
