from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidStateError
from ..database.mysql_base import fetchall, fetchone, placeholders
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, student_id, course_id, attendance_date, status, is_present, remarks,
    version, parent_version_id, created_at, created_by, modified_at, modified_by,
    submitted_at, submitted_by, approved_at, approved_by, published_at, published_by
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        student_id=str(r["student_id"]),
        course_id=str(r["course_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        is_present=bool(r["is_present"]),
        remarks=r.get("remarks") or "",
        version=int(r["version"]),
        parent_version_id=r.get("parent_version_id"),
        created_at=r["created_at"],
        created_by=str(r["created_by"]),
        modified_at=r["modified_at"],
        modified_by=str(r["modified_by"]),
        submitted_at=r.get("submitted_at"),
        submitted_by=r.get("submitted_by"),
        approved_at=r.get("approved_at"),
        approved_by=r.get("approved_by"),
        published_at=r.get("published_at"),
        published_by=r.get("published_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Works on the cursor of the surrounding unit of work; never commits."""

    def __init__(self, cur):
        self._cur = cur

    def _one(self, sql: str, params: tuple) -> Optional[AttendanceRecord]:
        self._cur.execute(sql, params)
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def _many(self, sql: str, params: tuple) -> Sequence[AttendanceRecord]:
        self._cur.execute(sql, params)
        return [_to_record(r) for r in fetchall(self._cur)]

    def get(self, record_id: str) -> Optional[AttendanceRecord]:
        return self._one(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (str(record_id),))

    def get_for_update(self, record_id: str) -> Optional[AttendanceRecord]:
        return self._one(
            f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s FOR UPDATE",
            (str(record_id),),
        )

    def add(self, record: AttendanceRecord) -> None:
        params = (
            record.record_id,
            record.student_id,
            record.course_id,
            record.attendance_date,
            record.status.value,
            1 if record.is_present else 0,
            record.remarks,
            int(record.version),
            record.parent_version_id,
            record.created_at,
            record.created_by,
            record.modified_at,
            record.modified_by,
            record.submitted_at,
            record.submitted_by,
            record.approved_at,
            record.approved_by,
            record.published_at,
            record.published_by,
        )
        try:
            self._cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                params,
            )
        except mysql.connector.errors.IntegrityError as e:
            # uq_attendance_version: another transaction inserted this version first.
            if e.errno != errorcode.ER_DUP_ENTRY:
                raise
            raise InvalidStateError(
                f"Attendance for student {record.student_id} on {record.attendance_date:%Y-%m-%d} "
                f"already exists (version {record.version})",
                details={
                    "student_id": record.student_id,
                    "course_id": record.course_id,
                    "version": record.version,
                },
            ) from e

    def update(self, record: AttendanceRecord, *, expected_status: AttendanceStatus) -> bool:
        # Only the transition-owned columns; identity and version facts never change.
        self._cur.execute(
            """
            UPDATE attendance_records
            SET status=%s, modified_at=%s, modified_by=%s,
                submitted_at=%s, submitted_by=%s,
                approved_at=%s, approved_by=%s,
                published_at=%s, published_by=%s
            WHERE record_id=%s AND status=%s
            """,
            (
                record.status.value,
                record.modified_at,
                record.modified_by,
                record.submitted_at,
                record.submitted_by,
                record.approved_at,
                record.approved_by,
                record.published_at,
                record.published_by,
                record.record_id,
                expected_status.value,
            ),
        )
        return self._cur.rowcount > 0

    def list_group(self, student_id: str, course_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE student_id=%s AND course_id=%s AND attendance_date=%s
            ORDER BY version ASC
            """,
            (str(student_id), str(course_id), attendance_date),
        )

    def list_group_for_update(
        self, student_id: str, course_id: str, attendance_date: date
    ) -> Sequence[AttendanceRecord]:
        # Next-key locks on uq_attendance_version also cover an empty group.
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE student_id=%s AND course_id=%s AND attendance_date=%s
            ORDER BY version ASC
            FOR UPDATE
            """,
            (str(student_id), str(course_id), attendance_date),
        )

    def list_children(self, record_id: str) -> Sequence[AttendanceRecord]:
        return self._many(
            f"SELECT {_COLUMNS} FROM attendance_records WHERE parent_version_id=%s ORDER BY version ASC",
            (str(record_id),),
        )

    def list_roots_for_student(self, student_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE student_id=%s AND attendance_date BETWEEN %s AND %s
              AND parent_version_id IS NULL
            ORDER BY attendance_date ASC
            """,
            (str(student_id), start_date, end_date),
        )

    def list_roots_for_course(self, course_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE course_id=%s AND attendance_date=%s AND parent_version_id IS NULL
            ORDER BY student_id ASC
            """,
            (str(course_id), attendance_date),
        )

    def list_by_statuses(self, statuses: Iterable[AttendanceStatus], *, limit: int = 500) -> Sequence[AttendanceRecord]:
        values = [s.value for s in statuses]
        if not values:
            return []
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE status IN ({placeholders(len(values))})
            ORDER BY created_at DESC
            LIMIT %s
            """,
            tuple(values + [int(limit)]),
        )
