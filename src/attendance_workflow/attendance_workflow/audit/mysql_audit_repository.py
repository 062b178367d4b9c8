from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, AuditAction, Role
from ..core.exceptions import InvariantViolationError
from ..database.mysql_base import fetchall
from .model import AuditLog
from .repository import AuditLogRepository

_COLUMNS = """
    audit_id, record_id, action, previous_status, new_status, actor_id, actor_role,
    reason, previous_value, new_value, created_at
"""


def _to_entry(r: Dict[str, Any]) -> AuditLog:
    prev = r.get("previous_status")
    return AuditLog(
        audit_id=int(r["audit_id"]),
        record_id=str(r["record_id"]),
        action=AuditAction(r["action"]),
        previous_status=AttendanceStatus(prev) if prev else None,
        new_status=AttendanceStatus(r["new_status"]),
        actor_id=str(r["actor_id"]),
        actor_role=Role(r["actor_role"]),
        reason=r.get("reason") or "",
        created_at=r["created_at"],
        previous_value=r.get("previous_value"),
        new_value=r.get("new_value"),
    )


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, cur):
        self._cur = cur

    def append(
        self,
        *,
        record_id: str,
        action: AuditAction,
        previous_status: Optional[AttendanceStatus],
        new_status: AttendanceStatus,
        actor_id: str,
        actor_role: Role,
        reason: str,
        created_at: datetime,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO audit_logs(
                record_id, action, previous_status, new_status, actor_id, actor_role,
                reason, previous_value, new_value, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                str(record_id),
                action.value,
                previous_status.value if previous_status else None,
                new_status.value,
                str(actor_id),
                actor_role.value,
                reason,
                previous_value,
                new_value,
                created_at,
            ),
        )
        return int(self._cur.lastrowid)

    def list_for_record(self, record_id: str) -> Sequence[AuditLog]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM audit_logs WHERE record_id=%s ORDER BY created_at ASC, audit_id ASC",
            (str(record_id),),
        )
        return [_to_entry(r) for r in fetchall(self._cur)]

    def list_by_actor(self, actor_id: str, *, limit: int = 500) -> Sequence[AuditLog]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS} FROM audit_logs
            WHERE actor_id=%s
            ORDER BY created_at DESC, audit_id DESC
            LIMIT %s
            """,
            (str(actor_id), int(limit)),
        )
        return [_to_entry(r) for r in fetchall(self._cur)]

    def list_between(self, start: datetime, end: datetime) -> Sequence[AuditLog]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS} FROM audit_logs
            WHERE created_at BETWEEN %s AND %s
            ORDER BY created_at ASC, audit_id ASC
            """,
            (start, end),
        )
        return [_to_entry(r) for r in fetchall(self._cur)]

    def update(self, entry: AuditLog) -> None:
        raise InvariantViolationError(
            "Audit logs are immutable and cannot be updated.", details={"audit_id": entry.audit_id}
        )

    def delete(self, audit_id: int) -> None:
        raise InvariantViolationError("Audit logs are immutable and cannot be deleted.", details={"audit_id": audit_id})
