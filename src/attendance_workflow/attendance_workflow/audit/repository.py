from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, AuditAction, Role
from .model import AuditLog


class AuditLogRepository(Protocol):
    """Append-only store. ``update``/``delete`` must always raise."""

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
        raise NotImplementedError

    def list_for_record(self, record_id: str) -> Sequence[AuditLog]:
        """Oldest first."""

        raise NotImplementedError

    def list_by_actor(self, actor_id: str, *, limit: int = 500) -> Sequence[AuditLog]:
        """Newest first."""

        raise NotImplementedError

    def list_between(self, start: datetime, end: datetime) -> Sequence[AuditLog]:
        raise NotImplementedError

    def update(self, entry: AuditLog) -> None:
        raise NotImplementedError

    def delete(self, audit_id: int) -> None:
        raise NotImplementedError
