from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT, UNKNOWN_ACTOR_NAME
from ..core.enums import AttendanceStatus, AuditAction, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.repository import DirectoryRepository
from .model import AuditLog, AuditTrailEntry

logger = logging.getLogger(__name__)


class AuditLedger:
    """Writes ledger entries inside a caller's unit of work and reads history.

    Entries are never edited: there is no code path here that calls the
    repository's ``update`` or ``delete``.
    """

    def __init__(self, uow_factory, directory: DirectoryRepository):
        self._uow_factory = uow_factory
        self._directory = directory

    def record(
        self,
        uow,
        *,
        record_id: str,
        action: AuditAction,
        previous_status: Optional[AttendanceStatus],
        new_status: AttendanceStatus,
        actor_id: str,
        actor_role: Role,
        reason: str,
        now: datetime,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> int:
        return uow.audit.append(
            record_id=record_id,
            action=action,
            previous_status=previous_status,
            new_status=new_status,
            actor_id=str(actor_id),
            actor_role=actor_role,
            reason=reason or "",
            created_at=now,
            previous_value=previous_value,
            new_value=new_value,
        )

    @staticmethod
    def last_entry(uow, record_id: str, action: AuditAction) -> Optional[AuditLog]:
        entries = [e for e in uow.audit.list_for_record(record_id) if e.action == action]
        return entries[-1] if entries else None

    def trail(self, record_id: str) -> list[AuditTrailEntry]:
        with self._uow_factory() as uow:
            if uow.attendance.get(record_id) is None:
                raise NotFoundError("Attendance record not found.", details={"record_id": record_id})
            entries = list(uow.audit.list_for_record(record_id))
        return self._enrich(entries)

    def by_actor(self, actor_id: str, *, limit: int = DEFAULT_LIST_LIMIT) -> list[AuditTrailEntry]:
        with self._uow_factory() as uow:
            entries = list(uow.audit.list_by_actor(actor_id, limit=limit))
        return self._enrich(entries)

    def between(self, start: datetime, end: datetime) -> list[AuditTrailEntry]:
        if end < start:
            raise ValidationError("End of range must not be before its start")
        with self._uow_factory() as uow:
            entries = list(uow.audit.list_between(start, end))
        return self._enrich(entries)

    def _actor_name(self, actor_id: str) -> str:
        # Display names are decoration; a failing directory must not hide history.
        try:
            name = self._directory.get_actor_name(actor_id)
        except Exception as e:
            logger.warning("Actor name lookup failed for %s: %s", actor_id, str(e))
            return UNKNOWN_ACTOR_NAME
        return name or UNKNOWN_ACTOR_NAME

    def _enrich(self, entries: list[AuditLog]) -> list[AuditTrailEntry]:
        names: dict[str, str] = {}
        out: list[AuditTrailEntry] = []
        for e in entries:
            if e.actor_id not in names:
                names[e.actor_id] = self._actor_name(e.actor_id)
            out.append(
                AuditTrailEntry(
                    audit_id=e.audit_id,
                    action=e.action.value,
                    previous_status=e.previous_status.value if e.previous_status else None,
                    new_status=e.new_status.value,
                    actor_id=e.actor_id,
                    actor_name=names[e.actor_id],
                    actor_role=e.actor_role.value,
                    reason=e.reason,
                    previous_value=e.previous_value,
                    new_value=e.new_value,
                    created_at=e.created_at,
                )
            )
        return out
