from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, AuditAction, Role


@dataclass(frozen=True)
class AuditLog:
    """One immutable ledger entry per record transition."""

    audit_id: int
    record_id: str
    action: AuditAction
    previous_status: Optional[AttendanceStatus]
    new_status: AttendanceStatus
    actor_id: str
    actor_role: Role
    reason: str
    created_at: datetime
    previous_value: Optional[str] = None
    new_value: Optional[str] = None


@dataclass(frozen=True)
class AuditTrailEntry:
    """Read-model for history display (entry enriched with actor name)."""

    audit_id: int
    action: str
    previous_status: Optional[str]
    new_status: str
    actor_id: str
    actor_name: str
    actor_role: str
    reason: str
    previous_value: Optional[str]
    new_value: Optional[str]
    created_at: datetime
