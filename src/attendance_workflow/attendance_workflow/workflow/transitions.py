"""Transition table for the attendance record lifecycle.

Each command maps to the statuses it may start from, the roles allowed to
trigger it, the status it produces, the audit action it writes and a pure
function that builds the next record value. Services look policy up here
instead of hard-coding it per method.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, AuditAction, Role
from ..core.exceptions import AuthorizationError, InvalidStateError


class Command(str, Enum):
    CREATE = "Create"
    SUBMIT = "Submit"
    APPROVE = "Approve"
    PUBLISH = "Publish"
    LOCK = "Lock"
    REQUEST_REOPEN = "RequestReopen"
    APPROVE_REOPEN = "ApproveReopen"
    REJECT_REOPEN = "RejectReopen"
    APPLY_CORRECTION = "ApplyCorrection"


Mutation = Callable[[AttendanceRecord, AttendanceStatus, str, datetime], AttendanceRecord]


def _move(record: AttendanceRecord, target: AttendanceStatus, actor_id: str, now: datetime) -> AttendanceRecord:
    return replace(record, status=target, modified_at=now, modified_by=actor_id)


def _submit(record: AttendanceRecord, target: AttendanceStatus, actor_id: str, now: datetime) -> AttendanceRecord:
    return replace(_move(record, target, actor_id, now), submitted_at=now, submitted_by=actor_id)


def _approve(record: AttendanceRecord, target: AttendanceStatus, actor_id: str, now: datetime) -> AttendanceRecord:
    return replace(_move(record, target, actor_id, now), approved_at=now, approved_by=actor_id)


def _publish(record: AttendanceRecord, target: AttendanceStatus, actor_id: str, now: datetime) -> AttendanceRecord:
    return replace(_move(record, target, actor_id, now), published_at=now, published_by=actor_id)


@dataclass(frozen=True)
class TransitionRule:
    command: Command
    sources: frozenset[AttendanceStatus]
    roles: frozenset[Role]
    target: Optional[AttendanceStatus]
    action: AuditAction
    mutate: Optional[Mutation] = _move

    def apply(
        self,
        record: AttendanceRecord,
        *,
        actor_id: str,
        now: datetime,
        target: Optional[AttendanceStatus] = None,
    ) -> AttendanceRecord:
        """Build the next value of ``record``. ``target`` is only needed when the rule has none."""
        next_status = target or self.target
        if next_status is None or self.mutate is None:
            raise ValueError(f"{self.command.value} needs an explicit target status")
        return self.mutate(record, next_status, actor_id, now)


_TEACHER = frozenset({Role.TEACHER})
_COORDINATOR = frozenset({Role.ACADEMIC_COORDINATOR})

TRANSITIONS: dict[Command, TransitionRule] = {
    Command.CREATE: TransitionRule(
        Command.CREATE, frozenset(), _TEACHER, AttendanceStatus.DRAFT, AuditAction.CREATED, mutate=None
    ),
    Command.SUBMIT: TransitionRule(
        Command.SUBMIT,
        frozenset({AttendanceStatus.DRAFT}),
        _TEACHER,
        AttendanceStatus.SUBMITTED,
        AuditAction.SUBMITTED,
        mutate=_submit,
    ),
    Command.APPROVE: TransitionRule(
        Command.APPROVE,
        frozenset({AttendanceStatus.SUBMITTED}),
        _COORDINATOR,
        AttendanceStatus.APPROVED,
        AuditAction.APPROVED,
        mutate=_approve,
    ),
    Command.PUBLISH: TransitionRule(
        Command.PUBLISH,
        frozenset({AttendanceStatus.APPROVED}),
        _COORDINATOR,
        AttendanceStatus.PUBLISHED,
        AuditAction.PUBLISHED,
        mutate=_publish,
    ),
    Command.LOCK: TransitionRule(
        Command.LOCK,
        frozenset({AttendanceStatus.PUBLISHED}),
        _COORDINATOR,
        AttendanceStatus.LOCKED,
        AuditAction.LOCKED,
    ),
    Command.REQUEST_REOPEN: TransitionRule(
        Command.REQUEST_REOPEN,
        frozenset({AttendanceStatus.SUBMITTED, AttendanceStatus.APPROVED}),
        frozenset({Role.TEACHER, Role.ACADEMIC_COORDINATOR}),
        AttendanceStatus.REOPEN_REQUESTED,
        AuditAction.REOPEN_REQUESTED,
    ),
    Command.APPROVE_REOPEN: TransitionRule(
        Command.APPROVE_REOPEN,
        frozenset({AttendanceStatus.REOPEN_REQUESTED}),
        _COORDINATOR,
        AttendanceStatus.DRAFT,
        AuditAction.REOPEN_APPROVED,
    ),
    # Target comes from the ledger: the status held before the reopen request.
    Command.REJECT_REOPEN: TransitionRule(
        Command.REJECT_REOPEN,
        frozenset({AttendanceStatus.REOPEN_REQUESTED}),
        _COORDINATOR,
        None,
        AuditAction.REOPEN_REJECTED,
    ),
    Command.APPLY_CORRECTION: TransitionRule(
        Command.APPLY_CORRECTION,
        frozenset({AttendanceStatus.PUBLISHED, AttendanceStatus.APPROVED}),
        _COORDINATOR,
        AttendanceStatus.CORRECTED,
        AuditAction.CORRECTED,
    ),
}


def _ordered(statuses) -> list[AttendanceStatus]:
    order = list(AttendanceStatus)
    return sorted(statuses, key=order.index)


def authorize(command: Command, role: Role) -> TransitionRule:
    rule = TRANSITIONS[command]
    if role not in rule.roles:
        allowed = " or ".join(sorted(r.value for r in rule.roles))
        raise AuthorizationError(
            f"Only {allowed} may perform {command.value}.",
            details={"command": command.value, "role": role.value},
        )
    return rule


def ensure_source(rule: TransitionRule, current: AttendanceStatus) -> None:
    if current not in rule.sources:
        required = _ordered(rule.sources)
        names = " or ".join(s.value for s in required)
        raise InvalidStateError(
            f"Cannot {rule.command.value} attendance in {current.value} state. Must be {names}.",
            current=current,
            required=required,
        )


def available_commands(status: AttendanceStatus, role: Role) -> list[Command]:
    """Commands ``role`` could run against a record currently in ``status``."""
    return [c for c, rule in TRANSITIONS.items() if status in rule.sources and role in rule.roles]
