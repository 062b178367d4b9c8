from __future__ import annotations

from datetime import datetime

import pytest

from src.attendance_workflow.attendance_workflow.audit.mysql_audit_repository import MySQLAuditLogRepository
from src.attendance_workflow.attendance_workflow.core.enums import AttendanceStatus, AuditAction
from src.attendance_workflow.attendance_workflow.core.exceptions import (
    InvalidStateError,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)

TEACHER = ("T-01", "Teacher")
COORDINATOR = ("AC-01", "AcademicCoordinator")


def test_trail_is_chronological_and_named(container, record_in):
    rec = record_in(AttendanceStatus.PUBLISHED)

    trail = container.ledger.trail(rec.record_id)

    assert [e.action for e in trail] == ["Created", "Submitted", "Approved", "Published"]
    assert [e.actor_name for e in trail] == ["Teacher Demo", "Teacher Demo", "Coordinator Demo", "Coordinator Demo"]
    assert trail[0].previous_status is None
    assert trail[-1].new_status == "Published"


def test_trail_falls_back_to_unknown_name(container, record_in, directory):
    rec = record_in(AttendanceStatus.SUBMITTED)
    directory.broken = True

    trail = container.ledger.trail(rec.record_id)

    assert {e.actor_name for e in trail} == {"Unknown"}


def test_trail_for_missing_record(container):
    with pytest.raises(NotFoundError):
        container.ledger.trail("nope")


def test_by_actor_newest_first(container, record_in):
    record_in(AttendanceStatus.PUBLISHED)

    entries = container.ledger.by_actor("AC-01")

    assert [e.action for e in entries] == ["Published", "Approved"]


def test_between_filters_by_time(container, record_in, clock, service):
    rec = record_in(AttendanceStatus.SUBMITTED)
    clock.advance(days=2)
    service.approve(rec.record_id, *COORDINATOR)

    later = container.ledger.between(datetime(2025, 1, 11), datetime(2025, 1, 31))

    assert [e.action for e in later] == ["Approved"]
    with pytest.raises(ValidationError):
        container.ledger.between(datetime(2025, 1, 31), datetime(2025, 1, 11))


def test_failed_actions_are_not_logged(service, record_in, store):
    rec = record_in(AttendanceStatus.DRAFT)
    with pytest.raises(InvalidStateError):
        service.lock(rec.record_id, *COORDINATOR)
    assert [e.action for e in store.audit] == [AuditAction.CREATED]


def test_audit_entries_cannot_be_changed(store, record_in):
    record_in(AttendanceStatus.SUBMITTED)
    entry = store.audit[0]
    repo = MySQLAuditLogRepository(cur=None)

    with pytest.raises(InvariantViolationError) as ei:
        repo.update(entry)
    assert ei.value.details == {"audit_id": entry.audit_id}

    with pytest.raises(InvariantViolationError):
        repo.delete(entry.audit_id)
