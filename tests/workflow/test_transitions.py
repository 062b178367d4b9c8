from __future__ import annotations

from datetime import date, datetime

import pytest

from src.attendance_workflow.attendance_workflow.attendance.model import AttendanceRecord
from src.attendance_workflow.attendance_workflow.core.enums import AttendanceStatus, AuditAction, Role
from src.attendance_workflow.attendance_workflow.core.exceptions import AuthorizationError, InvalidStateError
from src.attendance_workflow.attendance_workflow.workflow.transitions import (
    TRANSITIONS,
    Command,
    authorize,
    available_commands,
    ensure_source,
)


def _record(status: AttendanceStatus) -> AttendanceRecord:
    created = datetime(2025, 1, 10, 8, 0, 0)
    return AttendanceRecord(
        record_id="r-1",
        student_id="S-1001",
        course_id="C-MATH101",
        attendance_date=date(2025, 1, 10),
        status=status,
        is_present=True,
        remarks="",
        version=0,
        parent_version_id=None,
        created_at=created,
        created_by="T-01",
        modified_at=created,
        modified_by="T-01",
    )


def test_every_command_has_a_rule():
    assert set(TRANSITIONS) == set(Command)


@pytest.mark.parametrize(
    "command,sources,target",
    [
        (Command.SUBMIT, {AttendanceStatus.DRAFT}, AttendanceStatus.SUBMITTED),
        (Command.APPROVE, {AttendanceStatus.SUBMITTED}, AttendanceStatus.APPROVED),
        (Command.PUBLISH, {AttendanceStatus.APPROVED}, AttendanceStatus.PUBLISHED),
        (Command.LOCK, {AttendanceStatus.PUBLISHED}, AttendanceStatus.LOCKED),
        (
            Command.REQUEST_REOPEN,
            {AttendanceStatus.SUBMITTED, AttendanceStatus.APPROVED},
            AttendanceStatus.REOPEN_REQUESTED,
        ),
        (Command.APPROVE_REOPEN, {AttendanceStatus.REOPEN_REQUESTED}, AttendanceStatus.DRAFT),
        (
            Command.APPLY_CORRECTION,
            {AttendanceStatus.PUBLISHED, AttendanceStatus.APPROVED},
            AttendanceStatus.CORRECTED,
        ),
    ],
)
def test_rule_sources_and_targets(command, sources, target):
    rule = TRANSITIONS[command]
    assert set(rule.sources) == sources
    assert rule.target == target


def test_locked_and_corrected_are_terminal():
    for status in (AttendanceStatus.LOCKED, AttendanceStatus.CORRECTED):
        for role in Role:
            assert available_commands(status, role) == []


def test_role_matrix():
    assert authorize(Command.SUBMIT, Role.TEACHER).action == AuditAction.SUBMITTED
    assert authorize(Command.REQUEST_REOPEN, Role.ACADEMIC_COORDINATOR).target == AttendanceStatus.REOPEN_REQUESTED

    with pytest.raises(AuthorizationError):
        authorize(Command.APPROVE, Role.TEACHER)
    with pytest.raises(AuthorizationError):
        authorize(Command.SUBMIT, Role.ACADEMIC_COORDINATOR)
    with pytest.raises(AuthorizationError):
        authorize(Command.CREATE, Role.LEADERSHIP)


def test_ensure_source_reports_current_and_required():
    with pytest.raises(InvalidStateError) as ei:
        ensure_source(TRANSITIONS[Command.APPLY_CORRECTION], AttendanceStatus.DRAFT)

    err = ei.value
    assert err.current == AttendanceStatus.DRAFT
    assert err.required == (AttendanceStatus.APPROVED, AttendanceStatus.PUBLISHED)
    assert err.details == {"current": "Draft", "required": ["Approved", "Published"]}


def test_available_commands_for_submitted():
    assert available_commands(AttendanceStatus.SUBMITTED, Role.TEACHER) == [Command.REQUEST_REOPEN]
    assert available_commands(AttendanceStatus.SUBMITTED, Role.ACADEMIC_COORDINATOR) == [
        Command.APPROVE,
        Command.REQUEST_REOPEN,
    ]


def test_apply_stamps_actor_and_time_without_touching_input():
    before = _record(AttendanceStatus.SUBMITTED)
    now = datetime(2025, 1, 10, 9, 30, 0)

    after = TRANSITIONS[Command.APPROVE].apply(before, actor_id="AC-01", now=now)

    assert after.status == AttendanceStatus.APPROVED
    assert (after.approved_by, after.approved_at) == ("AC-01", now)
    assert (after.modified_by, after.modified_at) == ("AC-01", now)
    assert before.status == AttendanceStatus.SUBMITTED
    assert before.approved_by is None


def test_reject_reopen_needs_explicit_target():
    rule = TRANSITIONS[Command.REJECT_REOPEN]
    rec = _record(AttendanceStatus.REOPEN_REQUESTED)

    with pytest.raises(ValueError):
        rule.apply(rec, actor_id="AC-01", now=datetime(2025, 1, 11))

    restored = rule.apply(rec, actor_id="AC-01", now=datetime(2025, 1, 11), target=AttendanceStatus.APPROVED)
    assert restored.status == AttendanceStatus.APPROVED
