from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..audit.ledger import AuditLedger
from ..common.datetime_utils import hours_between, now_utc
from ..common.validators import new_record_id, optional_text, parse_bool, parse_role, require_non_empty
from ..core.constants import SUBMISSION_DEADLINE_HOURS
from ..core.enums import AttendanceStatus, AuditAction, ReopenStatus, Role
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError
from ..directory.repository import DirectoryRepository
from ..reopen.service import ReopenWorkflow
from ..versioning.engine import create_correction_version, describe_values
from .transitions import Command, TransitionRule, authorize, ensure_source

logger = logging.getLogger(__name__)


class AttendanceWorkflowService:
    """State machine for attendance records.

    Every public method runs one unit of work: authorize the role, load and
    lock the record, check its status against the transition table, write the
    new value plus its audit entry (and reopen request / correction version).
    Any failure rolls the whole unit back.
    """

    def __init__(
        self,
        uow_factory,
        directory: DirectoryRepository,
        *,
        ledger: Optional[AuditLedger] = None,
        reopen: Optional[ReopenWorkflow] = None,
        clock: Callable[[], datetime] = now_utc,
        submission_deadline_hours: int = SUBMISSION_DEADLINE_HOURS,
    ):
        self._uow_factory = uow_factory
        self._directory = directory
        self._ledger = ledger or AuditLedger(uow_factory, directory)
        self._reopen = reopen or ReopenWorkflow(uow_factory, self._ledger)
        self._clock = clock
        self._deadline_hours = int(submission_deadline_hours)

    # -------- helpers --------
    @staticmethod
    def _authorize(command: Command, actor_role) -> tuple[Role, TransitionRule]:
        role = parse_role(actor_role)
        try:
            return role, authorize(command, role)
        except AuthorizationError:
            logger.warning("Denied %s for role %s", command.value, role.value)
            raise

    @staticmethod
    def _load(uow, record_id: str) -> AttendanceRecord:
        record = uow.attendance.get_for_update(str(record_id))
        if record is None:
            raise NotFoundError("Attendance record not found.", details={"record_id": record_id})
        return record

    def _load_in_state(self, uow, rule: TransitionRule, record_id: str) -> AttendanceRecord:
        record = self._load(uow, record_id)
        ensure_source(rule, record.status)
        return record

    def _transition(
        self,
        uow,
        rule: TransitionRule,
        current: AttendanceRecord,
        *,
        actor_id: str,
        role: Role,
        now: datetime,
        reason: str,
        target: Optional[AttendanceStatus] = None,
    ) -> AttendanceRecord:
        updated = rule.apply(current, actor_id=str(actor_id), now=now, target=target)
        if not uow.attendance.update(updated, expected_status=current.status):
            fresh = uow.attendance.get(current.record_id)
            raise InvalidStateError(
                f"Attendance record changed while {rule.command.value} was in progress.",
                current=fresh.status if fresh else None,
                required=[current.status],
            )
        self._ledger.record(
            uow,
            record_id=current.record_id,
            action=rule.action,
            previous_status=current.status,
            new_status=updated.status,
            actor_id=actor_id,
            actor_role=role,
            reason=reason,
            now=now,
        )
        return updated

    @staticmethod
    def _log(rule: TransitionRule, before: AttendanceRecord, after: AttendanceRecord, actor_id: str) -> None:
        logger.info(
            "%s: record %s %s -> %s by %s",
            rule.command.value,
            before.record_id,
            before.status.value,
            after.status.value,
            actor_id,
        )

    def _simple(self, command: Command, record_id: str, actor_id: str, actor_role, reason: str) -> AttendanceRecord:
        role, rule = self._authorize(command, actor_role)
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._load_in_state(uow, rule, record_id)
            updated = self._transition(uow, rule, current, actor_id=actor_id, role=role, now=now, reason=reason)
        self._log(rule, current, updated, actor_id)
        return updated

    # -------- transitions --------
    def create_attendance(
        self,
        *,
        student_id: str,
        course_id: str,
        attendance_date: date,
        is_present,
        remarks: str = "",
        actor_id: str,
        actor_role,
    ) -> AttendanceRecord:
        role, rule = self._authorize(Command.CREATE, actor_role)
        present = parse_bool(is_present, "is_present")

        if not self._directory.student_exists(str(student_id)):
            raise NotFoundError(f"Student with ID {student_id} not found.", details={"student_id": student_id})
        if not self._directory.course_exists(str(course_id)):
            raise NotFoundError(f"Course with ID {course_id} not found.", details={"course_id": course_id})

        now = self._clock()
        with self._uow_factory() as uow:
            active = [
                r
                for r in uow.attendance.list_group_for_update(str(student_id), str(course_id), attendance_date)
                if r.status != AttendanceStatus.CORRECTED
            ]
            if active:
                existing = active[-1]
                raise InvalidStateError(
                    f"Attendance for student {student_id} on {attendance_date:%Y-%m-%d} "
                    f"already exists in state {existing.status.value}",
                    current=existing.status,
                    details={"record_id": existing.record_id},
                )

            record = AttendanceRecord(
                record_id=new_record_id(),
                student_id=str(student_id),
                course_id=str(course_id),
                attendance_date=attendance_date,
                status=AttendanceStatus.DRAFT,
                is_present=present,
                remarks=optional_text(remarks),
                version=0,
                parent_version_id=None,
                created_at=now,
                created_by=str(actor_id),
                modified_at=now,
                modified_by=str(actor_id),
            )
            uow.attendance.add(record)
            self._ledger.record(
                uow,
                record_id=record.record_id,
                action=rule.action,
                previous_status=None,
                new_status=record.status,
                actor_id=actor_id,
                actor_role=role,
                reason=f"Attendance marked - Present: {present}",
                now=now,
            )

        logger.info("Create: record %s for student %s course %s on %s", record.record_id, student_id, course_id, attendance_date)
        return record

    def submit(self, record_id: str, actor_id: str, actor_role) -> AttendanceRecord:
        role, rule = self._authorize(Command.SUBMIT, actor_role)
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._load_in_state(uow, rule, record_id)
            if hours_between(current.created_at, now) > self._deadline_hours:
                raise InvalidStateError(
                    f"Submission deadline has passed ({self._deadline_hours} hours). Request reopen if needed.",
                    current=current.status,
                    details={"created_at": current.created_at.isoformat(), "deadline_hours": self._deadline_hours},
                )
            updated = self._transition(
                uow, rule, current, actor_id=actor_id, role=role, now=now, reason="Attendance submitted for approval"
            )
        self._log(rule, current, updated, actor_id)
        return updated

    def approve(self, record_id: str, actor_id: str, actor_role, notes: str = "") -> AttendanceRecord:
        return self._simple(Command.APPROVE, record_id, actor_id, actor_role, optional_text(notes))

    def publish(self, record_id: str, actor_id: str, actor_role) -> AttendanceRecord:
        return self._simple(Command.PUBLISH, record_id, actor_id, actor_role, "Attendance published")

    def lock(self, record_id: str, actor_id: str, actor_role) -> AttendanceRecord:
        return self._simple(
            Command.LOCK, record_id, actor_id, actor_role, "Attendance locked - no further changes allowed"
        )

    def request_reopen(self, record_id: str, actor_id: str, actor_role, reason: str) -> bool:
        role, rule = self._authorize(Command.REQUEST_REOPEN, actor_role)
        reason = require_non_empty(reason, "Reason")
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._load_in_state(uow, rule, record_id)
            updated = self._transition(uow, rule, current, actor_id=actor_id, role=role, now=now, reason=reason)
            request_id = self._reopen.open(uow, record_id=current.record_id, reason=reason, requested_by=actor_id, now=now)
        self._log(rule, current, updated, actor_id)
        logger.info("Reopen request %s opened for record %s", request_id, current.record_id)
        return True

    def approve_reopen(self, reopen_request_id: int, actor_id: str, actor_role, comments: str = "") -> AttendanceRecord:
        role, rule = self._authorize(Command.APPROVE_REOPEN, actor_role)
        comments = optional_text(comments)
        now = self._clock()
        with self._uow_factory() as uow:
            req = self._reopen.get(uow, reopen_request_id)
            current = self._load_in_state(uow, rule, req.record_id)
            self._reopen.ensure_pending(req)
            updated = self._transition(
                uow,
                rule,
                current,
                actor_id=actor_id,
                role=role,
                now=now,
                reason=f"Reopen approved. Comments: {comments}",
            )
            self._reopen.resolve(
                uow, req, status=ReopenStatus.APPROVED, decided_by=actor_id, now=now, comments=comments or None
            )
        self._log(rule, current, updated, actor_id)
        return updated

    def reject_reopen(self, reopen_request_id: int, actor_id: str, actor_role, comments: str = "") -> AttendanceRecord:
        """Decline a reopen request; the record goes back to where it was before the request."""
        role, rule = self._authorize(Command.REJECT_REOPEN, actor_role)
        comments = optional_text(comments)
        now = self._clock()
        with self._uow_factory() as uow:
            req = self._reopen.get(uow, reopen_request_id)
            current = self._load_in_state(uow, rule, req.record_id)
            self._reopen.ensure_pending(req)
            restored = self._reopen.status_before_reopen(uow, current.record_id)
            updated = self._transition(
                uow,
                rule,
                current,
                actor_id=actor_id,
                role=role,
                now=now,
                reason=f"Reopen rejected. Comments: {comments}",
                target=restored,
            )
            self._reopen.resolve(
                uow, req, status=ReopenStatus.REJECTED, decided_by=actor_id, now=now, comments=comments or None
            )
        self._log(rule, current, updated, actor_id)
        return updated

    def apply_correction(
        self,
        record_id: str,
        is_present,
        remarks: str,
        reason: str,
        actor_id: str,
        actor_role,
    ) -> AttendanceRecord:
        """Freeze the record as Corrected and return its new Draft version."""
        role, rule = self._authorize(Command.APPLY_CORRECTION, actor_role)
        present = parse_bool(is_present, "is_present")
        reason = optional_text(reason)
        now = self._clock()
        with self._uow_factory() as uow:
            current = self._load_in_state(uow, rule, record_id)
            original = self._transition(
                uow,
                rule,
                current,
                actor_id=actor_id,
                role=role,
                now=now,
                reason=f"Correction applied. Reason: {reason}",
            )
            correction = replace(
                create_correction_version(current, new_id=new_record_id(), actor_id=str(actor_id), now=now),
                is_present=present,
                remarks=optional_text(remarks),
            )
            uow.attendance.add(correction)
            self._ledger.record(
                uow,
                record_id=correction.record_id,
                action=AuditAction.CORRECTION_CREATED,
                previous_status=None,
                new_status=correction.status,
                actor_id=actor_id,
                actor_role=role,
                reason=f"New correction version created. Reason: {reason}",
                now=now,
                previous_value=describe_values(current),
                new_value=describe_values(correction),
            )
        self._log(rule, current, original, actor_id)
        logger.info(
            "Correction version %s (v%s) created from record %s",
            correction.record_id,
            correction.version,
            current.record_id,
        )
        return correction
