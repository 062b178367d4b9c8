from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytest

from src.attendance_workflow.attendance_workflow.attendance.model import AttendanceRecord
from src.attendance_workflow.attendance_workflow.audit.model import AuditLog
from src.attendance_workflow.attendance_workflow.container import assemble
from src.attendance_workflow.attendance_workflow.core.enums import AttendanceStatus, ReopenStatus
from src.attendance_workflow.attendance_workflow.core.exceptions import InvalidStateError, InvariantViolationError
from src.attendance_workflow.attendance_workflow.reopen.model import ReopenRequest

TEACHER = ("T-01", "Teacher")
COORDINATOR = ("AC-01", "AcademicCoordinator")
LEADER = ("L-01", "Leadership")
STUDENT = "S-1001"
COURSE = "C-MATH101"
LESSON_DAY = date(2025, 1, 10)


class InMemoryStore:
    """Committed state shared by every unit of work."""

    def __init__(self):
        self.records: dict[str, AttendanceRecord] = {}
        self.audit: list[AuditLog] = []
        self.reopen: dict[int, ReopenRequest] = {}
        self.next_audit_id = 1
        self.next_request_id = 1
        self.commits = 0
        self.rollbacks = 0
        # Test hooks
        self.before_update: Optional[Callable[[str], None]] = None
        self.after_group_read: Optional[Callable[[], None]] = None
        self.fail_audit_action: Optional[str] = None


class InMemoryAttendanceRepo:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    def _all(self) -> list[AttendanceRecord]:
        merged = {**self._uow.store.records, **self._uow.pending_records}
        return list(merged.values())

    def get(self, record_id):
        return self._uow.pending_records.get(record_id) or self._uow.store.records.get(record_id)

    def get_for_update(self, record_id):
        return self.get(record_id)

    def add(self, record):
        taken = [r for r in self._all() if r.group_key == record.group_key and r.version == record.version]
        if taken:
            raise InvalidStateError(
                f"Attendance for student {record.student_id} already exists (version {record.version})",
                details={"student_id": record.student_id, "course_id": record.course_id, "version": record.version},
            )
        self._uow.pending_records[record.record_id] = record

    def update(self, record, *, expected_status):
        if self._uow.store.before_update:
            self._uow.store.before_update(record.record_id)
        current = self.get(record.record_id)
        if current is None or current.status != expected_status:
            return False
        self._uow.pending_records[record.record_id] = record
        return True

    def list_group(self, student_id, course_id, attendance_date):
        rows = [r for r in self._all() if r.group_key == (student_id, course_id, attendance_date)]
        return sorted(rows, key=lambda r: r.version)

    def list_group_for_update(self, student_id, course_id, attendance_date):
        rows = self.list_group(student_id, course_id, attendance_date)
        if self._uow.store.after_group_read:
            self._uow.store.after_group_read()
        return rows

    def list_children(self, record_id):
        return sorted([r for r in self._all() if r.parent_version_id == record_id], key=lambda r: r.version)

    def list_roots_for_student(self, student_id, start_date, end_date):
        rows = [
            r
            for r in self._all()
            if r.student_id == student_id and start_date <= r.attendance_date <= end_date and r.parent_version_id is None
        ]
        return sorted(rows, key=lambda r: r.attendance_date)

    def list_roots_for_course(self, course_id, attendance_date):
        rows = [
            r
            for r in self._all()
            if r.course_id == course_id and r.attendance_date == attendance_date and r.parent_version_id is None
        ]
        return sorted(rows, key=lambda r: r.student_id)

    def list_by_statuses(self, statuses, *, limit=500):
        wanted = set(statuses)
        rows = [r for r in self._all() if r.status in wanted]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)[:limit]


class InMemoryAuditRepo:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    def _all(self) -> list[AuditLog]:
        return list(self._uow.store.audit) + list(self._uow.pending_audit)

    def append(self, *, record_id, action, previous_status, new_status, actor_id, actor_role, reason, created_at, previous_value=None, new_value=None):
        store = self._uow.store
        if store.fail_audit_action and action.value == store.fail_audit_action:
            raise RuntimeError("audit store unavailable")
        audit_id = store.next_audit_id
        store.next_audit_id += 1
        self._uow.pending_audit.append(
            AuditLog(
                audit_id=audit_id,
                record_id=record_id,
                action=action,
                previous_status=previous_status,
                new_status=new_status,
                actor_id=actor_id,
                actor_role=actor_role,
                reason=reason,
                created_at=created_at,
                previous_value=previous_value,
                new_value=new_value,
            )
        )
        return audit_id

    def list_for_record(self, record_id):
        return sorted([e for e in self._all() if e.record_id == record_id], key=lambda e: (e.created_at, e.audit_id))

    def list_by_actor(self, actor_id, *, limit=500):
        rows = [e for e in self._all() if e.actor_id == actor_id]
        return sorted(rows, key=lambda e: (e.created_at, e.audit_id), reverse=True)[:limit]

    def list_between(self, start, end):
        rows = [e for e in self._all() if start <= e.created_at <= end]
        return sorted(rows, key=lambda e: (e.created_at, e.audit_id))

    def update(self, entry):
        raise InvariantViolationError("Audit logs are immutable and cannot be updated.")

    def delete(self, audit_id):
        raise InvariantViolationError("Audit logs are immutable and cannot be deleted.")


class InMemoryReopenRepo:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    def _all(self) -> list[ReopenRequest]:
        return list({**self._uow.store.reopen, **self._uow.pending_reopen}.values())

    def create(self, *, record_id, reason, requested_by, requested_at):
        store = self._uow.store
        rid = store.next_request_id
        store.next_request_id += 1
        self._uow.pending_reopen[rid] = ReopenRequest(
            request_id=rid,
            record_id=record_id,
            reason=reason,
            requested_by=requested_by,
            requested_at=requested_at,
            status=ReopenStatus.PENDING,
        )
        return rid

    def get(self, request_id):
        return self._uow.pending_reopen.get(int(request_id)) or self._uow.store.reopen.get(int(request_id))

    def decide(self, *, request_id, status, decided_by, decided_at, comments=None):
        req = self.get(request_id)
        if not req or req.status != ReopenStatus.PENDING:
            return False
        self._uow.pending_reopen[req.request_id] = replace(
            req, status=status, decided_by=decided_by, decided_at=decided_at, comments=comments
        )
        return True

    def list_for_record(self, record_id):
        return sorted([r for r in self._all() if r.record_id == record_id], key=lambda r: r.request_id)

    def list_by_status(self, status, *, limit=500):
        rows = [r for r in self._all() if r.status == status]
        return sorted(rows, key=lambda r: r.requested_at, reverse=True)[:limit]


class InMemoryUnitOfWork:
    """Stages writes and applies them to the store only on a clean exit."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.pending_records: dict[str, AttendanceRecord] = {}
        self.pending_audit: list[AuditLog] = []
        self.pending_reopen: dict[int, ReopenRequest] = {}
        self.attendance = InMemoryAttendanceRepo(self)
        self.audit = InMemoryAuditRepo(self)
        self.reopen = InMemoryReopenRepo(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.store.records.update(self.pending_records)
            self.store.audit.extend(self.pending_audit)
            self.store.reopen.update(self.pending_reopen)
            self.store.commits += 1
        else:
            self.store.rollbacks += 1
        return False


class FakeDirectory:
    def __init__(self):
        self.students = {STUDENT, "S-1002"}
        self.courses = {COURSE, "C-HIST201"}
        self.actors = {"T-01": "Teacher Demo", "AC-01": "Coordinator Demo"}
        self.broken = False

    def student_exists(self, student_id):
        return student_id in self.students

    def course_exists(self, course_id):
        return course_id in self.courses

    def get_actor_name(self, actor_id):
        if self.broken:
            raise ConnectionError("directory offline")
        return self.actors.get(actor_id)


class FakeClock:
    def __init__(self, start: datetime = datetime(2025, 1, 10, 8, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_container(store, directory, clock):
    def _make(**kwargs):
        return assemble(uow_factory=lambda: InMemoryUnitOfWork(store), directory=directory, clock=clock, **kwargs)

    return _make


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def service(container):
    return container.workflow_service


@pytest.fixture
def new_record(service):
    def _make(student_id=STUDENT, course_id=COURSE, attendance_date=LESSON_DAY, is_present=True, remarks=""):
        return service.create_attendance(
            student_id=student_id,
            course_id=course_id,
            attendance_date=attendance_date,
            is_present=is_present,
            remarks=remarks,
            actor_id=TEACHER[0],
            actor_role=TEACHER[1],
        )

    return _make


@pytest.fixture
def record_in(container, service, new_record):
    """Create a record and walk it along the happy path to ``status``."""

    def _drive(status: AttendanceStatus, **kwargs) -> AttendanceRecord:
        rec = new_record(**kwargs)
        if status == AttendanceStatus.DRAFT:
            return rec
        rec = service.submit(rec.record_id, *TEACHER)
        if status == AttendanceStatus.SUBMITTED:
            return rec
        if status == AttendanceStatus.REOPEN_REQUESTED:
            service.request_reopen(rec.record_id, *TEACHER, reason="Wrong student marked")
            return container.resolver.get(rec.record_id)
        rec = service.approve(rec.record_id, *COORDINATOR)
        if status == AttendanceStatus.APPROVED:
            return rec
        rec = service.publish(rec.record_id, *COORDINATOR)
        if status == AttendanceStatus.PUBLISHED:
            return rec
        if status == AttendanceStatus.LOCKED:
            return service.lock(rec.record_id, *COORDINATOR)
        if status == AttendanceStatus.CORRECTED:
            service.apply_correction(rec.record_id, False, "fix", "typo", *COORDINATOR)
            return container.resolver.get(rec.record_id)
        raise ValueError(status)

    return _drive
