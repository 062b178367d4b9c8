from __future__ import annotations

from contextlib import ExitStack
from typing import Callable, Protocol

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..attendance.repository import AttendanceRepository
from ..audit.mysql_audit_repository import MySQLAuditLogRepository
from ..audit.repository import AuditLogRepository
from ..reopen.mysql_reopen_repository import MySQLReopenRequestRepository
from ..reopen.repository import ReopenRequestRepository
from .connection import DatabaseConnection
from .mysql_base import db_cursor


class UnitOfWork(Protocol):
    """One transaction spanning every repository a workflow step touches.

    Leaving the ``with`` block normally commits; an exception rolls back all
    writes made through ``attendance``, ``audit`` and ``reopen``.
    """

    attendance: AttendanceRepository
    audit: AuditLogRepository
    reopen: ReopenRequestRepository

    def __enter__(self) -> "UnitOfWork":
        raise NotImplementedError

    def __exit__(self, exc_type, exc, tb) -> bool:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], UnitOfWork]


class MySQLUnitOfWork:
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._stack: ExitStack | None = None

    def __enter__(self) -> "MySQLUnitOfWork":
        self._stack = ExitStack()
        _, cur = self._stack.enter_context(db_cursor(self._conn_factory))
        self.attendance = MySQLAttendanceRepository(cur)
        self.audit = MySQLAuditLogRepository(cur)
        self.reopen = MySQLReopenRequestRepository(cur)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        stack, self._stack = self._stack, None
        return bool(stack.__exit__(exc_type, exc, tb)) if stack else False
