from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.resolver import RecordResolver
from .audit.ledger import AuditLedger
from .common.datetime_utils import now_utc
from .core.constants import SUBMISSION_DEADLINE_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import MySQLUnitOfWork
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .directory.repository import DirectoryRepository
from .reopen.service import ReopenWorkflow
from .workflow.service import AttendanceWorkflowService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    uow_factory: Callable
    directory: DirectoryRepository

    ledger: AuditLedger
    reopen_workflow: ReopenWorkflow
    resolver: RecordResolver
    workflow_service: AttendanceWorkflowService


def assemble(
    *,
    uow_factory: Callable,
    directory: DirectoryRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_utc,
    submission_deadline_hours: int = SUBMISSION_DEADLINE_HOURS,
) -> Container:
    ledger = AuditLedger(uow_factory, directory)
    reopen_workflow = ReopenWorkflow(uow_factory, ledger)
    resolver = RecordResolver(uow_factory)
    workflow_service = AttendanceWorkflowService(
        uow_factory,
        directory,
        ledger=ledger,
        reopen=reopen_workflow,
        clock=clock,
        submission_deadline_hours=submission_deadline_hours,
    )
    return Container(
        conn=conn,
        uow_factory=uow_factory,
        directory=directory,
        ledger=ledger,
        reopen_workflow=reopen_workflow,
        resolver=resolver,
        workflow_service=workflow_service,
    )


def build_container(*, db_config: dict, submission_deadline_hours: int = SUBMISSION_DEADLINE_HOURS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        uow_factory=lambda: MySQLUnitOfWork(conn),
        directory=MySQLDirectoryRepository(conn),
        conn=conn,
        submission_deadline_hours=submission_deadline_hours,
    )
