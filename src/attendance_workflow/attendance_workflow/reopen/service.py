from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..audit.ledger import AuditLedger
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus, AuditAction, ReopenStatus
from ..core.exceptions import InvalidStateError, NotFoundError
from .model import ReopenRequest


class ReopenWorkflow:
    """Lifecycle of reopen requests (Pending -> Approved | Rejected).

    Mutating helpers take the caller's unit of work so the request and the
    record transition commit together.
    """

    def __init__(self, uow_factory, ledger: AuditLedger):
        self._uow_factory = uow_factory
        self._ledger = ledger

    def open(self, uow, *, record_id: str, reason: str, requested_by: str, now: datetime) -> int:
        return uow.reopen.create(record_id=record_id, reason=reason, requested_by=str(requested_by), requested_at=now)

    @staticmethod
    def get(uow, request_id: int) -> ReopenRequest:
        req = uow.reopen.get(int(request_id))
        if not req:
            raise NotFoundError("Reopen request not found.", details={"reopen_request_id": request_id})
        return req

    @staticmethod
    def ensure_pending(req: ReopenRequest) -> None:
        if req.status != ReopenStatus.PENDING:
            raise InvalidStateError(
                f"Reopen request {req.request_id} was already {req.status.value}.",
                current=req.status,
                required=[ReopenStatus.PENDING],
            )

    def resolve(
        self,
        uow,
        req: ReopenRequest,
        *,
        status: ReopenStatus,
        decided_by: str,
        now: datetime,
        comments: Optional[str] = None,
    ) -> None:
        decided = uow.reopen.decide(
            request_id=req.request_id,
            status=status,
            decided_by=str(decided_by),
            decided_at=now,
            comments=comments,
        )
        if not decided:
            fresh = uow.reopen.get(req.request_id)
            raise InvalidStateError(
                f"Reopen request {req.request_id} was resolved concurrently.",
                current=fresh.status if fresh else None,
                required=[ReopenStatus.PENDING],
            )

    def status_before_reopen(self, uow, record_id: str) -> AttendanceStatus:
        """The record does not keep it; the ledger entry of the request does."""
        entry = self._ledger.last_entry(uow, record_id, AuditAction.REOPEN_REQUESTED)
        if entry is None or entry.previous_status is None:
            raise InvalidStateError(
                "No reopen request entry in the audit trail to restore the status from.",
                details={"record_id": record_id},
            )
        return entry.previous_status

    def list_for_record(self, record_id: str) -> list[ReopenRequest]:
        with self._uow_factory() as uow:
            return list(uow.reopen.list_for_record(record_id))

    def list_pending(self, *, limit: int = DEFAULT_LIST_LIMIT) -> list[ReopenRequest]:
        with self._uow_factory() as uow:
            return list(uow.reopen.list_by_status(ReopenStatus.PENDING, limit=limit))
