from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReopenStatus
from .model import ReopenRequest


class ReopenRequestRepository(Protocol):
    def create(self, *, record_id: str, reason: str, requested_by: str, requested_at: datetime) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[ReopenRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: ReopenStatus,
        decided_by: str,
        decided_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        """Resolve a Pending request; returns False if it was no longer Pending."""

        raise NotImplementedError

    def list_for_record(self, record_id: str) -> Sequence[ReopenRequest]:
        raise NotImplementedError

    def list_by_status(self, status: ReopenStatus, *, limit: int = 500) -> Sequence[ReopenRequest]:
        raise NotImplementedError
