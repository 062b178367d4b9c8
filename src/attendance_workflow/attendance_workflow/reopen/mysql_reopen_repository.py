from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import ReopenStatus
from ..database.mysql_base import fetchall, fetchone
from .model import ReopenRequest
from .repository import ReopenRequestRepository

_COLUMNS = "request_id, record_id, reason, requested_by, requested_at, status, decided_by, decided_at, comments"


def _to_request(r: Dict[str, Any]) -> ReopenRequest:
    return ReopenRequest(
        request_id=int(r["request_id"]),
        record_id=str(r["record_id"]),
        reason=r["reason"],
        requested_by=str(r["requested_by"]),
        requested_at=r["requested_at"],
        status=ReopenStatus(r["status"]),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        comments=r.get("comments"),
    )


class MySQLReopenRequestRepository(ReopenRequestRepository):
    def __init__(self, cur):
        self._cur = cur

    def create(self, *, record_id: str, reason: str, requested_by: str, requested_at: datetime) -> int:
        self._cur.execute(
            """
            INSERT INTO reopen_requests(record_id, reason, requested_by, requested_at, status)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (str(record_id), reason, str(requested_by), requested_at, ReopenStatus.PENDING.value),
        )
        return int(self._cur.lastrowid)

    def get(self, request_id: int) -> Optional[ReopenRequest]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM reopen_requests WHERE request_id=%s", (int(request_id),))
        r = fetchone(self._cur)
        return _to_request(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: ReopenStatus,
        decided_by: str,
        decided_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        self._cur.execute(
            """
            UPDATE reopen_requests
            SET status=%s, decided_by=%s, decided_at=%s, comments=%s
            WHERE request_id=%s AND status=%s
            """,
            (
                status.value,
                str(decided_by),
                decided_at,
                comments,
                int(request_id),
                ReopenStatus.PENDING.value,
            ),
        )
        return self._cur.rowcount > 0

    def list_for_record(self, record_id: str) -> Sequence[ReopenRequest]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM reopen_requests WHERE record_id=%s ORDER BY requested_at ASC, request_id ASC",
            (str(record_id),),
        )
        return [_to_request(r) for r in fetchall(self._cur)]

    def list_by_status(self, status: ReopenStatus, *, limit: int = 500) -> Sequence[ReopenRequest]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS} FROM reopen_requests
            WHERE status=%s
            ORDER BY requested_at DESC
            LIMIT %s
            """,
            (status.value, int(limit)),
        )
        return [_to_request(r) for r in fetchall(self._cur)]
