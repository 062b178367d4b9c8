from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ReopenStatus


@dataclass(frozen=True)
class ReopenRequest:
    request_id: int
    record_id: str
    reason: str
    requested_by: str
    requested_at: datetime
    status: ReopenStatus
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    comments: Optional[str] = None
