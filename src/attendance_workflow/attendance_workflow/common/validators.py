from __future__ import annotations

import uuid
from typing import Any

from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return value.strip()


def optional_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_status(value: Any) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value))
    except ValueError:
        raise ValidationError(
            f"Invalid status: {value}",
            details={"value": value, "allowed": [s.value for s in AttendanceStatus]},
        )


def parse_role(value: Any) -> Role:
    """Resolve the caller's role; anything unrecognised is denied."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value))
    except ValueError:
        raise AuthorizationError(f"Unknown actor role: {value}", details={"role": value})


def parse_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in {"1", "true", "yes"}:
        return True
    if v in {"0", "false", "no"}:
        return False
    raise ValidationError(f"{field_name} must be a boolean", details={"field": field_name, "value": value})


def new_record_id() -> str:
    return str(uuid.uuid4())
