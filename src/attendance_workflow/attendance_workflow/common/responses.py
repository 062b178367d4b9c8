from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from flask import jsonify

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)

HTTP_STATUS_BY_KIND = {
    "not_found": 404,
    "unauthorized": 403,
    "invalid_state": 409,
    "invalid_argument": 400,
    "invariant_violation": 405,
}


def to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def ok(payload: Any, status: int = 200):
    return jsonify(to_jsonable(payload)), status


def error_response(err: DomainError):
    return jsonify(to_jsonable(err.to_dict())), HTTP_STATUS_BY_KIND.get(err.kind, 400)


def internal_error_response(err):
    logger.exception("Unhandled error: %s", getattr(err, "original_exception", err))
    return jsonify({"error": "internal", "message": "Internal server error"}), 500
