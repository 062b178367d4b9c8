from __future__ import annotations

import logging
from typing import Any

from flask import request

from ..core.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


def current_actor() -> tuple[str, str]:
    """Identity is established upstream; we only read what the gateway forwards."""
    actor_id = (request.headers.get("X-Actor-Id") or "").strip()
    actor_role = (request.headers.get("X-Actor-Role") or "").strip()
    if not actor_id or not actor_role:
        logger.warning("Rejected %s %s: missing actor identity", request.method, request.path)
        raise AuthorizationError("Missing actor identity (X-Actor-Id / X-Actor-Role)")
    return actor_id, actor_role


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
