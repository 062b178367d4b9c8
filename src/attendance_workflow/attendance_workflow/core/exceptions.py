from __future__ import annotations

from typing import Any, Iterable, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Carries a machine readable ``kind`` plus optional ``details`` so the
    boundary layer can render it without inspecting the message.
    """

    kind = "domain_error"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class NotFoundError(DomainError):
    """Raised when a record, student, course or reopen request does not exist."""

    kind = "not_found"


class AuthorizationError(DomainError):
    """Raised when the actor's role is not permitted for an action."""

    kind = "unauthorized"


class ValidationError(DomainError):
    """Raised when input data is malformed (bad enum, date, empty text...)."""

    kind = "invalid_argument"


class InvariantViolationError(DomainError):
    """Raised on attempts to mutate append-only data."""

    kind = "invariant_violation"


class InvalidStateError(DomainError):
    """Raised when the current status does not allow the transition.

    Also used for business rules that depend on state (submission deadline,
    duplicate active record).
    """

    kind = "invalid_state"

    def __init__(
        self,
        message: str,
        *,
        current: Any = None,
        required: Optional[Iterable[Any]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if current is not None:
            merged["current"] = getattr(current, "value", current)
        if required is not None:
            merged["required"] = [getattr(s, "value", s) for s in required]
        super().__init__(message, details=merged)
        self.current = current
        self.required = tuple(required or ())
