from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles used for transition authorization."""

    TEACHER = "Teacher"
    ACADEMIC_COORDINATOR = "AcademicCoordinator"
    LEADERSHIP = "Leadership"


class AttendanceStatus(str, Enum):
    """Lifecycle status of one attendance record (one value per record)."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    PUBLISHED = "Published"
    LOCKED = "Locked"
    REOPEN_REQUESTED = "ReopenRequested"
    CORRECTED = "Corrected"


class ReopenStatus(str, Enum):
    """Approval state of a reopen request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AuditAction(str, Enum):
    CREATED = "Created"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    PUBLISHED = "Published"
    LOCKED = "Locked"
    REOPEN_REQUESTED = "ReopenRequested"
    REOPEN_APPROVED = "ReopenApproved"
    REOPEN_REJECTED = "ReopenRejected"
    CORRECTED = "Corrected"
    CORRECTION_CREATED = "CorrectionCreated"
