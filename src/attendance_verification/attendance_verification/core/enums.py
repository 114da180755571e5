from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles as stored by the user directory."""

    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    ASSISTANT = "ASSISTANT"
    INSTRUCTOR = "INSTRUCTOR"


# Who may scan / take attendance.
SCANNER_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN, Role.ASSISTANT})
# Who may read everybody's records and edit them.
MANAGER_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN, Role.INSTRUCTOR})


class AttendanceType(str, Enum):
    COURSE = "course"
    LIVE_MEETING = "live_meeting"
    GENERAL = "general"


class ScanMethod(str, Enum):
    QR_CODE = "qr_code"
    MANUAL = "manual"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class RejectionReason(str, Enum):
    """Client-facing reasons an attendance submission is turned down."""

    INCOMPLETE = "incomplete"
    NOT_FOUND = "not_found"
    IDENTITY_MISMATCH = "identity_mismatch"
    EXPIRED = "expired"
    SCOPE_NOT_FOUND = "scope_not_found"
    CONFLICTING_SCOPE = "conflicting_scope"
    DUPLICATE_FOR_DAY = "duplicate_for_day"
    NO_CODE_FOUND = "no_code_found"
    UNDECODABLE = "undecodable"


class MatchedBy(str, Enum):
    """Which directory lookup produced the resolved identity."""

    ID = "id"
    STUDENT_ID = "student_id"
    PHONE = "phone"
