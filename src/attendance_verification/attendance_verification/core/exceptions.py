from __future__ import annotations

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class RecordNotFound(DomainError):
    """Raised when an attendance record id does not exist."""

    status_code = 404


class GroupNotFound(DomainError):
    """Raised when a student group id does not exist."""

    status_code = 404


class UniqueViolation(Exception):
    """Raised by repositories when a storage uniqueness constraint fires."""


class AttendanceRejected(DomainError):
    """An attendance submission was turned down for a client-correctable reason."""

    reason: RejectionReason
    default_message = "Attendance rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class Incomplete(AttendanceRejected):
    reason = RejectionReason.INCOMPLETE
    default_message = "QR data incomplete or invalid - user ID or phone number required"


class NotFound(AttendanceRejected):
    reason = RejectionReason.NOT_FOUND
    status_code = 404
    default_message = "User not found"


class IdentityMismatch(AttendanceRejected):
    reason = RejectionReason.IDENTITY_MISMATCH
    default_message = "Submitted data does not match user data"


class Expired(AttendanceRejected):
    reason = RejectionReason.EXPIRED
    default_message = "QR code expired, please generate a new one"


class ScopeNotFound(AttendanceRejected):
    reason = RejectionReason.SCOPE_NOT_FOUND
    status_code = 404
    default_message = "Course or live meeting not found"


class ConflictingScope(AttendanceRejected):
    reason = RejectionReason.CONFLICTING_SCOPE
    default_message = "Attendance can target a course or a live meeting, not both"


class DuplicateForDay(AttendanceRejected):
    reason = RejectionReason.DUPLICATE_FOR_DAY
    status_code = 409
    default_message = "Attendance already recorded for today"


class NoCodeFound(AttendanceRejected):
    reason = RejectionReason.NO_CODE_FOUND
    default_message = "No QR code detected in image"


class Undecodable(AttendanceRejected):
    reason = RejectionReason.UNDECODABLE
    default_message = "QR decoded but missing userId/phoneNumber"


REJECTIONS_BY_REASON: dict[RejectionReason, type[AttendanceRejected]] = {
    cls.reason: cls
    for cls in (
        Incomplete,
        NotFound,
        IdentityMismatch,
        Expired,
        ScopeNotFound,
        ConflictingScope,
        DuplicateForDay,
        NoCodeFound,
        Undecodable,
    )
}
