from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from ..core.enums import AttendanceStatus, AttendanceType, ScanMethod
from ..core.exceptions import ConflictingScope


@dataclass(frozen=True)
class Scope:
    """What an attendance record applies to: a course, a live meeting, or neither."""

    course_id: Optional[str] = None
    live_meeting_id: Optional[str] = None

    def __post_init__(self):
        if self.course_id and self.live_meeting_id:
            raise ConflictingScope()

    @property
    def attendance_type(self) -> AttendanceType:
        if self.course_id:
            return AttendanceType.COURSE
        if self.live_meeting_id:
            return AttendanceType.LIVE_MEETING
        return AttendanceType.GENERAL


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one verified presence event."""

    record_id: int
    user_id: str
    course_id: Optional[str]
    live_meeting_id: Optional[str]
    attendance_type: AttendanceType
    scanned_by: str
    scan_method: ScanMethod
    status: AttendanceStatus
    attendance_date: datetime
    civil_day: date
    is_valid: bool = True
    invalid_reason: Optional[str] = None
    claim_payload: Mapping[str, Any] = field(default_factory=dict)
    scan_location: Optional[str] = None
    notes: Optional[str] = None
    user_full_name: Optional[str] = None
    user_phone_number: Optional[str] = None
    user_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Display fields, filled in from the registries when a record is shown.
    course_title: Optional[str] = None
    live_meeting_title: Optional[str] = None
    live_meeting_scheduled_date: Optional[datetime] = None
    scanned_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        course = None
        if self.course_id:
            course = {"id": self.course_id, "title": self.course_title}
        live_meeting = None
        if self.live_meeting_id:
            scheduled = self.live_meeting_scheduled_date
            live_meeting = {
                "id": self.live_meeting_id,
                "title": self.live_meeting_title,
                "scheduledDate": scheduled.isoformat() if scheduled else None,
            }
        return {
            "id": self.record_id,
            "user": {
                "id": self.user_id,
                "fullName": self.user_full_name,
                "phoneNumber": self.user_phone_number,
                "email": self.user_email,
            },
            "course": course,
            "liveMeeting": live_meeting,
            "attendanceType": self.attendance_type.value,
            "scannedBy": {"id": self.scanned_by, "fullName": self.scanned_by_name},
            "scanMethod": self.scan_method.value,
            "scanLocation": self.scan_location,
            "status": self.status.value,
            "notes": self.notes,
            "attendanceDate": self.attendance_date.isoformat(),
            "isValid": self.is_valid,
            "invalidReason": self.invalid_reason,
            "qrData": dict(self.claim_payload),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class NewAttendance:
    """Everything the recorder hands to storage for a new row."""

    user_id: str
    course_id: Optional[str]
    live_meeting_id: Optional[str]
    attendance_type: AttendanceType
    scanned_by: str
    scan_method: ScanMethod
    status: AttendanceStatus
    attendance_date: datetime
    civil_day: date
    claim_payload: Mapping[str, Any]
    scan_location: Optional[str] = None
    notes: Optional[str] = None
    user_full_name: Optional[str] = None
    user_phone_number: Optional[str] = None
    user_email: Optional[str] = None


@dataclass(frozen=True)
class AttendanceFilter:
    """Query filter for listing records; only valid records are ever listed."""

    user_id: Optional[str] = None
    # Any of these users; an empty tuple matches nothing.
    user_ids: Optional[Tuple[str, ...]] = None
    course_id: Optional[str] = None
    live_meeting_id: Optional[str] = None
    attendance_type: Optional[AttendanceType] = None
    status: Optional[AttendanceStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "docs": [r.to_dict() for r in self.items],
            "totalDocs": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }
