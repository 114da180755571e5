from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.clock import CivilClock
from ..core.enums import AttendanceStatus, AttendanceType, ScanMethod
from ..core.exceptions import DuplicateForDay, ScopeNotFound, UniqueViolation
from ..identity.claim import ResolvedIdentity
from ..scopes.repository import CourseRegistry, LiveMeetingRegistry
from .model import AttendanceRecord, NewAttendance, Scope
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Persist verified attendance, at most once per user, scope and civil day.

    The pre-check keeps the common double-scan cheap; the storage uniqueness
    constraints close the race between concurrent submissions, and a clash
    there is reported exactly like the pre-check.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        courses: CourseRegistry,
        live_meetings: LiveMeetingRegistry,
        clock: CivilClock,
    ):
        self._attendance = attendance
        self._courses = courses
        self._live_meetings = live_meetings
        self._clock = clock

    def _check_scope(self, scope: Scope) -> AttendanceType:
        attendance_type = scope.attendance_type
        if attendance_type == AttendanceType.COURSE and not self._courses.get_by_id(scope.course_id):
            raise ScopeNotFound("Course not found")
        if attendance_type == AttendanceType.LIVE_MEETING and not self._live_meetings.get_by_id(scope.live_meeting_id):
            raise ScopeNotFound("Live meeting not found")
        return attendance_type

    def record(
        self,
        resolved: ResolvedIdentity,
        scope: Scope,
        *,
        scan_method: ScanMethod,
        scanned_by: str,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
        location: Optional[str] = None,
        claim_payload: Optional[Mapping[str, Any]] = None,
    ) -> AttendanceRecord:
        attendance_type = self._check_scope(scope)

        now = self._clock.now()
        day_start, day_end = self._clock.day_window(now)

        existing = self._attendance.find_valid_in_window(
            user_id=resolved.user_id, scope=scope, start=day_start, end=day_end
        )
        if existing:
            logger.debug("Duplicate attendance for user %s on %s", resolved.user_id, day_start.date())
            raise DuplicateForDay()

        new = NewAttendance(
            user_id=resolved.user_id,
            course_id=scope.course_id,
            live_meeting_id=scope.live_meeting_id,
            attendance_type=attendance_type,
            scanned_by=str(scanned_by),
            scan_method=scan_method,
            status=status or AttendanceStatus.PRESENT,
            attendance_date=now,
            civil_day=now.date(),
            claim_payload=dict(claim_payload or {}),
            scan_location=location,
            notes=notes,
            **resolved.snapshot(),
        )
        try:
            record = self._attendance.create(new)
        except UniqueViolation:
            logger.debug("Day-key clash for user %s on %s", resolved.user_id, new.civil_day)
            raise DuplicateForDay() from None

        logger.info(
            "Attendance %s recorded: user=%s type=%s method=%s status=%s by=%s",
            record.record_id,
            record.user_id,
            record.attendance_type.value,
            record.scan_method.value,
            record.status.value,
            record.scanned_by,
        )
        return record
