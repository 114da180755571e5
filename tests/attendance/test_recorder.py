from datetime import datetime

import pytest

from src.attendance_verification.attendance_verification.attendance.model import Scope
from src.attendance_verification.attendance_verification.attendance.recorder import AttendanceRecorder
from src.attendance_verification.attendance_verification.core.enums import (
    AttendanceStatus,
    AttendanceType,
    MatchedBy,
    ScanMethod,
)
from src.attendance_verification.attendance_verification.core.exceptions import (
    ConflictingScope,
    DuplicateForDay,
    ScopeNotFound,
    UniqueViolation,
)
from src.attendance_verification.attendance_verification.identity.claim import ResolvedIdentity


@pytest.fixture
def resolved_a(user_a):
    return ResolvedIdentity(user_a, MatchedBy.ID)


def record(recorder, resolved, scope, **kwargs):
    kwargs.setdefault("scan_method", ScanMethod.QR_CODE)
    kwargs.setdefault("scanned_by", "staff-1")
    return recorder.record(resolved, scope, **kwargs)


def test_course_record_is_present_with_identity_snapshot(recorder, resolved_a):
    r = record(recorder, resolved_a, Scope(course_id="c1"))

    assert r.attendance_type == AttendanceType.COURSE
    assert r.status == AttendanceStatus.PRESENT
    assert r.is_valid
    assert (r.user_full_name, r.user_phone_number, r.user_email) == ("ahmed ali", "01012345678", "ahmed@example.com")
    assert r.civil_day.isoformat() == "2026-01-15"


def test_scope_decides_attendance_type():
    assert Scope(course_id="c1").attendance_type == AttendanceType.COURSE
    assert Scope(live_meeting_id="m1").attendance_type == AttendanceType.LIVE_MEETING
    assert Scope().attendance_type == AttendanceType.GENERAL


def test_meeting_and_general_records_carry_their_type(recorder, resolved_a, user_b):
    assert record(recorder, resolved_a, Scope(live_meeting_id="m1")).attendance_type == AttendanceType.LIVE_MEETING
    general = record(recorder, ResolvedIdentity(user_b, MatchedBy.ID), Scope())
    assert general.attendance_type == AttendanceType.GENERAL
    assert (general.course_id, general.live_meeting_id) == (None, None)


def test_unknown_course_or_meeting(recorder, resolved_a):
    with pytest.raises(ScopeNotFound, match="Course not found"):
        record(recorder, resolved_a, Scope(course_id="nope"))
    with pytest.raises(ScopeNotFound, match="Live meeting not found"):
        record(recorder, resolved_a, Scope(live_meeting_id="nope"))


def test_course_and_meeting_together_is_conflicting():
    with pytest.raises(ConflictingScope):
        Scope(course_id="c1", live_meeting_id="m1")


def test_second_record_same_course_same_day_is_duplicate(recorder, resolved_a, attendance_repo):
    record(recorder, resolved_a, Scope(course_id="c1"))
    with pytest.raises(DuplicateForDay):
        record(recorder, resolved_a, Scope(course_id="c1"), scan_method=ScanMethod.MANUAL)
    assert len(attendance_repo.records) == 1


def test_other_course_and_meeting_same_day_are_allowed(recorder, resolved_a, attendance_repo):
    record(recorder, resolved_a, Scope(course_id="c1"))
    record(recorder, resolved_a, Scope(course_id="c2"))
    record(recorder, resolved_a, Scope(live_meeting_id="m1"))
    assert len(attendance_repo.records) == 3


def test_general_attendance_is_blocked_by_any_record_that_day(recorder, resolved_a):
    record(recorder, resolved_a, Scope(course_id="c1"))
    with pytest.raises(DuplicateForDay):
        record(recorder, resolved_a, Scope())


def test_civil_midnight_separates_days(recorder, resolved_a, now, attendance_repo):
    now.set(datetime(2026, 1, 15, 23, 59, 59))
    record(recorder, resolved_a, Scope(course_id="c1"))

    now.set(datetime(2026, 1, 16, 0, 0, 1))
    second = record(recorder, resolved_a, Scope(course_id="c1"))

    assert second.civil_day.isoformat() == "2026-01-16"
    assert len(attendance_repo.records) == 2


def test_same_civil_day_is_duplicate_from_first_to_last_minute(recorder, resolved_a, now, attendance_repo):
    now.set(datetime(2026, 1, 15, 0, 0, 1))
    record(recorder, resolved_a, Scope(course_id="c1"))

    now.set(datetime(2026, 1, 15, 23, 59, 0))
    with pytest.raises(DuplicateForDay):
        record(recorder, resolved_a, Scope(course_id="c1"))
    assert len(attendance_repo.records) == 1


def test_invalidated_record_does_not_block(recorder, resolved_a, attendance_repo):
    first = record(recorder, resolved_a, Scope(course_id="c1"))
    attendance_repo.set_validity(record_id=first.record_id, is_valid=False, invalid_reason="wrong person")

    again = record(recorder, resolved_a, Scope(course_id="c1"))
    assert again.record_id != first.record_id


def test_storage_clash_is_reported_as_duplicate(courses, meetings, clock, resolved_a):
    class ClashingStore:
        def find_valid_in_window(self, **kwargs):
            return None

        def create(self, new):
            raise UniqueViolation("Duplicate entry")

    recorder = AttendanceRecorder(ClashingStore(), courses, meetings, clock)
    with pytest.raises(DuplicateForDay):
        record(recorder, resolved_a, Scope(course_id="c1"))


def test_explicit_status_and_metadata_are_kept(recorder, resolved_a):
    r = record(
        recorder,
        resolved_a,
        Scope(course_id="c1"),
        scan_method=ScanMethod.MANUAL,
        status=AttendanceStatus.LATE,
        notes="bus delay",
        location="Hall B",
        claim_payload={"method": "phone_and_id"},
    )

    assert r.status == AttendanceStatus.LATE
    assert r.scan_method == ScanMethod.MANUAL
    assert (r.notes, r.scan_location) == ("bus delay", "Hall B")
    assert r.claim_payload == {"method": "phone_and_id"}
