from datetime import date, datetime

import pytest

from src.attendance_verification.attendance_verification.attendance.model import Scope
from src.attendance_verification.attendance_verification.core.enums import AttendanceStatus, MatchedBy, ScanMethod
from src.attendance_verification.attendance_verification.core.exceptions import ValidationError
from src.attendance_verification.attendance_verification.identity.claim import ResolvedIdentity


@pytest.fixture
def seed(recorder, now, user_a, user_b, attendance_repo):
    a = ResolvedIdentity(user_a, MatchedBy.ID)
    b = ResolvedIdentity(user_b, MatchedBy.ID)

    def at(when, resolved, scope, status=None):
        now.set(when)
        return recorder.record(resolved, scope, scan_method=ScanMethod.MANUAL, scanned_by="staff-1", status=status)

    at(datetime(2026, 1, 10, 9, 0), a, Scope(course_id="c1"))
    at(datetime(2026, 1, 10, 18, 0), a, Scope(live_meeting_id="m1"), AttendanceStatus.LATE)
    at(datetime(2026, 1, 12, 9, 0), a, Scope(course_id="c1"))
    at(datetime(2026, 1, 12, 9, 30), b, Scope(course_id="c1"))
    dropped = at(datetime(2026, 1, 14, 9, 0), a, Scope(course_id="c2"))
    attendance_repo.set_validity(record_id=dropped.record_id, is_valid=False, invalid_reason="duplicate card")
    at(datetime(2026, 1, 14, 23, 59, 59), b, Scope(), AttendanceStatus.ABSENT)

    now.set(datetime(2026, 1, 15, 10, 0))


def test_user_stats_use_thirty_day_proxy(stats_service, seed):
    stats = stats_service.stats_for_user("u1")

    assert stats.total_attendance == 3
    assert (stats.present_count, stats.late_count, stats.absent_count) == (2, 1, 0)
    assert stats.by_type == {"course": 2, "live_meeting": 1, "general": 0}
    assert stats.total_expected_days == 30
    assert stats.attendance_rate == 7  # round(2 * 100 / 30)


def test_user_stats_with_range_and_expected_days(stats_service, seed):
    stats = stats_service.stats_for_user("u1", start_date=date(2026, 1, 11), end_date=date(2026, 1, 31), expected_days=4)

    assert stats.total_attendance == 1
    assert stats.attendance_rate == 25
    assert stats.to_dict()["totalExpectedDays"] == 4


def test_user_stats_reject_bad_input(stats_service):
    with pytest.raises(ValidationError):
        stats_service.stats_for_user("u1", expected_days=0)
    with pytest.raises(ValidationError):
        stats_service.stats_for_user("u1", start_date=date(2026, 2, 1), end_date=date(2026, 1, 1))


def test_user_without_records(stats_service):
    stats = stats_service.stats_for_user("nobody")
    assert stats.total_attendance == 0
    assert stats.attendance_rate == 0


def test_dashboard_defaults_to_thirty_civil_days_ending_today(stats_service, seed, clock):
    d = stats_service.dashboard()

    assert d.end == clock.end_of_date(date(2026, 1, 15))
    assert d.start == clock.start_of_date(date(2025, 12, 17))
    assert (d.end.date() - d.start.date()).days + 1 == 30
    assert d.overall == {
        "totalRecords": 5,
        "presentCount": 3,
        "lateCount": 1,
        "absentCount": 1,
        "uniqueUserCount": 2,
    }


def test_dashboard_trend_buckets_by_civil_day(stats_service, seed):
    trend = stats_service.dashboard().daily_trend

    assert trend == [
        {"date": "2026-01-10", "count": 2, "presentCount": 1},
        {"date": "2026-01-12", "count": 2, "presentCount": 2},
        {"date": "2026-01-14", "count": 1, "presentCount": 0},
    ]


def test_dashboard_by_type_skips_empty_types(stats_service, seed):
    d = stats_service.dashboard(start_date=date(2026, 1, 11), end_date=date(2026, 1, 13))

    assert d.by_type == [{"type": "course", "count": 2}]
    assert d.to_dict()["overallStats"]["totalRecords"] == 2


def test_dashboard_default_window_edges(stats_service, recorder, now, user_a, user_b):
    now.set(datetime(2025, 12, 16, 23, 59, 59))
    recorder.record(ResolvedIdentity(user_a, MatchedBy.ID), Scope(), scan_method=ScanMethod.MANUAL, scanned_by="s")
    now.set(datetime(2025, 12, 17, 0, 0, 0))
    recorder.record(ResolvedIdentity(user_b, MatchedBy.ID), Scope(), scan_method=ScanMethod.MANUAL, scanned_by="s")
    now.set(datetime(2026, 1, 15, 10, 0))

    trend = stats_service.dashboard().daily_trend
    assert [row["date"] for row in trend] == ["2025-12-17"]
