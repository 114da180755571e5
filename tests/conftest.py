from __future__ import annotations

from datetime import datetime

import pytest

from fakes import (
    HEX_ID_B,
    InMemoryAttendance,
    InMemoryCourses,
    InMemoryGroups,
    InMemoryMeetings,
    InMemoryUsers,
    MovableNow,
    make_clock,
)
from src.attendance_verification.attendance_verification.attendance.enrichment import RecordEnricher
from src.attendance_verification.attendance_verification.attendance.recorder import AttendanceRecorder
from src.attendance_verification.attendance_verification.attendance.service import AttendanceService
from src.attendance_verification.attendance_verification.core.enums import Role
from src.attendance_verification.attendance_verification.groups.model import Group
from src.attendance_verification.attendance_verification.identity.resolver import IdentityResolver
from src.attendance_verification.attendance_verification.identity.verifier import ClaimVerifier
from src.attendance_verification.attendance_verification.scopes.model import Course, LiveMeeting
from src.attendance_verification.attendance_verification.stats.service import AttendanceStatsService
from src.attendance_verification.attendance_verification.users.model import User


@pytest.fixture
def now():
    # 2026-01-15 10:00 Cairo (UTC+2, no DST in January)
    return MovableNow(datetime(2026, 1, 15, 10, 0, 0))


@pytest.fixture
def clock(now):
    return make_clock(now)


@pytest.fixture
def user_a():
    return User(
        user_id="u1",
        full_name="ahmed ali",
        phone_number="01012345678",
        email="ahmed@example.com",
        role=Role.USER,
        student_id="STU2024001",
    )


@pytest.fixture
def user_b():
    return User(
        user_id=HEX_ID_B,
        full_name="mona hassan",
        phone_number="01198765432",
        email=None,
        role=Role.USER,
    )


@pytest.fixture
def users(user_a, user_b):
    return InMemoryUsers([user_a, user_b])


@pytest.fixture
def courses():
    return InMemoryCourses({"c1": Course(course_id="c1", title="Algebra"), "c2": Course(course_id="c2", title="Physics")})


@pytest.fixture
def meetings():
    return InMemoryMeetings({"m1": LiveMeeting(live_meeting_id="m1", title="Weekly review")})


@pytest.fixture
def groups(user_a):
    return InMemoryGroups({"g1": Group(group_id="g1", name="Group A", member_ids=(user_a.user_id,))})


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def recorder(attendance_repo, courses, meetings, clock):
    return AttendanceRecorder(attendance_repo, courses, meetings, clock)


@pytest.fixture
def service(attendance_repo, users, courses, meetings, groups, recorder, clock):
    return AttendanceService(
        attendance_repo,
        IdentityResolver(users),
        ClaimVerifier(clock, freshness_minutes=60),
        recorder,
        clock,
        enricher=RecordEnricher(courses, meetings, users),
        groups=groups,
    )


@pytest.fixture
def stats_service(attendance_repo, clock):
    return AttendanceStatsService(attendance_repo, clock)
