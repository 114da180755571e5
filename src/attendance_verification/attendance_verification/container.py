from __future__ import annotations

from dataclasses import dataclass

from .attendance.channels.factory import ChannelFactory
from .attendance.enrichment import RecordEnricher
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.recorder import AttendanceRecorder
from .attendance.service import AttendanceService
from .common.clock import CivilClock
from .core.constants import DEFAULT_EXPECTED_DAYS, DEFAULT_TIMEZONE, FRESHNESS_WINDOW_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .groups.mysql_group_repository import MySQLGroupRegistry
from .identity.resolver import IdentityResolver
from .identity.verifier import ClaimVerifier
from .qr.decoder import QRDecoder
from .scopes.mysql_scope_repository import MySQLCourseRegistry, MySQLLiveMeetingRegistry
from .stats.service import AttendanceStatsService
from .users.mysql_user_repository import MySQLUserDirectory


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: CivilClock

    users_repo: MySQLUserDirectory
    courses_repo: MySQLCourseRegistry
    live_meetings_repo: MySQLLiveMeetingRegistry
    groups_repo: MySQLGroupRegistry
    attendance_repo: MySQLAttendanceRepository

    attendance_service: AttendanceService
    stats_service: AttendanceStatsService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    freshness_minutes: int = FRESHNESS_WINDOW_MINUTES,
    default_expected_days: int = DEFAULT_EXPECTED_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    clock = CivilClock(timezone)

    users_repo = MySQLUserDirectory(conn)
    courses_repo = MySQLCourseRegistry(conn)
    live_meetings_repo = MySQLLiveMeetingRegistry(conn)
    groups_repo = MySQLGroupRegistry(conn)
    attendance_repo = MySQLAttendanceRepository(conn, clock)

    recorder = AttendanceRecorder(attendance_repo, courses_repo, live_meetings_repo, clock)
    attendance_service = AttendanceService(
        attendance_repo,
        IdentityResolver(users_repo),
        ClaimVerifier(clock, freshness_minutes=freshness_minutes),
        recorder,
        clock,
        decoder=QRDecoder(),
        channels=ChannelFactory(),
        enricher=RecordEnricher(courses_repo, live_meetings_repo, users_repo),
        groups=groups_repo,
    )
    stats_service = AttendanceStatsService(attendance_repo, clock, default_expected_days=default_expected_days)

    return Container(
        conn=conn,
        clock=clock,
        users_repo=users_repo,
        courses_repo=courses_repo,
        live_meetings_repo=live_meetings_repo,
        groups_repo=groups_repo,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
        stats_service=stats_service,
    )
