from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Course, LiveMeeting
from .repository import CourseRegistry, LiveMeetingRegistry


class MySQLCourseRegistry(CourseRegistry):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_id, title FROM courses WHERE course_id=%s", (course_id,))
            row = fetchone(cur)
            if not row:
                return None
            return Course(course_id=str(row["course_id"]), title=row["title"])


class MySQLLiveMeetingRegistry(LiveMeetingRegistry):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, live_meeting_id: str) -> Optional[LiveMeeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT live_meeting_id, title, scheduled_date FROM live_meetings WHERE live_meeting_id=%s",
                (live_meeting_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return LiveMeeting(
                live_meeting_id=str(row["live_meeting_id"]),
                title=row["title"],
                scheduled_date=row.get("scheduled_date"),
            )
