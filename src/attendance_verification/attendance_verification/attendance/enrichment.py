from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from ..scopes.repository import CourseRegistry, LiveMeetingRegistry
from ..users.repository import UserDirectory
from .model import AttendanceRecord

T = TypeVar("T")


def _memo(lookup: Callable[[str], Optional[T]]) -> Callable[[str], Optional[T]]:
    cache: Dict[str, Optional[T]] = {}

    def get(key: str) -> Optional[T]:
        if key not in cache:
            cache[key] = lookup(key)
        return cache[key]

    return get


class RecordEnricher:
    """Attach display fields to records before they are shown.

    Course title, live meeting title and date, and the scanner's name come from
    the registries. Each id is looked up once per ``enrich`` call, so a page of
    records costs one query per distinct course, meeting or scanner.
    """

    def __init__(
        self,
        courses: CourseRegistry,
        live_meetings: LiveMeetingRegistry,
        users: Optional[UserDirectory] = None,
    ):
        self._courses = courses
        self._live_meetings = live_meetings
        self._users = users

    def enrich(self, records: Iterable[AttendanceRecord]) -> List[AttendanceRecord]:
        course = _memo(self._courses.get_by_id)
        live_meeting = _memo(self._live_meetings.get_by_id)
        scanner = _memo(self._users.get_by_id) if self._users is not None else None

        out: List[AttendanceRecord] = []
        for r in records:
            changes = {}
            if r.course_id:
                c = course(r.course_id)
                if c:
                    changes["course_title"] = c.title
            if r.live_meeting_id:
                m = live_meeting(r.live_meeting_id)
                if m:
                    changes["live_meeting_title"] = m.title
                    changes["live_meeting_scheduled_date"] = m.scheduled_date
            if scanner is not None and r.scanned_by:
                u = scanner(r.scanned_by)
                if u:
                    changes["scanned_by_name"] = u.full_name
            out.append(replace(r, **changes) if changes else r)
        return out

    def enrich_one(self, record: AttendanceRecord) -> AttendanceRecord:
        return self.enrich([record])[0]
