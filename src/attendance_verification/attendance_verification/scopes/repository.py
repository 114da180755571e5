from __future__ import annotations

from typing import Optional, Protocol

from .model import Course, LiveMeeting


class CourseRegistry(Protocol):
    def get_by_id(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError


class LiveMeetingRegistry(Protocol):
    def get_by_id(self, live_meeting_id: str) -> Optional[LiveMeeting]:
        raise NotImplementedError
