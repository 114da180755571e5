from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_id: str
    title: str


@dataclass(frozen=True)
class LiveMeeting:
    live_meeting_id: str
    title: str
    scheduled_date: Optional[datetime] = None
