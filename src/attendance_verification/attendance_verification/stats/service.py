from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.clock import CivilClock
from ..core.constants import DEFAULT_DASHBOARD_DAYS, DEFAULT_EXPECTED_DAYS
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class UserStats:
    total_attendance: int
    present_count: int
    late_count: int
    absent_count: int
    by_type: Dict[str, int]
    total_expected_days: int
    attendance_rate: int

    def to_dict(self) -> dict:
        return {
            "totalAttendance": self.total_attendance,
            "presentCount": self.present_count,
            "lateCount": self.late_count,
            "absentCount": self.absent_count,
            "byType": dict(self.by_type),
            "totalExpectedDays": self.total_expected_days,
            "attendanceRate": self.attendance_rate,
        }


@dataclass(frozen=True)
class Dashboard:
    start: datetime
    end: datetime
    overall: dict
    daily_trend: List[dict] = field(default_factory=list)
    by_type: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "range": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "overallStats": dict(self.overall),
            "dailyTrend": list(self.daily_trend),
            "byType": list(self.by_type),
        }


def _status_counts(rows: Sequence[AttendanceRecord]) -> Counter:
    return Counter(r.status for r in rows)


class AttendanceStatsService:
    """Per-user and dashboard rollups over valid attendance records.

    Date inputs are civil dates: a start date means the first instant of that
    day, an end date its last instant, both in the clock's timezone, and trend
    buckets are civil days. This is the same day definition the recorder uses
    for duplicate detection.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        clock: CivilClock,
        *,
        default_expected_days: int = DEFAULT_EXPECTED_DAYS,
        dashboard_days: int = DEFAULT_DASHBOARD_DAYS,
    ):
        self._attendance = attendance
        self._clock = clock
        self._default_expected_days = int(default_expected_days)
        self._dashboard_days = max(int(dashboard_days), 1)

    def _bounds(self, start_date: Optional[date], end_date: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate")
        start = self._clock.start_of_date(start_date) if start_date else None
        end = self._clock.end_of_date(end_date) if end_date else None
        return start, end

    def stats_for_user(
        self,
        user_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        expected_days: Optional[int] = None,
    ) -> UserStats:
        """Counts for one user; rate = present / expected days.

        ``expected_days`` defaults to 30. It is a proxy, not an eligibility
        count: there is no class calendar to derive the real figure from.
        """
        denominator = self._default_expected_days if expected_days is None else int(expected_days)
        if denominator < 1:
            raise ValidationError("expectedDays must be positive")

        start, end = self._bounds(start_date, end_date)
        rows = self._attendance.list_valid_between(start=start, end=end, user_id=str(user_id))

        statuses = _status_counts(rows)
        types = Counter(r.attendance_type for r in rows)
        present = statuses[AttendanceStatus.PRESENT]

        return UserStats(
            total_attendance=len(rows),
            present_count=present,
            late_count=statuses[AttendanceStatus.LATE],
            absent_count=statuses[AttendanceStatus.ABSENT],
            by_type={t.value: types[t] for t in AttendanceType},
            total_expected_days=denominator,
            attendance_rate=round(present * 100 / denominator),
        )

    def dashboard(self, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dashboard:
        today = self._clock.civil_date()
        start, end = self._bounds(start_date, end_date)
        if end is None:
            end = self._clock.end_of_date(today)
        if start is None:
            # dashboard_days civil days, today included.
            first_day = self._clock.civil_date(end) - timedelta(days=self._dashboard_days - 1)
            start = self._clock.start_of_date(first_day)

        rows = self._attendance.list_valid_between(start=start, end=end)
        statuses = _status_counts(rows)

        overall = {
            "totalRecords": len(rows),
            "presentCount": statuses[AttendanceStatus.PRESENT],
            "lateCount": statuses[AttendanceStatus.LATE],
            "absentCount": statuses[AttendanceStatus.ABSENT],
            "uniqueUserCount": len({r.user_id for r in rows}),
        }

        per_day: Dict[date, List[AttendanceRecord]] = {}
        for r in rows:
            per_day.setdefault(self._clock.civil_date(r.attendance_date), []).append(r)
        daily_trend = [
            {
                "date": day.isoformat(),
                "count": len(day_rows),
                "presentCount": sum(1 for r in day_rows if r.status == AttendanceStatus.PRESENT),
            }
            for day, day_rows in sorted(per_day.items())
        ]

        types = Counter(r.attendance_type for r in rows)
        by_type = [{"type": t.value, "count": types[t]} for t in AttendanceType if types[t]]

        return Dashboard(start=start, end=end, overall=overall, daily_trend=daily_trend, by_type=by_type)
