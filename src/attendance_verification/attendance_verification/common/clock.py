from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Callable, Optional, Tuple

import pytz

from ..core.constants import DEFAULT_TIMEZONE


class CivilClock:
    """Clock/calendar adapter pinned to one configured timezone.

    Every "same day" / "this month" boundary in the package is computed here,
    so the duplicate window used when recording and the buckets used by
    statistics cannot drift apart.

    Naive datetimes are taken to be civil time already; aware ones are
    converted.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE, *, now_fn: Optional[Callable[[], datetime]] = None):
        self._tz = pytz.timezone(timezone)
        self._now_fn = now_fn

    @property
    def timezone(self):
        return self._tz

    def now(self) -> datetime:
        if self._now_fn is not None:
            return self.to_civil(self._now_fn())
        return datetime.now(self._tz)

    def to_civil(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return self._localize(value)
        return value.astimezone(self._tz)

    def civil_date(self, value: Optional[datetime] = None) -> date:
        return self.to_civil(value).date() if value is not None else self.now().date()

    def start_of_day(self, value: Optional[datetime] = None) -> datetime:
        return self._localize(datetime.combine(self.civil_date(value), time.min))

    def end_of_day(self, value: Optional[datetime] = None) -> datetime:
        return self._localize(datetime.combine(self.civil_date(value), time.max))

    def day_window(self, value: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        return self.start_of_day(value), self.end_of_day(value)

    def start_of_month(self, value: Optional[datetime] = None) -> datetime:
        d = self.civil_date(value)
        return self._localize(datetime.combine(d.replace(day=1), time.min))

    def end_of_month(self, value: Optional[datetime] = None) -> datetime:
        d = self.civil_date(value)
        last_day = calendar.monthrange(d.year, d.month)[1]
        return self._localize(datetime.combine(d.replace(day=last_day), time.max))

    def month_window(self, value: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        return self.start_of_month(value), self.end_of_month(value)

    def start_of_date(self, d: date) -> datetime:
        return self._localize(datetime.combine(d, time.min))

    def end_of_date(self, d: date) -> datetime:
        return self._localize(datetime.combine(d, time.max))

    def _localize(self, naive: datetime) -> datetime:
        # normalize() fixes wall times that fall inside a DST gap.
        return self._tz.normalize(self._tz.localize(naive))
