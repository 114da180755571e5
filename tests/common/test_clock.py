from datetime import date, datetime, timezone

from fakes import MovableNow, make_clock
from src.attendance_verification.attendance_verification.common.clock import CivilClock


def test_now_is_in_configured_timezone():
    clock = make_clock(MovableNow(datetime(2026, 1, 15, 10, 0)))
    now = clock.now()
    assert now.utcoffset().total_seconds() == 2 * 3600
    assert (now.hour, now.minute) == (10, 0)


def test_day_window_spans_the_civil_day():
    clock = CivilClock("Africa/Cairo")
    start, end = clock.day_window(datetime(2026, 1, 15, 13, 45))

    assert start == clock.to_civil(datetime(2026, 1, 15, 0, 0, 0))
    assert (end.hour, end.minute, end.second) == (23, 59, 59)
    assert end.date() == date(2026, 1, 15)


def test_aware_utc_time_maps_to_next_civil_day():
    clock = CivilClock("Africa/Cairo")
    late_utc = datetime(2026, 1, 14, 23, 30, tzinfo=timezone.utc)

    assert clock.civil_date(late_utc) == date(2026, 1, 15)
    assert clock.start_of_day(late_utc).date() == date(2026, 1, 15)


def test_month_boundaries_handle_leap_february():
    clock = CivilClock("Africa/Cairo")
    t = datetime(2028, 2, 10, 9, 0)

    assert clock.start_of_month(t).date() == date(2028, 2, 1)
    assert clock.end_of_month(t).date() == date(2028, 2, 29)
    start, end = clock.month_window(t)
    assert start < clock.to_civil(t) < end


def test_end_of_date_is_last_instant_of_that_day():
    clock = CivilClock("UTC")
    end = clock.end_of_date(date(2026, 3, 1))
    assert end == datetime(2026, 3, 1, 23, 59, 59, 999999, tzinfo=end.tzinfo)
