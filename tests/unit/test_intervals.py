from datetime import date, datetime, time

from models import TimeWindow
from recommender.intervals import (
    date_intervals_overlap,
    interval_contains,
    iter_days,
    minutes_of_day,
    time_windows_overlap,
    weekday_index,
    window_on,
)
from tests.utils.factories import utc

MORNING = TimeWindow(start="10:00", end="12:00")


def test_minutes_of_day_accepts_strings_times_and_datetimes():
    assert minutes_of_day("09:30") == 570
    assert minutes_of_day(time(14, 5)) == 845
    assert minutes_of_day(utc(2024, 8, 1, 23, 59)) == 1439


def test_time_windows_overlap_ignores_the_date():
    assert time_windows_overlap(utc(2024, 8, 1, 11), utc(2024, 8, 1, 13), MORNING)
    assert time_windows_overlap(utc(2030, 1, 9, 9), utc(2030, 1, 9, 10, 1), MORNING)


def test_time_windows_touching_edges_do_not_overlap():
    assert not time_windows_overlap(utc(2024, 8, 1, 12), utc(2024, 8, 1, 13), MORNING)
    assert not time_windows_overlap(utc(2024, 8, 1, 9), utc(2024, 8, 1, 10), MORNING)


def test_time_windows_overlap_event_running_past_midnight():
    late = TimeWindow(start="23:30", end="23:59")
    # 23:00 -> 01:00 next day ends at minute 1500, not minute 60
    assert time_windows_overlap(utc(2024, 8, 1, 23), utc(2024, 8, 2, 1), late)


def test_date_intervals_overlap_is_open():
    assert date_intervals_overlap(utc(2024, 8, 1, 10), utc(2024, 8, 1, 11), utc(2024, 8, 1, 10, 30), utc(2024, 8, 1, 12))
    assert not date_intervals_overlap(utc(2024, 8, 1, 10), utc(2024, 8, 1, 11), utc(2024, 8, 1, 11), utc(2024, 8, 1, 12))


def test_interval_contains_includes_bounds():
    assert interval_contains(utc(2024, 8, 1, 10), utc(2024, 8, 1, 12), utc(2024, 8, 1, 10), utc(2024, 8, 1, 12))
    assert not interval_contains(utc(2024, 8, 1, 10), utc(2024, 8, 1, 12), utc(2024, 8, 1, 9, 59), utc(2024, 8, 1, 11))


def test_window_on_anchors_to_utc():
    start, end = window_on(date(2024, 8, 1), MORNING)
    assert start == utc(2024, 8, 1, 10)
    assert end == utc(2024, 8, 1, 12)


def test_iter_days_is_inclusive_and_crosses_months():
    days = list(iter_days(date(2024, 8, 30), date(2024, 9, 2)))
    assert days == [date(2024, 8, 30), date(2024, 8, 31), date(2024, 9, 1), date(2024, 9, 2)]
    assert list(iter_days(date(2024, 9, 2), date(2024, 9, 1))) == []


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2024, 8, 4)) == 0
    assert weekday_index(date(2024, 8, 5)) == 1
    assert weekday_index(datetime(2024, 8, 10, 18)) == 6
