"""
Time-interval primitives.

Every containment and conflict check in the engine is built from the two
overlap predicates below. Overlap is open-interval:
    start < other_end AND other_start < end
so intervals that merely touch (end == start) do not overlap.
"""

from datetime import date as date_type, datetime, time as time_type, timedelta, timezone
from typing import Iterator, Tuple, Union

from models import TimeWindow, as_utc

MINUTES_PER_DAY = 24 * 60


def minutes_of_day(value: Union[str, time_type, datetime]) -> int:
    """Minutes since midnight of an 'HH:MM' string, a time or a datetime."""
    if isinstance(value, str):
        hours, minutes = value.split(":")[:2]
        return int(hours) * 60 + int(minutes)
    return value.hour * 60 + value.minute


def time_windows_overlap(event_start: datetime, event_end: datetime, window: TimeWindow) -> bool:
    """
    Compare an event's time of day against a daily window, ignoring the date.
    An event running past midnight keeps counting minutes into the next day.
    """
    start = as_utc(event_start)
    end = as_utc(event_end)
    start_min = minutes_of_day(start)
    end_min = minutes_of_day(end) + (end.date() - start.date()).days * MINUTES_PER_DAY
    return start_min < minutes_of_day(window.end) and minutes_of_day(window.start) < end_min


def date_intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Open-interval overlap of two instant ranges."""
    return a_start < b_end and b_start < a_end


def interval_contains(outer_start: datetime, outer_end: datetime, start: datetime, end: datetime) -> bool:
    """True if [start, end] lies entirely inside [outer_start, outer_end]."""
    return outer_start <= start and end <= outer_end


def window_on(day: date_type, window: TimeWindow) -> Tuple[datetime, datetime]:
    """Anchor a daily window to a concrete day on the reference clock."""
    return (
        datetime.combine(day, window.start, tzinfo=timezone.utc),
        datetime.combine(day, window.end, tzinfo=timezone.utc),
    )


def iter_days(first: date_type, last: date_type) -> Iterator[date_type]:
    """Each calendar day from first to last inclusive (nothing if last < first)."""
    for offset in range((last - first).days + 1):
        yield first + timedelta(days=offset)


def weekday_index(day: Union[date_type, datetime]) -> int:
    """0=Sunday ... 6=Saturday."""
    return day.isoweekday() % 7
