"""
Availability Evaluation Logic.

This module answers two questions about an activity's availability:
1. Containment: "Can a booking from X to Y be made?" (booking validation)
2. Intersection: "Does the activity happen at all between X and Y?" (discovery)

Containment explains its rejections; intersection degrades to False on bad data.
"""

import logging
from dataclasses import dataclass
from datetime import date as date_type, datetime
from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, TypeVar

from models import (
    AvailabilitySpec,
    DatesAvailability,
    RecurringWindow,
    TimeWindow,
    as_utc,
    parse_availability,
)
from .errors import MalformedAvailability
from .intervals import (
    date_intervals_overlap,
    interval_contains,
    iter_days,
    weekday_index,
    window_on,
)

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

T = TypeVar("T")


@dataclass(frozen=True)
class AvailabilityViolation:
    """Detailed reason for rejection."""
    constraint_type: str  # e.g. "Excluded", "DateRange", "Weekday", "TimeWindow"
    reason: str


class Occurrence(NamedTuple):
    """A concrete slot implied by an availability spec."""
    start: datetime
    end: datetime


# --- Containment (booking validation) ---

def check_interval(availability: Any, start: datetime, end: datetime) -> Optional[AvailabilityViolation]:
    """
    Master validation function. Returns None if [start, end] fits entirely inside
    an advertised occurrence, a violation object otherwise.
    """
    try:
        spec = parse_availability(availability)
    except MalformedAvailability as e:
        return AvailabilityViolation("Malformed", e.reason)

    start = as_utc(start)
    end = as_utc(end)

    if end < start:
        return AvailabilityViolation("Interval", "End must not be before start")

    # 1. Exclusions override every shape
    if start in spec.exclusions:
        return AvailabilityViolation("Excluded", f"Excluded date: {start.isoformat()}")

    # 2. Shape specific rules
    if isinstance(spec, DatesAvailability):
        return _check_dates(spec, start, end)

    payload: RecurringWindow = getattr(spec, spec.type)
    if not interval_contains(payload.date.start, payload.date.end, start, end):
        return AvailabilityViolation(
            "DateRange",
            f"Outside date range {payload.date.start.isoformat()} - {payload.date.end.isoformat()}"
        )

    if spec.type == "weekly" and weekday_index(start) not in payload.days:
        return AvailabilityViolation(
            "Weekday", f"Weekday mismatch: {WEEKDAY_NAMES[weekday_index(start)]} is not offered"
        )

    if spec.type == "monthly" and start.day not in payload.days:
        return AvailabilityViolation(
            "DayOfMonth", f"Day-of-month mismatch: day {start.day} is not offered"
        )

    return _check_time_window(payload.time, start, end)


def is_interval_valid(availability: Any, start: datetime, end: datetime) -> bool:
    return check_interval(availability, start, end) is None


def _check_dates(spec: DatesAvailability, start: datetime, end: datetime) -> Optional[AvailabilityViolation]:
    same_day = [entry for entry in spec.dates if entry.day == start.date()]
    if not same_day:
        return AvailabilityViolation("Date", f"Date mismatch: no availability on {start.date().isoformat()}")

    for entry in same_day:
        if _check_time_window(entry.time, start, end) is None:
            return None
    return _check_time_window(same_day[0].time, start, end)


def _check_time_window(window: TimeWindow, start: datetime, end: datetime) -> Optional[AvailabilityViolation]:
    """Window is anchored on the booking's start day, so a booking past midnight never fits."""
    slot_start, slot_end = window_on(start.date(), window)
    if interval_contains(slot_start, slot_end, start, end):
        return None
    return AvailabilityViolation("TimeWindow", f"Outside time window {window}")


# --- Intersection (discovery) ---

def matches_recurrence_day(spec: AvailabilitySpec, day: date_type) -> bool:
    """Does a recurring spec offer a slot on this calendar day?"""
    if spec.type == "weekly":
        return weekday_index(day) in spec.weekly.days
    if spec.type == "monthly":
        return day.day in spec.monthly.days
    return spec.type == "range"


def iter_occurrences(availability: Any, window_start: datetime, window_end: datetime) -> Iterator[Occurrence]:
    """
    Lazily yield the concrete occurrences that overlap [window_start, window_end].
    Recurring slots are clipped to the recurrence's own date interval.
    """
    spec = parse_availability(availability)
    window_start = as_utc(window_start)
    window_end = as_utc(window_end)

    if isinstance(spec, DatesAvailability):
        for entry in spec.dates:
            occ = Occurrence(*window_on(entry.day, entry.time))
            if date_intervals_overlap(occ.start, occ.end, window_start, window_end):
                yield occ
        return

    payload: RecurringWindow = getattr(spec, spec.type)
    first = max(window_start, payload.date.start).date()
    last = min(window_end, payload.date.end).date()

    for day in iter_days(first, last):
        if not matches_recurrence_day(spec, day):
            continue
        slot_start, slot_end = window_on(day, payload.time)
        occ = Occurrence(max(slot_start, payload.date.start), min(slot_end, payload.date.end))
        if occ.start < occ.end and date_intervals_overlap(occ.start, occ.end, window_start, window_end):
            yield occ


def is_available_in_range(availability: Any, range_start: datetime, range_end: datetime) -> bool:
    """True if at least one occurrence overlaps the range. Malformed specs have none."""
    if availability is None:
        return False
    try:
        return next(iter_occurrences(availability, range_start, range_end), None) is not None
    except MalformedAvailability as e:
        logger.debug(f"No occurrences for malformed availability: {e.reason}")
        return False


def filter_activities_available_in_range(activities: Iterable[T], range_start: datetime, range_end: datetime) -> List[T]:
    """Keep the activities (anything with an .availability) that happen inside the range."""
    return [
        a for a in activities
        if is_available_in_range(a.availability, range_start, range_end)
    ]
