"""
Calendar Conflict Detection.

Two related checks:
1. Does an activity's availability clash with anything a user already booked?
   (used to hide activities the user could not attend)
2. Does a new booking clash with the user's other bookings?
   (used when a booking is created or moved)
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from models import AvailabilitySpec, CalendarBooking, DatesAvailability, as_utc, parse_availability
from .availability import AvailabilityViolation, check_interval, matches_recurrence_day
from .errors import MalformedAvailability
from .intervals import date_intervals_overlap, time_windows_overlap, window_on

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _booking_overlaps(spec: AvailabilitySpec, booking: CalendarBooking) -> bool:
    """Overlap (not containment) between one booking and any occurrence of the availability."""
    if isinstance(spec, DatesAvailability):
        return any(
            date_intervals_overlap(*window_on(entry.day, entry.time), booking.start, booking.end)
            for entry in spec.dates
        )

    payload = getattr(spec, spec.type)
    if not date_intervals_overlap(payload.date.start, payload.date.end, booking.start, booking.end):
        return False
    if not matches_recurrence_day(spec, booking.start.date()):
        return False
    return time_windows_overlap(booking.start, booking.end, payload.time)


def has_conflict(availability: Any, bookings: Iterable[CalendarBooking]) -> bool:
    """True on the first booking that overlaps an occurrence of the availability."""
    if availability is None:
        return False
    try:
        spec = parse_availability(availability)
    except MalformedAvailability as e:
        logger.debug(f"Skipping conflict check for malformed availability: {e.reason}")
        return False
    return any(_booking_overlaps(spec, booking) for booking in bookings)


def filter_available_activities(activities: Iterable[T], bookings: Sequence[CalendarBooking]) -> List[T]:
    """Keep the activities (anything with an .availability) with zero overlap against the calendar."""
    if not bookings:
        return list(activities)
    return [a for a in activities if not has_conflict(a.availability, bookings)]


def find_booking_conflict(
    start: datetime,
    end: datetime,
    existing: Iterable[CalendarBooking],
    ignore_id: Optional[int] = None,
) -> Optional[CalendarBooking]:
    """
    Return the first existing booking that collides with [start, end].

    Checks partial overlap, new-covers-existing and existing-covers-new so that
    identical and zero-length intervals are caught as well.
    """
    start = as_utc(start)
    end = as_utc(end)

    for booking in existing:
        if ignore_id is not None and booking.id == ignore_id:
            continue

        overlaps = start < booking.end and booking.start < end
        covers = start <= booking.start and end >= booking.end
        inside = booking.start <= start and booking.end >= end
        if overlaps or covers or inside:
            return booking
    return None


def check_booking(
    availability: Any,
    start: datetime,
    end: datetime,
    existing: Iterable[CalendarBooking],
    booking_id: Optional[int] = None,
) -> Optional[AvailabilityViolation]:
    """
    Full validation for creating or moving a booking. Returns None if Valid.

    The activity must offer the slot, and the slot must be free in the user's
    calendar. Every other booking of the user counts, linked to an activity or not.
    """
    violation = check_interval(availability, start, end)
    if violation:
        return violation

    clash = find_booking_conflict(start, end, existing, ignore_id=booking_id)
    if clash:
        return AvailabilityViolation(
            "Conflict",
            f"Overlaps existing booking {clash.start.isoformat()} - {clash.end.isoformat()}"
        )
    return None
