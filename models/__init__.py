"""
Data models package for the Activity Recommender.

This package exports the three pillars of the data architecture:
1. Availability (when an activity can be booked)
2. Demand (activities and their category placement)
3. Calendar (bookings users already hold, per-user profiles)
"""

from .availability import (
    AVAILABILITY_TYPES,
    AvailabilitySpec,
    DateInterval,
    DatedWindow,
    DatesAvailability,
    MonthlyAvailability,
    MonthlyRecurrence,
    RangeAvailability,
    RecurringWindow,
    TimeWindow,
    WeeklyAvailability,
    WeeklyRecurrence,
    as_utc,
    parse_availability,
)

from .activity import (
    ActivityCandidate,
    CategoryPreferences,
    GroupScoredActivity,
    ScoredActivity,
)

from .booking import (
    CalendarBooking,
    UserProfile,
)

__all__ = [
    # --- Availability Models ---
    "AVAILABILITY_TYPES",
    "AvailabilitySpec",
    "DateInterval",
    "DatedWindow",
    "DatesAvailability",
    "MonthlyAvailability",
    "MonthlyRecurrence",
    "RangeAvailability",
    "RecurringWindow",
    "TimeWindow",
    "WeeklyAvailability",
    "WeeklyRecurrence",
    "as_utc",
    "parse_availability",

    # --- Demand Models ---
    "ActivityCandidate",
    "CategoryPreferences",
    "GroupScoredActivity",
    "ScoredActivity",

    # --- Calendar Models ---
    "CalendarBooking",
    "UserProfile",
]
