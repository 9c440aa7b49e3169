"""
The Single-User Recommendation Engine.

This module implements the recommendation pipeline for one user.
It combines three stages:
1. Discovery (Range Intersection) - Drops activities with no occurrence in the query window.
2. Calendar Fit (Conflict Detection) - Drops activities that clash with the user's bookings.
3. Affinity Ranking (Category Scoring) - Orders the survivors by category preference.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from models import ActivityCandidate, CalendarBooking, CategoryPreferences, ScoredActivity, as_utc
from .availability import filter_activities_available_in_range
from .conflicts import filter_available_activities
from .pagination import DEFAULT_LIMIT, MAX_LIMIT, Page, PaginationOptions, paginate
from .scoring import rank_by_category

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7


def resolve_window(
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Fill in a missing query window: start defaults to now, end to start + window_days."""
    start = as_utc(range_start or now or datetime.now(timezone.utc))
    end = as_utc(range_end) if range_end else start + timedelta(days=window_days)
    return start, end


def rank_for_user(
    candidates: Iterable[ActivityCandidate],
    preferences: Optional[CategoryPreferences],
    calendar: Optional[Sequence[CalendarBooking]],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> List[ScoredActivity]:
    """
    Execute the recommendation pipeline and return the full ranked list.

    Each candidate is checked against the fixed calendar on its own; candidates
    never block each other.
    """
    start, end = resolve_window(range_start, range_end, window_days, now)
    logger.info(f"Filtering activities from {start.isoformat()} to {end.isoformat()}")

    # 1. Activities without availability can never be booked
    bookable = [c for c in candidates if c.availability is not None]

    # 2. Discovery
    in_range = filter_activities_available_in_range(bookable, start, end)
    logger.info(f"Found {len(in_range)} of {len(bookable)} activities available in date range")

    # 3. Calendar fit
    conflict_free = filter_available_activities(in_range, calendar or [])
    logger.info(f"Found {len(conflict_free)} activities without calendar conflicts")

    # 4. Affinity
    ranked = rank_by_category(conflict_free, preferences or {})
    for activity in ranked:
        logger.debug(f"Activity {activity.id} - Score: {activity.score:.2f}")

    return ranked


def recommend_for_user(
    candidates: Iterable[ActivityCandidate],
    preferences: Optional[CategoryPreferences],
    calendar: Optional[Sequence[CalendarBooking]],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    pagination: Optional[PaginationOptions] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> Page:
    """Rank, then slice the requested page out of the final ordering."""
    ranked = rank_for_user(candidates, preferences, calendar, range_start, range_end, window_days, now)
    return paginate(ranked, pagination, default_limit, max_limit)
