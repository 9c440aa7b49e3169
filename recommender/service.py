"""
Recommendation and booking services.

Thin orchestration over the engine: fetch records from the catalog, reduce
them to engine inputs, rank, then rehydrate full activity records for the
ranked ids only and paginate.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models import ActivityCandidate, CalendarBooking, CategoryPreferences, UserProfile
from .catalog import ActivityRecord, CatalogStore, UserRecord
from .conflicts import check_booking
from .engine import rank_for_user, resolve_window
from .errors import BookingRejected, GroupSizeError, NotFoundError
from .group import MIN_GROUP_SIZE, recommend_for_group
from .pagination import Page, PaginationOptions, paginate
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

TOP_RECOMMENDATIONS_LOGGED = 10


def build_candidates(store: CatalogStore) -> List[ActivityCandidate]:
    """Reduce stored activities to engine candidates, dropping those with no availability."""
    candidates = []
    for record in store.list_activities():
        if record.availability is None:
            continue
        category = store.get_category(record.category_id)
        candidates.append(ActivityCandidate(
            id=record.id,
            category_id=record.category_id,
            parent_category_id=category.parent_id if category else None,
            availability=record.availability,
        ))
    return candidates


def resolve_preferences(store: CatalogStore, user: UserRecord) -> CategoryPreferences:
    """Map each preferred subcategory to its parent; unknown categories count as top-level."""
    preferences: CategoryPreferences = {}
    for category_id in user.preferences:
        category = store.get_category(category_id)
        preferences[category_id] = category.parent_id if category else None
    return preferences


class RecommendationService:
    """Single-user and group recommendations over a catalog."""

    def __init__(self, store: CatalogStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def user_recommendations(
        self,
        user_id: int,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        pagination: Optional[PaginationOptions] = None,
    ) -> Page:
        logger.info(f"Getting recommendations for user {user_id}")

        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        ranked = rank_for_user(
            build_candidates(self.store),
            resolve_preferences(self.store, user),
            user.calendar,
            range_start,
            range_end,
            window_days=self.settings.window_days,
        )
        records = self._rehydrate(
            [(r.id, {"score": r.score}) for r in ranked]
        )

        page = self._paginate(records, pagination)
        logger.info(f"Returning {len(page.data)} recommendations for user {user_id}")
        return page

    def group_recommendations(
        self,
        user_ids: Sequence[int],
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        pagination: Optional[PaginationOptions] = None,
    ) -> Page:
        if len(user_ids) < MIN_GROUP_SIZE:
            raise GroupSizeError(
                f"At least {MIN_GROUP_SIZE} users are required for group recommendations"
            )

        start, end = resolve_window(range_start, range_end, self.settings.window_days)
        logger.info(
            f"Starting group recommendations for {len(user_ids)} users: {list(user_ids)} "
            f"from {start.isoformat()} to {end.isoformat()}"
        )

        profiles = self._build_profiles(user_ids)
        candidates = build_candidates(self.store)
        logger.info(f"Found {len(candidates)} activities to evaluate")

        ranked = recommend_for_group(
            candidates, profiles, start, end, min_participants=self.settings.min_participants
        )
        logger.info(f"Generated {len(ranked)} group recommendations")

        for rank, rec in enumerate(ranked[:TOP_RECOMMENDATIONS_LOGGED], start=1):
            logger.info(
                f"Rank {rank}: Activity {rec.id} - "
                f"Available Users: {rec.availability_count}/{len(user_ids)} {rec.available_users} - "
                f"Category Score: {rec.aggregated_category_score:.3f} - "
                f"Final Score: {rec.final_score:.1f}"
            )

        records = self._rehydrate([
            (rec.id, {"group_score": {
                "available_users": rec.available_users,
                "availability_count": rec.availability_count,
                "aggregated_category_score": rec.aggregated_category_score,
                "final_score": rec.final_score,
            }})
            for rec in ranked
        ])
        return self._paginate(records, pagination)

    def _build_profiles(self, user_ids: Sequence[int]) -> List[UserProfile]:
        users = self.store.get_users(user_ids)
        if len(users) != len(set(user_ids)):
            found = {u.id for u in users}
            missing = sorted(set(user_ids) - found)
            raise NotFoundError(f"Users not found: {missing}")

        profiles = []
        for user in users:
            preferences = resolve_preferences(self.store, user)
            logger.info(
                f"User {user.id}: {len(preferences)} preferred categories {sorted(preferences)}, "
                f"{len(user.calendar)} calendar events"
            )
            profiles.append(UserProfile(
                user_id=user.id,
                category_preferences=preferences,
                calendar=user.calendar,
            ))
        return profiles

    def _rehydrate(self, ranked: List[Tuple[int, Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """Fetch full records for the ranked ids, keeping rank order and attaching the scores."""
        if not ranked:
            return []
        full = {a.id: a for a in self.store.get_activities([aid for aid, _ in ranked])}
        return [
            {**full[aid].model_dump(mode="json"), **extra}
            for aid, extra in ranked
            if aid in full
        ]

    def _paginate(self, records: List[Dict[str, Any]], pagination: Optional[PaginationOptions]) -> Page:
        return paginate(
            records,
            pagination,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size,
        )


class BookingService:
    """Validates bookings against activity availability and the user's calendar."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def _get_activity(self, activity_id: int) -> ActivityRecord:
        activity = self.store.get_activity(activity_id)
        if not activity:
            raise NotFoundError(f"Activity {activity_id} not found")
        return activity

    def validate(
        self,
        user_id: int,
        activity_id: Optional[int],
        start: datetime,
        end: datetime,
        booking_id: Optional[int] = None,
    ) -> None:
        """
        Raise BookingRejected if the slot is not offered or collides with the
        user's other bookings. Bookings without an activity are not checked.
        """
        if activity_id is None:
            return

        activity = self._get_activity(activity_id)
        user = self.store.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        violation = check_booking(activity.availability, start, end, user.calendar, booking_id=booking_id)
        if violation:
            logger.info(f"Rejected booking of activity {activity_id} for user {user_id}: {violation.reason}")
            raise BookingRejected(violation)

    def book(
        self,
        user_id: int,
        activity_id: Optional[int],
        start: datetime,
        end: datetime,
        booking_id: Optional[int] = None,
    ) -> CalendarBooking:
        """Validate, then hand the booking to the catalog for storage."""
        if not self.store.get_user(user_id):
            raise NotFoundError(f"User {user_id} not found")
        self.validate(user_id, activity_id, start, end, booking_id=booking_id)
        booking = CalendarBooking(
            id=booking_id, user_id=user_id, activity_id=activity_id, start=start, end=end
        )
        self.store.add_booking(booking)
        return booking
