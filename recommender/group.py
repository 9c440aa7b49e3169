"""
Group Recommendation Ranking.

Activities are ranked for a set of users by:
1. Number of available users (descending)
2. Mean category score of those available users (descending)

The final score is availability_count * 1000 + aggregated score. The category
part is at most 1.0, so it only ever breaks ties between equally covered
activities.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from models import ActivityCandidate, GroupScoredActivity, UserProfile
from .availability import is_available_in_range
from .conflicts import has_conflict
from .errors import GroupSizeError
from .scoring import category_score

logger = logging.getLogger(__name__)

AVAILABILITY_WEIGHT = 1000
DEFAULT_MIN_PARTICIPANTS = 2
MIN_GROUP_SIZE = 2


def available_users(
    activity: ActivityCandidate,
    profiles: Sequence[UserProfile],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
) -> List[int]:
    """Users for whom the activity is inside the window (when given) and clashes with nothing."""
    if range_start and range_end:
        if not is_available_in_range(activity.availability, range_start, range_end):
            return []

    return [
        profile.user_id for profile in profiles
        if not has_conflict(activity.availability, profile.calendar)
    ]


def aggregated_category_score(activity: ActivityCandidate, profiles: Sequence[UserProfile]) -> float:
    """Mean category score over the given (available) profiles."""
    if not profiles:
        return 0.0
    total = sum(category_score(activity, p.category_preferences) for p in profiles)
    return total / len(profiles)


def recommend_for_group(
    activities: Iterable[ActivityCandidate],
    profiles: Sequence[UserProfile],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    min_participants: Optional[int] = None,
) -> List[GroupScoredActivity]:
    """
    Score every activity for the group and return the survivors sorted by final score.
    Raises GroupSizeError when fewer than two profiles are given.
    """
    if len(profiles) < MIN_GROUP_SIZE:
        raise GroupSizeError(
            f"At least {MIN_GROUP_SIZE} users are required for group recommendations, got {len(profiles)}"
        )
    min_participants = min_participants or DEFAULT_MIN_PARTICIPANTS

    scored: List[GroupScoredActivity] = []
    for activity in activities:
        users = available_users(activity, profiles, range_start, range_end)
        if len(users) < min_participants:
            continue

        members = [p for p in profiles if p.user_id in users]
        aggregated = aggregated_category_score(activity, members)
        scored.append(GroupScoredActivity.model_validate({
            **dict(activity),
            "available_users": users,
            "availability_count": len(users),
            "aggregated_category_score": aggregated,
            "final_score": len(users) * AVAILABILITY_WEIGHT + aggregated,
        }))

    scored.sort(key=lambda a: a.final_score, reverse=True)
    logger.debug(f"Group of {len(profiles)}: {len(scored)} activities with >= {min_participants} participants")
    return scored


def filter_by_minimum_participants(
    recommendations: Iterable[GroupScoredActivity], min_participants: int
) -> List[GroupScoredActivity]:
    return [r for r in recommendations if r.availability_count >= min_participants]


def activities_for_all_users(
    activities: Iterable[ActivityCandidate],
    profiles: Sequence[UserProfile],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
) -> List[GroupScoredActivity]:
    """Only activities every member can attend."""
    return recommend_for_group(activities, profiles, range_start, range_end, min_participants=len(profiles))


def group_by_participants(
    activities: Iterable[ActivityCandidate],
    profiles: Sequence[UserProfile],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
) -> Dict[int, List[GroupScoredActivity]]:
    """Buckets keyed by availability count, each sorted by aggregated category score."""
    grouped: Dict[int, List[GroupScoredActivity]] = defaultdict(list)
    for rec in recommend_for_group(activities, profiles, range_start, range_end, DEFAULT_MIN_PARTICIPANTS):
        grouped[rec.availability_count].append(rec)

    for bucket in grouped.values():
        bucket.sort(key=lambda a: a.aggregated_category_score, reverse=True)
    return dict(grouped)


def group_availability_stats(
    activities: Sequence[ActivityCandidate],
    profiles: Sequence[UserProfile],
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Coverage summary for the group.
    Counts every activity at least one member can attend.
    """
    recommendations = recommend_for_group(activities, profiles, range_start, range_end, min_participants=1)

    by_count: Dict[int, int] = defaultdict(int)
    for rec in recommendations:
        by_count[rec.availability_count] += 1

    total_availability = sum(rec.availability_count for rec in recommendations)
    average = total_availability / len(recommendations) if recommendations else 0.0

    return {
        "total_activities": len(activities),
        "activities_for_all_users": by_count.get(len(profiles), 0),
        "activities_by_participant_count": dict(sorted(by_count.items())),
        "average_availability": average,
    }
