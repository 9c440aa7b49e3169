"""
Category Affinity Scoring for the Activity Recommender.

Unlike the availability checks (binary Yes/No), this provides a gradient
(0.0 - 1.0) describing how well an activity's category matches what a user
said they like:
- Direct subcategory match: 1.0
- Related interest (preferences sharing the activity's parent): 0.5, +0.1 per
  extra shared preference, capped at 1.0
- Otherwise: 0.0
"""

from typing import Iterable, List

from models import ActivityCandidate, CategoryPreferences, ScoredActivity

EXACT_MATCH_SCORE = 1.0
SHARED_PARENT_BASE = 0.5
SHARED_PARENT_STEP = 0.1
MAX_SCORE = 1.0


def category_score(activity: ActivityCandidate, preferences: CategoryPreferences) -> float:
    """Score one activity against one user's preference map."""
    if activity.category_id in preferences:
        return EXACT_MATCH_SCORE

    parent = activity.parent_category_id
    if parent is None:
        return 0.0

    shared_count = sum(1 for pref_parent in preferences.values() if pref_parent == parent)
    if shared_count == 0:
        return 0.0
    return min(SHARED_PARENT_BASE + SHARED_PARENT_STEP * (shared_count - 1), MAX_SCORE)


def score_activity(activity: ActivityCandidate, preferences: CategoryPreferences) -> ScoredActivity:
    return ScoredActivity.model_validate({
        **dict(activity),
        "score": category_score(activity, preferences),
    })


def rank_by_category(activities: Iterable[ActivityCandidate], preferences: CategoryPreferences) -> List[ScoredActivity]:
    """
    Attach a score to each activity and sort descending.
    The sort is stable: equal scores keep their input order.
    """
    scored = [score_activity(a, preferences) for a in activities]
    scored.sort(key=lambda a: a.score, reverse=True)
    return scored
