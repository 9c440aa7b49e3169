"""
Activity models for the Activity Recommender.

An ActivityCandidate is the slice of a marketplace activity the engine ranks:
identity, category placement and availability. Price, description and vendor
stay with the storage layer and are rehydrated by the caller after ranking.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from recommender.errors import MalformedAvailability
from .availability import AvailabilitySpec, parse_availability

logger = logging.getLogger(__name__)

# Preferred subcategory id -> its parent category id (None for top-level)
CategoryPreferences = Dict[int, Optional[int]]


class ActivityCandidate(BaseModel):
    """A bookable activity reduced to what ranking needs."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Activity identifier")
    category_id: int = Field(description="Subcategory the activity is listed under")
    parent_category_id: Optional[int] = Field(
        default=None,
        description="Parent of category_id, None when the category is top-level"
    )
    availability: Optional[AvailabilitySpec] = Field(
        default=None,
        description="When the activity can be booked"
    )

    @field_validator('availability', mode='before')
    @classmethod
    def degrade_malformed(cls, v, info: ValidationInfo):
        """Discovery never fails on bad stored data: the activity just has no slots."""
        if v is None:
            return None
        try:
            return parse_availability(v)
        except MalformedAvailability as e:
            logger.warning(f"Ignoring availability of activity {info.data.get('id')}: {e.reason}")
            return None


class ScoredActivity(ActivityCandidate):
    """Candidate annotated with its category affinity for one user."""
    score: float = Field(ge=0.0, le=1.0, description="Category affinity score")


class GroupScoredActivity(ActivityCandidate):
    """Candidate annotated with its coverage and affinity for a group."""
    available_users: List[int] = Field(
        default_factory=list,
        description="Users for whom the activity is in range and conflict-free"
    )
    availability_count: int = Field(ge=0, description="len(available_users)")
    aggregated_category_score: float = Field(
        ge=0.0, le=1.0,
        description="Mean category score over the available users"
    )
    final_score: float = Field(description="availability_count * 1000 + aggregated score")
