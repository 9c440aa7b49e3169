"""
Calendar data models for the Activity Recommender.

A CalendarBooking is a slot a user has already committed to. The engine only
reads bookings; creating and deleting them belongs to the storage layer.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .activity import CategoryPreferences
from .availability import as_utc


class CalendarBooking(BaseModel):
    """A committed block of time in a user's calendar."""

    id: Optional[int] = Field(default=None, description="Booking identifier, if persisted")
    user_id: int = Field(description="Owner of the booking")
    activity_id: Optional[int] = Field(default=None, description="Linked activity, if any")
    start: datetime = Field(description="Start instant")
    end: datetime = Field(description="End instant")

    @field_validator('start', 'end')
    @classmethod
    def normalise_clock(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode='after')
    def validate_order(self):
        if self.end < self.start:
            raise ValueError("Booking end cannot be before its start")
        return self

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": 42,
            "user_id": 7,
            "activity_id": 3,
            "start": "2024-08-05T14:30:00Z",
            "end": "2024-08-05T15:00:00Z"
        }
    })


class UserProfile(BaseModel):
    """Everything group ranking needs to know about one member."""
    user_id: int
    category_preferences: CategoryPreferences = Field(default_factory=dict)
    calendar: List[CalendarBooking] = Field(default_factory=list)
