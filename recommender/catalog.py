"""
Storage collaborator contract and an in-memory implementation.

The engine never talks to storage. The service layer fetches plain records
through a CatalogStore, reduces them to engine inputs, and rehydrates the
ranked ids afterwards.
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from models import CalendarBooking


class Category(BaseModel):
    """A marketplace category. Subcategories point at their parent."""
    id: int
    name: str = Field(min_length=1)
    parent_id: Optional[int] = Field(default=None, description="None for top-level categories")


class ActivityRecord(BaseModel):
    """Full activity as stored. Only id, category and availability reach the engine."""
    model_config = ConfigDict(extra="allow")

    id: int
    name: str = Field(min_length=1)
    category_id: int
    description: str = ""
    location: str = ""
    price: int = Field(default=0, ge=0, description="Price in cents")
    capacity: Optional[int] = Field(default=None, ge=1)
    vendor_id: Optional[int] = None
    availability: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Stored availability spec, kept raw so bad records stay loadable"
    )


class UserRecord(BaseModel):
    id: int
    name: str = ""
    preferences: List[int] = Field(default_factory=list, description="Preferred subcategory ids")
    calendar: List[CalendarBooking] = Field(default_factory=list)


class CatalogStore(Protocol):
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    def get_users(self, user_ids: Sequence[int]) -> List[UserRecord]: ...

    def get_category(self, category_id: int) -> Optional[Category]: ...

    def list_activities(self) -> List[ActivityRecord]: ...

    def get_activity(self, activity_id: int) -> Optional[ActivityRecord]: ...

    def get_activities(self, activity_ids: Sequence[int]) -> List[ActivityRecord]: ...

    def add_booking(self, booking: CalendarBooking) -> None: ...


class InMemoryCatalog:
    """Dictionary-backed CatalogStore used by the demo script and the tests."""

    def __init__(
        self,
        categories: Iterable[Category] = (),
        activities: Iterable[ActivityRecord] = (),
        users: Iterable[UserRecord] = (),
    ):
        # Index records for O(1) lookup
        self.categories = {c.id: c for c in categories}
        self.activities = {a.id: a for a in activities}
        self.users = {u.id: u for u in users}

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_users(self, user_ids: Sequence[int]) -> List[UserRecord]:
        return [self.users[uid] for uid in user_ids if uid in self.users]

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.categories.get(category_id)

    def list_activities(self) -> List[ActivityRecord]:
        return list(self.activities.values())

    def get_activity(self, activity_id: int) -> Optional[ActivityRecord]:
        return self.activities.get(activity_id)

    def get_activities(self, activity_ids: Sequence[int]) -> List[ActivityRecord]:
        return [self.activities[aid] for aid in activity_ids if aid in self.activities]

    def add_booking(self, booking: CalendarBooking) -> None:
        """Store a booking. A booking with the id of an existing one replaces it."""
        user = self.users[booking.user_id]
        calendar = [
            b for b in user.calendar
            if booking.id is None or b.id != booking.id
        ]
        self.users[user.id] = user.model_copy(update={"calendar": [*calendar, booking]})

    # --- Serialization (used for the JSON cache) ---

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryCatalog":
        return cls(
            categories=[Category(**item) for item in data.get("categories", [])],
            activities=[ActivityRecord(**item) for item in data.get("activities", [])],
            users=[UserRecord(**item) for item in data.get("users", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [c.model_dump(mode="json") for c in self.categories.values()],
            "activities": [a.model_dump(mode="json") for a in self.activities.values()],
            "users": [u.model_dump(mode="json") for u in self.users.values()],
        }
