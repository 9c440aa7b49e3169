"""
Availability data models for the Activity Recommender.

An activity advertises when it can be booked through exactly one of four shapes:
1. Dates   (explicit one-off occurrences)
2. Range   (every day inside a date interval)
3. Weekly  (chosen weekdays inside a date interval)
4. Monthly (chosen days of the month inside a date interval)

All instants live on a single reference clock (UTC). Weekdays are indexed
0=Sunday ... 6=Saturday.
"""

from datetime import date as date_type, datetime, time as time_type, timezone
from typing import Annotated, Any, List, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from recommender.errors import MalformedAvailability

AVAILABILITY_TYPES = ("dates", "range", "weekly", "monthly")


def as_utc(value: datetime) -> datetime:
    """Pin an instant to the reference clock. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _coerce_instant(value: Any) -> Any:
    # A bare calendar date means midnight on the reference clock
    if isinstance(value, date_type) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value


class TimeWindow(BaseModel):
    """A daily window in HH:MM. Overnight windows are not supported."""
    model_config = ConfigDict(frozen=True)

    start: time_type = Field(description="Window opens (HH:MM)")
    end: time_type = Field(description="Window closes (HH:MM)")

    @model_validator(mode='after')
    def validate_times(self):
        if self.start >= self.end:
            raise ValueError("Window end time must be strictly after start time")
        return self

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


class DateInterval(BaseModel):
    """Inclusive pair of instants bounding where a recurrence applies."""
    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="First instant covered")
    end: datetime = Field(description="Last instant covered")

    @field_validator('start', 'end', mode='before')
    @classmethod
    def coerce_dates(cls, v):
        return _coerce_instant(v)

    @field_validator('start', 'end')
    @classmethod
    def normalise_clock(cls, v: datetime) -> datetime:
        return as_utc(v)

    @model_validator(mode='after')
    def validate_order(self):
        if self.end < self.start:
            raise ValueError("Interval end cannot be before its start")
        return self


class DatedWindow(BaseModel):
    """One explicit occurrence: a calendar date plus a daily window."""
    model_config = ConfigDict(frozen=True)

    date: datetime = Field(description="Day of the occurrence (time part ignored)")
    time: TimeWindow

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v):
        return _coerce_instant(v)

    @field_validator('date')
    @classmethod
    def normalise_clock(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def day(self) -> date_type:
        return self.date.date()


class RecurringWindow(BaseModel):
    """Payload of the 'range' shape: every day of the interval, same window."""
    model_config = ConfigDict(frozen=True)

    date: DateInterval
    time: TimeWindow


class WeeklyRecurrence(RecurringWindow):
    days: List[int] = Field(description="Weekday indexes: 0=Sunday, ..., 6=Saturday")

    @field_validator('days')
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("Weekday indexes must be between 0 (Sunday) and 6 (Saturday)")
        return v


class MonthlyRecurrence(RecurringWindow):
    days: List[int] = Field(description="Day of month indexes: 1-31")

    @field_validator('days')
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        if any(d < 1 or d > 31 for d in v):
            raise ValueError("Days of month must be between 1 and 31")
        return v


class _AvailabilityBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    exclusions: List[datetime] = Field(
        default_factory=list,
        description="Instants that are never bookable, whatever the shape says"
    )

    @field_validator('exclusions')
    @classmethod
    def normalise_exclusions(cls, v: List[datetime]) -> List[datetime]:
        return [as_utc(x) for x in v]


class DatesAvailability(_AvailabilityBase):
    type: Literal["dates"] = "dates"
    dates: List[DatedWindow] = Field(description="Specific dates with time slots")


class RangeAvailability(_AvailabilityBase):
    type: Literal["range"] = "range"
    range: RecurringWindow = Field(description="Date interval with a daily window")


class WeeklyAvailability(_AvailabilityBase):
    type: Literal["weekly"] = "weekly"
    weekly: WeeklyRecurrence = Field(description="Weekly recurring pattern")


class MonthlyAvailability(_AvailabilityBase):
    type: Literal["monthly"] = "monthly"
    monthly: MonthlyRecurrence = Field(description="Monthly recurring pattern")

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "type": "monthly",
            "monthly": {
                "days": [1, 15],
                "date": {"start": "2024-08-01T00:00:00Z", "end": "2024-12-31T23:59:59Z"},
                "time": {"start": "08:00", "end": "10:00"}
            },
            "exclusions": ["2024-09-01T08:00:00Z"]
        }
    })


AvailabilitySpec = Annotated[
    Union[DatesAvailability, RangeAvailability, WeeklyAvailability, MonthlyAvailability],
    Field(discriminator="type"),
]

_VARIANTS = (DatesAvailability, RangeAvailability, WeeklyAvailability, MonthlyAvailability)
_SPEC_ADAPTER = TypeAdapter(AvailabilitySpec)


def parse_availability(raw: Any) -> AvailabilitySpec:
    """
    Build an AvailabilitySpec from a stored record.

    Raises MalformedAvailability when the type tag is missing or unknown, or
    when the declared shape has no (or an invalid) payload.
    """
    if isinstance(raw, _VARIANTS):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedAvailability("Availability is missing")

    kind = raw.get("type")
    if kind not in AVAILABILITY_TYPES:
        raise MalformedAvailability(f"Unrecognized availability type {kind!r}")
    if raw.get(kind) is None:
        raise MalformedAvailability(f"Availability type '{kind}' has no {kind} payload")

    try:
        return _SPEC_ADAPTER.validate_python(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise MalformedAvailability(
            f"Invalid {kind} availability at {location}: {first['msg']}"
        ) from e
