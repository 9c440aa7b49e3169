import pytest

from models import parse_availability
from recommender.availability import (
    Occurrence,
    check_interval,
    filter_activities_available_in_range,
    is_available_in_range,
    is_interval_valid,
    iter_occurrences,
)
from recommender.errors import MalformedAvailability
from tests.utils.factories import (
    DATES_SPEC,
    MONTHLY_SPEC,
    RANGE_SPEC,
    WEEKLY_SPEC,
    make_candidate,
    utc,
)


# --- Containment ---

def test_dates_booking_inside_window_is_valid():
    assert check_interval(DATES_SPEC, utc(2024, 8, 1, 10, 30), utc(2024, 8, 1, 11, 30)) is None


def test_dates_booking_spilling_past_window_is_rejected():
    violation = check_interval(DATES_SPEC, utc(2024, 8, 1, 11), utc(2024, 8, 1, 12, 30))
    assert violation.constraint_type == "TimeWindow"
    assert "10:00-12:00" in violation.reason


def test_dates_booking_on_other_day_is_rejected():
    violation = check_interval(DATES_SPEC, utc(2024, 8, 2, 10, 30), utc(2024, 8, 2, 11))
    assert violation.constraint_type == "Date"


def test_dates_with_several_slots_on_one_day():
    spec = {
        "type": "dates",
        "dates": [
            {"date": "2024-08-01T00:00:00Z", "time": {"start": "08:00", "end": "09:00"}},
            {"date": "2024-08-01T00:00:00Z", "time": {"start": "18:00", "end": "20:00"}},
        ],
    }
    assert is_interval_valid(spec, utc(2024, 8, 1, 18), utc(2024, 8, 1, 19))
    assert not is_interval_valid(spec, utc(2024, 8, 1, 12), utc(2024, 8, 1, 13))


def test_range_booking_matching_window_exactly_is_valid():
    assert check_interval(RANGE_SPEC, utc(2024, 8, 3, 9), utc(2024, 8, 3, 17)) is None


def test_range_booking_after_interval_is_rejected():
    violation = check_interval(RANGE_SPEC, utc(2024, 8, 11, 10), utc(2024, 8, 11, 11))
    assert violation.constraint_type == "DateRange"


def test_range_booking_outside_daily_window_is_rejected():
    violation = check_interval(RANGE_SPEC, utc(2024, 8, 3, 8), utc(2024, 8, 3, 10))
    assert violation.constraint_type == "TimeWindow"


def test_booking_past_midnight_never_fits_a_daily_window():
    violation = check_interval(RANGE_SPEC, utc(2024, 8, 3, 16), utc(2024, 8, 4, 10))
    assert violation.constraint_type == "TimeWindow"


def test_exclusion_matches_the_exact_booking_start():
    violation = check_interval(RANGE_SPEC, utc(2024, 8, 5, 9, 30), utc(2024, 8, 5, 10))
    assert violation.constraint_type == "Excluded"

    # Same day, different start: still bookable
    assert check_interval(RANGE_SPEC, utc(2024, 8, 5, 10), utc(2024, 8, 5, 11)) is None


def test_weekly_booking_on_offered_weekday_is_valid():
    assert check_interval(WEEKLY_SPEC, utc(2024, 8, 5, 14, 30), utc(2024, 8, 5, 15)) is None


def test_weekly_booking_on_other_weekday_is_rejected():
    violation = check_interval(WEEKLY_SPEC, utc(2024, 8, 6, 14, 30), utc(2024, 8, 6, 15))
    assert violation.constraint_type == "Weekday"
    assert "Tuesday" in violation.reason


def test_weekly_booking_after_interval_is_rejected():
    violation = check_interval(WEEKLY_SPEC, utc(2024, 9, 2, 14, 30), utc(2024, 9, 2, 15))
    assert violation.constraint_type == "DateRange"


def test_monthly_booking_checks_day_of_month():
    assert check_interval(MONTHLY_SPEC, utc(2024, 8, 15, 8), utc(2024, 8, 15, 9)) is None
    assert check_interval(MONTHLY_SPEC, utc(2024, 8, 31, 9), utc(2024, 8, 31, 10)) is None

    violation = check_interval(MONTHLY_SPEC, utc(2024, 8, 14, 8), utc(2024, 8, 14, 9))
    assert violation.constraint_type == "DayOfMonth"


@pytest.mark.parametrize(
    "raw, reason",
    [
        (None, "Availability is missing"),
        ({"type": "yearly"}, "Unrecognized availability type 'yearly'"),
        ({"type": "weekly"}, "Availability type 'weekly' has no weekly payload"),
    ],
)
def test_malformed_availability_is_reported(raw, reason):
    violation = check_interval(raw, utc(2024, 8, 5, 14), utc(2024, 8, 5, 15))
    assert violation.constraint_type == "Malformed"
    assert violation.reason == reason


def test_check_interval_accepts_parsed_specs():
    spec = parse_availability(WEEKLY_SPEC)
    assert is_interval_valid(spec, utc(2024, 8, 9, 14), utc(2024, 8, 9, 16))


# --- Discovery ---

def test_weekly_discovery_respects_weekdays():
    # Tuesday only
    assert not is_available_in_range(WEEKLY_SPEC, utc(2024, 8, 6), utc(2024, 8, 6, 23, 59))
    assert is_available_in_range(WEEKLY_SPEC, utc(2024, 8, 5), utc(2024, 8, 6))


def test_range_discovery_over_several_days():
    # 08-09 slot is over by 18:00, but 08-10 still has one
    assert is_available_in_range(RANGE_SPEC, utc(2024, 8, 9, 18), utc(2024, 8, 12))
    assert not is_available_in_range(RANGE_SPEC, utc(2024, 8, 10, 18), utc(2024, 8, 15))


def test_dates_discovery_touching_range_does_not_count():
    assert not is_available_in_range(DATES_SPEC, utc(2024, 8, 1, 12), utc(2024, 8, 2))
    assert is_available_in_range(DATES_SPEC, utc(2024, 8, 1, 11, 59), utc(2024, 8, 2))


def test_discovery_without_or_with_broken_availability_is_false():
    assert not is_available_in_range(None, utc(2024, 8, 1), utc(2024, 8, 31))
    assert not is_available_in_range({"type": "monthly"}, utc(2024, 8, 1), utc(2024, 8, 31))


def test_iter_occurrences_weekly_over_a_month():
    occurrences = list(iter_occurrences(WEEKLY_SPEC, utc(2024, 8, 1), utc(2024, 9, 1)))

    # Mondays, Wednesdays and Fridays of August 2024
    assert len(occurrences) == 13
    assert occurrences[0] == Occurrence(utc(2024, 8, 2, 14), utc(2024, 8, 2, 16))
    assert occurrences[-1].start == utc(2024, 8, 30, 14)


def test_iter_occurrences_monthly():
    days = [occ.start.day for occ in iter_occurrences(MONTHLY_SPEC, utc(2024, 8, 1), utc(2024, 9, 30))]
    assert days == [1, 15, 31]


def test_iter_occurrences_clips_to_recurrence_interval():
    spec = {
        "type": "range",
        "range": {
            "date": {"start": "2024-08-09T00:00:00Z", "end": "2024-08-10T12:00:00Z"},
            "time": {"start": "09:00", "end": "17:00"},
        },
    }
    occurrences = list(iter_occurrences(spec, utc(2024, 8, 1), utc(2024, 8, 31)))
    assert occurrences == [
        Occurrence(utc(2024, 8, 9, 9), utc(2024, 8, 9, 17)),
        Occurrence(utc(2024, 8, 10, 9), utc(2024, 8, 10, 12)),
    ]


def test_iter_occurrences_raises_on_malformed():
    with pytest.raises(MalformedAvailability):
        list(iter_occurrences({"type": "dates"}, utc(2024, 8, 1), utc(2024, 8, 2)))


def test_filter_available_in_range_is_idempotent():
    candidates = [
        make_candidate(1, WEEKLY_SPEC),
        make_candidate(2, DATES_SPEC),
        make_candidate(3, None),
    ]
    once = filter_activities_available_in_range(candidates, utc(2024, 8, 5), utc(2024, 8, 12))
    twice = filter_activities_available_in_range(once, utc(2024, 8, 5), utc(2024, 8, 12))

    assert [c.id for c in once] == [1]
    assert twice == once


def test_reversed_interval_is_rejected():
    violation = check_interval(RANGE_SPEC, utc(2024, 8, 3, 15), utc(2024, 8, 3, 14, 30))

    assert violation.constraint_type == "Interval"
    assert not is_interval_valid(RANGE_SPEC, utc(2024, 8, 3, 15), utc(2024, 8, 3, 14, 30))


def test_dates_booking_before_window_is_rejected():
    violation = check_interval(DATES_SPEC, utc(2024, 8, 1, 9), utc(2024, 8, 1, 10))
    assert violation.constraint_type == "TimeWindow"


def test_weekly_booking_on_offered_day_outside_window_is_rejected():
    # Friday 2024-08-09, slot is 14:00-16:00
    violation = check_interval(WEEKLY_SPEC, utc(2024, 8, 9, 13), utc(2024, 8, 9, 14))
    assert violation.constraint_type == "TimeWindow"
