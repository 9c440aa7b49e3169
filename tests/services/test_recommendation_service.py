import pytest

from recommender.errors import GroupSizeError, NotFoundError
from recommender.pagination import PaginationOptions
from recommender.service import RecommendationService, build_candidates, resolve_preferences
from tests.utils.factories import utc

AUGUST_WEEK = (utc(2024, 8, 1), utc(2024, 8, 8))


@pytest.fixture()
def service(catalog, settings):
    return RecommendationService(catalog, settings)


def test_build_candidates_skips_activities_without_availability(catalog):
    candidates = build_candidates(catalog)

    assert [c.id for c in candidates] == [1, 2, 3, 5]
    assert [c.parent_category_id for c in candidates] == [1, 1, 2, 1]
    # Stored but unusable availability degrades to none
    assert candidates[-1].availability is None


def test_resolve_preferences_maps_to_parents(catalog):
    assert resolve_preferences(catalog, catalog.get_user(2)) == {12: 1, 21: 2}

    stranger = catalog.get_user(1).model_copy(update={"preferences": [99]})
    assert resolve_preferences(catalog, stranger) == {99: None}


def test_user_recommendations_returns_full_records_in_rank_order(service):
    page = service.user_recommendations(1, *AUGUST_WEEK)

    assert [item["id"] for item in page.data] == [1, 2, 3]
    assert [item["score"] for item in page.data] == [1.0, 0.5, 0.0]
    assert page.data[0]["name"] == "Tennis Clinic"
    assert page.data[0]["price"] == 2500
    assert page.pagination.total == 3


def test_user_recommendations_respect_the_calendar(service):
    page = service.user_recommendations(3, *AUGUST_WEEK)
    assert [item["id"] for item in page.data] == [1]


def test_user_recommendations_paginate(service):
    page = service.user_recommendations(1, *AUGUST_WEEK, pagination=PaginationOptions(page=2, limit=1))

    assert [item["id"] for item in page.data] == [2]
    assert page.pagination.total_pages == 3
    assert page.pagination.has_next
    assert page.pagination.has_prev


def test_user_recommendations_unknown_user(service):
    with pytest.raises(NotFoundError):
        service.user_recommendations(404, *AUGUST_WEEK)


def test_group_recommendations(service):
    page = service.group_recommendations([1, 2, 3], *AUGUST_WEEK)

    assert [item["id"] for item in page.data] == [1, 2, 3]
    top = page.data[0]["group_score"]
    assert top["available_users"] == [1, 2, 3]
    assert top["availability_count"] == 3
    assert top["aggregated_category_score"] == pytest.approx(0.5)
    assert page.data[1]["group_score"]["available_users"] == [1, 2]


def test_group_recommendations_needs_two_users(service):
    with pytest.raises(GroupSizeError):
        service.group_recommendations([1], *AUGUST_WEEK)


def test_group_recommendations_unknown_member(service):
    with pytest.raises(NotFoundError) as exc:
        service.group_recommendations([1, 404], *AUGUST_WEEK)
    assert "404" in str(exc.value)
