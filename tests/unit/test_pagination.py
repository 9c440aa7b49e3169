from recommender.pagination import PaginationOptions, normalize_pagination, paginate


def test_normalize_defaults():
    assert normalize_pagination() == (1, 10)
    assert normalize_pagination(PaginationOptions(page=0, limit=0)) == (1, 10)


def test_normalize_clamps():
    assert normalize_pagination(PaginationOptions(page=-3, limit=500)) == (1, 100)
    assert normalize_pagination(PaginationOptions(limit=-5)) == (1, 1)
    assert normalize_pagination(PaginationOptions(limit=40), default_limit=5, max_limit=20) == (1, 20)


def test_paginate_last_partial_page():
    page = paginate(list(range(25)), PaginationOptions(page=3, limit=10))

    assert page.data == [20, 21, 22, 23, 24]
    assert page.pagination.total == 25
    assert page.pagination.total_pages == 3
    assert not page.pagination.has_next
    assert page.pagination.has_prev


def test_paginate_first_page_has_next():
    page = paginate(list(range(25)), PaginationOptions(limit=10))
    assert page.data == list(range(10))
    assert page.pagination.has_next
    assert not page.pagination.has_prev


def test_paginate_past_the_end_is_empty():
    page = paginate(list(range(25)), PaginationOptions(page=9, limit=10))
    assert page.data == []
    assert page.pagination.total == 25
    assert page.pagination.page == 9


def test_paginate_empty():
    page = paginate([])
    assert page.data == []
    assert page.pagination.total == 0
    assert page.pagination.total_pages == 0
    assert not page.pagination.has_next
    assert not page.pagination.has_prev
