"""
Generic page slicing for ranked results.

Ranking always works on the full candidate list; pagination is applied to the
final ordering only, so page boundaries never change the scores.
"""

import math
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationOptions(BaseModel):
    page: Optional[int] = Field(default=None, description="Page number (starts from 1)")
    limit: Optional[int] = Field(default=None, description="Number of items per page")


class PageInfo(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Page(BaseModel):
    data: List[Any] = Field(default_factory=list)
    pagination: PageInfo


def normalize_pagination(
    options: Optional[PaginationOptions] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> Tuple[int, int]:
    """Clamp to page >= 1 and 1 <= limit <= max_limit. Zero or missing values take the defaults."""
    options = options or PaginationOptions()
    page = max(1, options.page or DEFAULT_PAGE)
    limit = min(max(1, options.limit or default_limit), max_limit)
    return page, limit


def build_page(data: List[Any], total: int, page: int, limit: int) -> Page:
    total_pages = math.ceil(total / limit)
    return Page(
        data=data,
        pagination=PageInfo(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )


def paginate(
    items: Sequence[Any],
    options: Optional[PaginationOptions] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> Page:
    """Slice a fully ranked list. Pages past the end come back empty with correct metadata."""
    page, limit = normalize_pagination(options, default_limit, max_limit)
    skip = (page - 1) * limit
    return build_page(list(items[skip:skip + limit]), len(items), page, limit)
