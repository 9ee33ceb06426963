from __future__ import annotations

from typing import Any, Generic, List, Sequence, TypeVar

from sqlalchemy.orm import Query

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Page(Generic[T]):
    """One slice of a listing plus the total count of matching rows."""

    __slots__ = ("total", "page", "page_size", "items")

    def __init__(self, total: int, page: int, page_size: int, items: List[T]):
        self.total = total
        self.page = page
        self.page_size = page_size
        self.items = items


def like_pattern(search: str | None) -> str | None:
    clean_search = (search or "").strip()
    if not clean_search:
        return None
    escaped = clean_search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def paginate(query: Query, *, page: int, page_size: int, order_by: Sequence[Any]) -> Page:
    """Count and slice the same filtered query.

    ``order_by`` must end with a unique column so rows never move between pages.
    """
    total = query.order_by(None).count()
    offset = (page - 1) * page_size
    rows = query.order_by(*order_by).limit(page_size).offset(offset).all()
    return Page(total=int(total), page=page, page_size=page_size, items=rows)
