from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGINATION = 10


@dataclass
class Page(Generic[T]):
    items: List[T]
    more_pages: bool


def paginate(items: Sequence[T], page: int = DEFAULT_PAGE, pagination: int = DEFAULT_PAGINATION) -> Page[T]:
    """1-based page slicing. Non-positive inputs fall back to the defaults."""
    page = page if page > 0 else DEFAULT_PAGE
    pagination = pagination if pagination > 0 else DEFAULT_PAGINATION
    start = pagination * (page - 1)
    end = pagination * page
    return Page(items=list(items[start:end]), more_pages=end < len(items))
