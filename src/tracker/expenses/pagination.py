from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sqlalchemy.orm import Query

from src.tracker.expenses.config import DEFAULT_PAGE_SIZE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return self.page * self.size

    @classmethod
    def of(cls, page: int | None = None, size: int | None = None, *, default_size: int = DEFAULT_PAGE_SIZE, max_size: int = 100) -> "PageRequest":
        p = page if page is not None and page > 0 else 0
        s = size if size is not None and size > 0 else default_size
        return cls(page=p, size=max(1, min(s, max_size)))

    @classmethod
    def parse(cls, page: str = "", size: str = "", *, default_size: int = DEFAULT_PAGE_SIZE, max_size: int = 100) -> "PageRequest":
        """Builds a request from raw query strings; garbage falls back to the defaults."""
        return cls.of(_parse_int(page), _parse_int(size), default_size=default_size, max_size=max_size)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    number: int = 0
    size: int = DEFAULT_PAGE_SIZE
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    @property
    def number_of_elements(self) -> int:
        return len(self.items)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def paginate(query: Query, request: PageRequest) -> Page:
    """Runs `query` as one page; the query must already carry a total ordering."""
    total = query.order_by(None).count()
    items = query.offset(request.offset).limit(request.size).all() if request.offset < total else []
    return Page(items=items, number=request.page, size=request.size, total_elements=total)


def _parse_int(raw: str | None) -> int | None:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None
