"""
Query helpers: filtering and pagination over already-fetched collections.

Filtering never reorders records and never mutates them, so applying the
same criteria twice yields the same result.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


@dataclass
class Page(Generic[T]):
    """One page of a filtered list."""
    items: List[T]
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def filter_records(records: Sequence[T], criteria: Any = None) -> List[T]:
    """
    Return the records matching the criteria, in input order.

    Args:
        records: Collection to filter
        criteria: Object with a ``matches(record)`` method, or None for all records
    """
    if criteria is None:
        return list(records)
    return [r for r in records if criteria.matches(r)]


def total_pages(count: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return math.ceil(count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp a requested page into ``1..pages`` (page 1 for an empty list)."""
    if pages < 1:
        return 1
    return max(1, min(page, pages))


def paginate(records: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """
    Slice one page out of a record list.

    Out-of-range page numbers are clamped rather than rejected.

    Raises:
        ValueError: If page_size is smaller than 1
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    count = len(records)
    pages = total_pages(count, page_size)
    page = clamp_page(page, pages)
    start = (page - 1) * page_size

    return Page(
        items=list(records[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_count=count,
        total_pages=pages,
    )


def query(records: Sequence[T], criteria: Any = None, page: int = 1,
          page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Filter then paginate."""
    return paginate(filter_records(records, criteria), page, page_size)


def page_numbers(current: int, total: int) -> List[Optional[int]]:
    """
    Page links for a pagination strip; None marks an ellipsis.

    Shows every page up to seven pages, otherwise the first and last page
    plus the neighbours of the current one.
    """
    if total <= 7:
        return list(range(1, total + 1))

    pages: List[Optional[int]] = [1]
    if current > 3:
        pages.append(None)
    for i in range(max(2, current - 1), min(total - 1, current + 1) + 1):
        pages.append(i)
    if current < total - 2:
        pages.append(None)
    pages.append(total)
    return pages


@dataclass
class ListView(Generic[T]):
    """
    Filter and page state of one list screen.

    Changing any criterion puts the view back on page 1, so a narrower
    filter never lands on an out-of-range empty page.
    """
    criteria: Any
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    _last_total_pages: int = field(default=0, repr=False)

    def set_criteria(self, criteria: Any) -> None:
        if criteria != self.criteria:
            self.criteria = criteria
            self.page = 1

    def update_criteria(self, **changes: Any) -> None:
        self.set_criteria(replace(self.criteria, **changes))

    def clear_criteria(self) -> None:
        self.set_criteria(type(self.criteria)())

    def set_page(self, page: int) -> None:
        self.page = clamp_page(page, self._last_total_pages) if self._last_total_pages else max(1, page)

    def result(self, records: Sequence[T]) -> Page[T]:
        current = query(records, self.criteria, self.page, self.page_size)
        self.page = current.page
        self._last_total_pages = current.total_pages
        return current
