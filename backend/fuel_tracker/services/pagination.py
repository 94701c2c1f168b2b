from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def display_page(self) -> int:
        # An empty collection still has one (empty) page, shown as "Page 0 of 1".
        return 0 if self.total_items == 0 else self.page

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def label(self) -> str:
        return f"Page {self.display_page} of {self.total_pages}"


def total_pages(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(page, 1), pages)


def paginate(items: Sequence[T], *, page_size: int, page: int = 1) -> Page[T]:
    """Slice an already sorted collection; out-of-range page numbers are clamped."""
    pages = total_pages(len(items), page_size)
    current = clamp_page(page, pages)
    offset = (current - 1) * page_size
    return Page(
        items=list(items[offset : offset + page_size]),
        page=current,
        total_pages=pages,
        total_items=len(items),
        page_size=page_size,
    )


class PageView(Generic[T]):
    """Cursor over a loaded collection. Loading new data goes back to the first page."""

    def __init__(self, *, page_size: int, items: Sequence[T] = ()) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self._items: list[T] = list(items)
        self._page = 1

    def load(self, items: Sequence[T]) -> Page[T]:
        self._items = list(items)
        self._page = 1
        return self.current()

    def current(self) -> Page[T]:
        return paginate(self._items, page_size=self.page_size, page=self._page)

    def go_to(self, page: int) -> Page[T]:
        self._page = clamp_page(page, total_pages(len(self._items), self.page_size))
        return self.current()

    def next(self) -> Page[T]:
        return self.go_to(self._page + 1)

    def previous(self) -> Page[T]:
        return self.go_to(self._page - 1)
