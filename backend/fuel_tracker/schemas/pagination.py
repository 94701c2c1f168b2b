from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from fuel_tracker.services.pagination import Page


ItemT = TypeVar("ItemT")


class PageOut(BaseModel, Generic[ItemT]):
    items: list[ItemT]
    page: int = Field(ge=1)
    display_page: int = Field(ge=0)
    total_pages: int = Field(ge=1)
    total_items: int = Field(ge=0)
    page_size: int = Field(ge=1)
    has_previous: bool
    has_next: bool
    label: str


def page_out(page: Page, item_model: type[BaseModel]) -> PageOut:
    return PageOut[item_model](  # type: ignore[valid-type]
        items=[item_model.model_validate(item) for item in page.items],
        page=page.page,
        display_page=page.display_page,
        total_pages=page.total_pages,
        total_items=page.total_items,
        page_size=page.page_size,
        has_previous=page.has_previous,
        has_next=page.has_next,
        label=page.label,
    )
