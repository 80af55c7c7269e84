from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FeedbackKind = Literal["success", "error"]


class WireModel(BaseModel):
    """Base for payloads exchanged with the admin service (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class EntityBase(WireModel):
    id: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def subtype(self) -> str | None:
        return None


EntityT = TypeVar("EntityT", bound=EntityBase)


class PaginationMeta(WireModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def approximate(cls, *, page: int, page_size: int, item_count: int) -> PaginationMeta:
        has_next = item_count == page_size and item_count > 0
        total_items = (page - 1) * page_size + item_count
        total_pages = max(math.ceil(total_items / page_size), 1) if page_size else 1
        if has_next:
            total_pages += 1
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            items_per_page=page_size,
            has_next_page=has_next,
            has_prev_page=page > 1,
        )


class ListPage(BaseModel, Generic[EntityT]):
    items: list[EntityT] = Field(default_factory=list)
    pagination: PaginationMeta
    pagination_approximated: bool = False
    summary: dict[str, Any] | None = None


class MutationResult(WireModel):
    success: bool = True
    message: str | None = None
    data: dict[str, Any] | None = None
