from datetime import datetime
from typing import Any

from pydantic import Field

from admin_console.schemas.common import EntityBase

PROPERTY_STATUSES: tuple[str, ...] = ("pending", "active", "inactive", "rejected", "archived", "sold", "rented")
LISTING_TYPES: tuple[str, ...] = ("rent", "sale", "shortlet")


class Property(EntityBase):
    title: str | None = None
    listing_type: str | None = None
    property_type: str | None = None
    price: float | None = None
    currency: str = "NGN"
    featured: bool = False
    featured_until: datetime | None = None
    rejection_reason: str | None = None
    moderation_notes: str | None = None
    owner: dict[str, Any] | None = None
    images: list[Any] = Field(default_factory=list)

    @property
    def subtype(self) -> str | None:
        return self.listing_type
