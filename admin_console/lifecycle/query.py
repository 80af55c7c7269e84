from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PAGE_FIELDS = frozenset({"page"})
EMPTY_CHOICES = frozenset({"", "all"})

# wire name of the subtype filter per collection
SUBTYPE_PARAMS: dict[str, str] = {
    "properties": "listingType",
    "subscriptions": "billingCycle",
    "users": "role",
    "kyc": "documentType",
}


class FilterState(BaseModel):
    """Filter and pagination state of one list screen."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)
    status: str | None = None
    subtype: str | None = None
    search: str = ""
    featured_only: bool = False
    property_type: str | None = None
    plan_type: str | None = None
    auto_renew: bool | None = None

    def with_filters(self, **changes: Any) -> FilterState:
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"unknown filter fields: {sorted(unknown)}")
        filter_changes = {key: value for key, value in changes.items() if key not in PAGE_FIELDS}
        updated = self.model_copy(update=changes)
        if any(getattr(self, key) != value for key, value in filter_changes.items()):
            updated = updated.model_copy(update={"page": 1})
        return type(self).model_validate(updated.model_dump())

    def with_page(self, page: int) -> FilterState:
        return type(self).model_validate({**self.model_dump(), "page": page})

    def reset(self) -> FilterState:
        return type(self)(page_size=self.page_size)


def build_params(
    collection: str,
    filters: FilterState,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        "page": page if page is not None else filters.page,
        "limit": page_size if page_size is not None else filters.page_size,
    }

    search = filters.search.strip()
    if search:
        params["search"] = search
    if _has_choice(filters.status):
        params["status"] = filters.status
    if _has_choice(filters.subtype):
        params[SUBTYPE_PARAMS.get(collection, "type")] = filters.subtype
    if _has_choice(filters.property_type):
        params["propertyType"] = filters.property_type
    if _has_choice(filters.plan_type):
        params["planType"] = filters.plan_type
    if filters.auto_renew is not None:
        params["autoRenew"] = "true" if filters.auto_renew else "false"
    if filters.featured_only:
        params["featured"] = "true"
    return params


def params_key(params: dict[str, Any]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((key, str(value)) for key, value in params.items()))


def _has_choice(value: str | None) -> bool:
    return value is not None and value.strip() not in EMPTY_CHOICES
